from alertmanager_hookshot.command import main

main()
