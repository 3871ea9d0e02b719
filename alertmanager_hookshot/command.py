"""Alertmanager Hookshot CLI commands - entrypoint."""

import json
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from alertmanager_hookshot import console
from alertmanager_hookshot.app import create_app
from alertmanager_hookshot.models import AlertGroup, RelaySettings
from alertmanager_hookshot.render import render

app = typer.Typer(help="Alertmanager Hookshot - relay Alertmanager notifications to Matrix hookshot")


@app.command()
def serve(
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Listening address (default: $HOST or 0.0.0.0)",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        help="Listening port (default: $PORT or 3000)",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (default: $LOG_LEVEL or INFO)",
    ),
):
    """Run the webhook relay.

    Settings are read from the environment, and from a .env file in the
    working directory when present. UPSTREAM is required.

    Examples:

      # Relay to a local hookshot instance
      UPSTREAM=http://localhost:9000/webhook alertmanager-hookshot serve

      # Custom port
      alertmanager-hookshot serve -p 8080
    """
    load_dotenv(find_dotenv(usecwd=True))

    overrides = {
        key: value
        for key, value in {"host": host, "port": port, "log_level": log_level}.items()
        if value is not None
    }
    try:
        settings = RelaySettings(**overrides)
    except (ValidationError, ValueError) as e:
        console.print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)

    console.print_dim(f"Forwarding to {settings.upstream}")
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower() if settings.log_level != "SUCCESS" else "info",
    )


@app.command("render")
def render_payload(
    payload_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Alertmanager webhook payload (JSON)",
    ),
    silence_url: str = typer.Option(
        "",
        "--silence-url",
        "-s",
        help="Alertmanager base URL used for silence links",
    ),
):
    """Render a webhook payload and print the hookshot messages.

    Examples:

      alertmanager-hookshot render payload.json -s https://alertmanager.example.com/#/silences/new
    """
    try:
        group = AlertGroup.model_validate_json(payload_file.read_text())
    except ValidationError as e:
        console.print_error(f"Invalid payload: {e}")
        raise typer.Exit(code=1)

    records = render(group, silence_url)
    console.print_json(json.dumps([record.to_payload() for record in records]))
    console.print_success(f"Rendered {len(records)} message(s)")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
