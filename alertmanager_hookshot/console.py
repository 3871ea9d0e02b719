"""Console output utilities with color formatting."""

from rich.console import Console
from rich.json import JSON
from rich.markup import escape

# Global console instance
_console = Console()


def print_dim(message: str) -> None:
    """Print a dim/debug message."""
    _console.print(f"[dim]{escape(message)}[/dim]")


def print_success(message: str) -> None:
    """Print a success message in green."""
    _console.print(f"[green]{escape(message)}[/green]")


def print_error(message: str) -> None:
    """Print an error message in red."""
    _console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)


def print_json(data: str) -> None:
    """Pretty-print a JSON document without wrapping long strings.

    Args:
        data: JSON-encoded text
    """
    _console.print(JSON(data), soft_wrap=True)
