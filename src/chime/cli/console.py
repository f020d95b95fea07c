"""Shared console utilities for CLI commands."""

from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def error(msg: str) -> None:
    console.print(f"[red]{escape(msg)}[/red]")


def warning(msg: str) -> None:
    console.print(f"[yellow]{escape(msg)}[/yellow]")


def success(msg: str) -> None:
    console.print(f"[green]{escape(msg)}[/green]")


def dim(msg: str) -> None:
    console.print(f"[dim]{escape(msg)}[/dim]")


def create_table(title: str, columns: list[tuple[str, str]]) -> Table:
    """Create a table from (header, style) pairs."""
    table = Table(title=title)
    for name, style in columns:
        table.add_column(name, style=style or None)
    return table


def validation_errors(errors: Iterable[dict[str, Any]]) -> None:
    """Print pydantic validation errors as ``location: message`` lines."""
    error("Configuration validation failed:")
    for err in errors:
        loc = ".".join(str(x) for x in err["loc"])
        console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
