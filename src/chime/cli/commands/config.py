"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import click
import typer

from chime.cli.console import (
    console,
    create_table,
    error,
    success,
    validation_errors,
)

ACTIONS = ("show", "validate")


def _require_file(path: Path) -> None:
    if not path.exists():
        error(f"Config file not found: {path}")
        raise typer.Exit(1)


def _show(path: Path) -> None:
    from rich.syntax import Syntax

    _require_file(path)
    console.print(f"[bold]Config file: {path}[/bold]\n")
    console.print(Syntax(path.read_text(), "toml", theme="monokai", line_numbers=True))


def _validate(path: Path) -> None:
    import tomllib

    from pydantic import ValidationError

    from chime.config import load_config

    _require_file(path)
    try:
        config_obj = load_config(path)
    except ValidationError as e:
        validation_errors(e.errors())
        raise typer.Exit(1) from None
    except tomllib.TOMLDecodeError as e:
        error(f"Invalid TOML in {path}: {e}")
        raise typer.Exit(1) from None

    table = create_table("Configuration Summary", [("Setting", "cyan"), ("Value", "green")])
    table.add_row("Log level", config_obj.logging.level)
    table.add_row("Log to file", "yes" if config_obj.logging.log_to_file else "no")
    table.add_row("Heartbeat", f"every {config_obj.scheduler.heartbeat_interval} ticks")
    for name in config_obj.list_tasks():
        task = config_obj.tasks[name]
        suffix = "" if task.enabled else " [dim](disabled)[/dim]"
        table.add_row(f"Task '{name}'", f"{task.schedule}{suffix}")

    success("Configuration is valid!")
    console.print()
    console.print(table)


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $CHIME_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Show or validate the configuration file."""
        if action is None:
            click.echo(click.get_current_context().get_help())
            raise typer.Exit(0)

        if action not in ACTIONS:
            error(f"Unknown action: {action}")
            console.print(f"Valid actions: {', '.join(ACTIONS)}")
            raise typer.Exit(1)

        from chime.config.paths import get_config_path

        target = path.expanduser() if path else get_config_path()
        if action == "show":
            _show(target)
        else:
            _validate(target)
