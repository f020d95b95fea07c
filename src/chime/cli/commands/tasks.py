"""Configured task commands."""

from pathlib import Path
from typing import Annotated

import typer

from chime.cli.console import (
    console,
    create_table,
    dim,
    error,
    success,
    validation_errors,
    warning,
)

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file",
    ),
]


def _load(config_path: Path | None):
    import tomllib

    from pydantic import ValidationError

    from chime.config import load_config

    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None
    except ValidationError as e:
        validation_errors(e.errors())
        raise typer.Exit(1) from None
    except tomllib.TOMLDecodeError as e:
        error(f"Invalid TOML in {config_path}: {e}")
        raise typer.Exit(1) from None


def register(app: typer.Typer) -> None:
    """Register the tasks and run commands."""

    @app.command()
    def tasks(config: ConfigOption = None) -> None:
        """List tasks declared in the configuration file."""
        config_obj = _load(config)

        if not config_obj.tasks:
            warning("No tasks configured")
            return

        table = create_table(
            "Configured Tasks",
            [("Name", "cyan"), ("Schedule", "green"), ("Target", ""), ("Enabled", "")],
        )
        for name in config_obj.list_tasks():
            task = config_obj.tasks[name]
            table.add_row(
                name,
                task.schedule,
                task.target,
                "yes" if task.enabled else "[dim]no[/dim]",
            )

        console.print(table)
        dim(f"Total: {len(config_obj.tasks)} task(s)")

    @app.command()
    def run(
        config: ConfigOption = None,
        once: Annotated[
            bool,
            typer.Option(
                "--once",
                help="Run a single evaluation pass, wait for dispatched tasks, exit",
            ),
        ] = False,
    ) -> None:
        """Run the scheduler with the configured tasks until interrupted."""
        import signal
        import threading

        from chime.config import ConfigError
        from chime.logging import configure_logging
        from chime.scheduling.loader import create_scheduler

        config_obj = _load(config)
        configure_logging(
            level=config_obj.logging.level,
            use_rich=True,
            log_to_file=config_obj.logging.log_to_file,
            retention_days=config_obj.logging.retention_days,
        )

        try:
            scheduler = create_scheduler(config_obj)
        except ConfigError as e:
            error(str(e))
            raise typer.Exit(1) from None

        if once:
            scheduler.check_runnable_tasks()
            scheduler.guard.wait_idle()
            success("Evaluation pass complete")
            return

        stop_requested = threading.Event()
        signal.signal(signal.SIGTERM, lambda *_: stop_requested.set())

        scheduler.start()
        success(f"Scheduler running with {len(scheduler.registry)} task(s)")
        dim("Press Ctrl+C to stop")
        try:
            while not stop_requested.wait(1.0):
                pass
        except KeyboardInterrupt:
            pass
        finally:
            scheduler.stop()
        console.print("Scheduler stopped")
