"""Main CLI application."""

import typer

from chime.cli.commands import config, schedule, tasks

app = typer.Typer(
    name="chime",
    help="chime - cron-style in-process task scheduler",
    no_args_is_help=True,
)

config.register(app)
schedule.register(app)
tasks.register(app)


if __name__ == "__main__":
    app()
