"""Schedule expression commands."""

from datetime import UTC, datetime
from typing import Annotated

import typer

from chime.cli.console import console, create_table, dim, error, success, warning


def _parse_instant(value: str | None) -> datetime:
    """Parse an ISO 8601 instant, defaulting to now. Naive means UTC."""
    if value is None:
        return datetime.now(UTC)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def register(app: typer.Typer) -> None:
    """Register the parse and match commands."""

    @app.command()
    def parse(
        expression: Annotated[
            str,
            typer.Argument(help="Schedule: 'year month day hour minute [second]'"),
        ],
    ) -> None:
        """Validate a schedule expression and show its parsed fields.

        Examples:
            chime parse "* * * * */5"      # every 5 minutes, second 0
            chime parse "2024 * * 9 0 0"   # 09:00:00 every day in 2024
        """
        from chime.scheduling import (
            AnyOf,
            Exact,
            FieldName,
            ScheduleParseError,
            parse_schedule,
        )

        try:
            schedule = parse_schedule(expression)
        except ScheduleParseError as e:
            error(str(e))
            raise typer.Exit(1) from None

        table = create_table(
            "Schedule Fields",
            [("Field", "cyan"), ("Kind", ""), ("Stored", "green")],
        )
        for name, field in schedule:
            table.add_row(name.value, type(field).__name__, str(field))

        success(f"Valid schedule: {schedule.expression}")
        console.print(table)
        if isinstance(schedule[FieldName.MONTH], Exact | AnyOf):
            dim("Month values are stored zero-based (January = 0).")

    @app.command()
    def match(
        expression: Annotated[
            str,
            typer.Argument(help="Schedule expression to test"),
        ],
        at: Annotated[
            str | None,
            typer.Option(
                "--at",
                "-a",
                help="ISO 8601 instant to test against (default: now, UTC)",
            ),
        ] = None,
    ) -> None:
        """Check whether a schedule is due at a given instant."""
        from chime.scheduling import ScheduleParseError, due_now, parse_schedule

        try:
            schedule = parse_schedule(expression)
        except ScheduleParseError as e:
            error(str(e))
            raise typer.Exit(1) from None

        try:
            moment = _parse_instant(at)
        except ValueError:
            error(f"Invalid instant: {at}")
            raise typer.Exit(1) from None

        stamp = moment.isoformat(timespec="seconds")
        if due_now(schedule, moment):
            success(f"Due at {stamp}")
        else:
            warning(f"Not due at {stamp}")
