"""Time matching for parsed schedules.

All evaluation happens in UTC at whole-second granularity.
"""

from datetime import UTC, datetime

from chime.scheduling.types import FIELD_ORDER, FieldName, Schedule

# Step expressions on the month apply to the one-based month number.
_STEP_OFFSETS = {FieldName.MONTH: 1}


def to_utc(moment: datetime) -> datetime:
    """Return ``moment`` in UTC. Naive datetimes are assumed to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def truncate_to_second(moment: datetime) -> datetime:
    """Drop sub-second precision, the slot a task fires in."""
    return to_utc(moment).replace(microsecond=0)


def calendar_values(moment: datetime) -> tuple[int, int, int, int, int, int]:
    """Calendar components in field order, with a zero-based month."""
    utc = to_utc(moment)
    return (utc.year, utc.month - 1, utc.day, utc.hour, utc.minute, utc.second)


def due_now(schedule: Schedule, now: datetime) -> bool:
    """Return True if every field of ``schedule`` matches ``now``."""
    for name, field, observed in zip(
        FIELD_ORDER, schedule.fields, calendar_values(now), strict=True
    ):
        if not field.matches(observed, offset=_STEP_OFFSETS.get(name, 0)):
            return False
    return True


def already_fired_this_second(
    last_fired_slot: datetime | None, now: datetime
) -> bool:
    """Return True if ``last_fired_slot`` falls in the same second as ``now``."""
    if last_fired_slot is None:
        return False
    return calendar_values(last_fired_slot) == calendar_values(now)
