"""Schedule expression parsing.

An expression is five or six whitespace-separated fields:

    year month day hour minute [second]

Each field is ``*``, a non-negative integer, ``*/N`` with N > 0, or a
comma-separated list of integers. A missing seconds field defaults to ``0``.

Months are stored zero-based: ``"* 1 * * *"`` stores ``Exact(0)`` for the
month. Step divisors are kept as written and the matcher compensates.
"""

import logging
import re
from typing import Any

from chime.scheduling.types import (
    DEFAULT_SCHEDULE,
    FIELD_ORDER,
    AnyOf,
    Exact,
    FieldName,
    Schedule,
    ScheduleField,
    ScheduleParseError,
    Step,
    Wildcard,
)

logger = logging.getLogger(__name__)

MIN_FIELDS = 5
MAX_FIELDS = 6
DEFAULT_SECOND = "0"

_WILDCARD = "*"
_INTEGER_RE = re.compile(r"^\d+$")
_STEP_RE = re.compile(r"^\*/(\d+)$")
_LIST_RE = re.compile(r"^\d+(?:,\d+)+$")


def check_schedule_element(element: str) -> bool:
    """Return True if ``element`` has one of the accepted field shapes."""
    if element == _WILDCARD or _INTEGER_RE.match(element) or _LIST_RE.match(element):
        return True
    match = _STEP_RE.match(element)
    return bool(match) and int(match.group(1)) > 0


def _parse_field(name: FieldName, element: str) -> ScheduleField:
    if not check_schedule_element(element):
        raise ScheduleParseError(
            f"invalid {name.value} field {element!r}, expected '*', an integer, "
            "'*/N' with N > 0 or a comma-separated list of integers",
            field=name.value,
            value=element,
        )

    # Months are compared zero-based.
    shift = 1 if name is FieldName.MONTH else 0

    if element == _WILDCARD:
        return Wildcard()
    if match := _STEP_RE.match(element):
        return Step(int(match.group(1)))
    if _LIST_RE.match(element):
        return AnyOf(frozenset(int(v) - shift for v in element.split(",")))
    return Exact(int(element) - shift)


def parse_schedule(expression: Any = DEFAULT_SCHEDULE) -> Schedule:
    """Parse and validate a schedule expression.

    Args:
        expression: The schedule string, e.g. ``"* * * * */5"``.

    Returns:
        The parsed Schedule. Its ``expression`` is normalized to six
        single-space separated fields.

    Raises:
        ScheduleParseError: If the expression is not a string, has the wrong
            number of fields, or contains a malformed field.
    """
    if not isinstance(expression, str):
        raise ScheduleParseError(
            f"schedule has to be a string, got {type(expression).__name__}",
            field="expression",
            value=expression,
        )

    parts = expression.split()
    if len(parts) < MIN_FIELDS:
        raise ScheduleParseError(
            f"expected at least {MIN_FIELDS} fields (year, month, day, "
            f"hour, minute), got {len(parts)}",
            field="expression",
            value=expression,
        )
    if len(parts) > MAX_FIELDS:
        raise ScheduleParseError(
            f"expected at most {MAX_FIELDS} fields, got {len(parts)}",
            field="expression",
            value=expression,
        )
    if len(parts) < MAX_FIELDS:
        parts.append(DEFAULT_SECOND)

    fields = tuple(
        _parse_field(name, element)
        for name, element in zip(FIELD_ORDER, parts, strict=True)
    )
    schedule = Schedule(expression=" ".join(parts), fields=fields)
    logger.debug(f"Parsed schedule {expression!r} -> {schedule.expression!r}")
    return schedule
