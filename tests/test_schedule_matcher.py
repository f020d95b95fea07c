"""Tests for schedule time matching."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from chime.scheduling import (
    AnyOf,
    Exact,
    Schedule,
    Step,
    Wildcard,
    already_fired_this_second,
    due_now,
    parse_schedule,
)
from chime.scheduling.matcher import calendar_values, truncate_to_second

# 2014-02-02T02:02:02.123Z: every component is 2 (month is 1, zero-based)
FEB_SECOND = datetime(2014, 2, 2, 2, 2, 2, 123000, tzinfo=UTC)
JAN_FIRST = datetime(2014, 1, 1, 2, 2, 2, 123000, tzinfo=UTC)


def _schedule(*fields) -> Schedule:
    return Schedule(expression="test", fields=tuple(fields))


def _only(position: int, field) -> Schedule:
    fields = [Wildcard()] * 6
    fields[position] = field
    return _schedule(*fields)


class TestCalendarValues:
    def test_month_is_zero_based(self):
        assert calendar_values(FEB_SECOND) == (2014, 1, 2, 2, 2, 2)

    def test_naive_treated_as_utc(self):
        naive = datetime(2014, 2, 2, 2, 2, 2)
        assert calendar_values(naive) == (2014, 1, 2, 2, 2, 2)

    def test_aware_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        moment = datetime(2014, 2, 2, 4, 2, 2, tzinfo=plus_two)
        assert calendar_values(moment) == (2014, 1, 2, 2, 2, 2)

    def test_truncate_to_second(self):
        assert truncate_to_second(FEB_SECOND) == datetime(
            2014, 2, 2, 2, 2, 2, tzinfo=UTC
        )


class TestDueNowYear:
    def test_list_without_match(self):
        assert not due_now(_only(0, AnyOf(frozenset({2015, 2016}))), JAN_FIRST)

    def test_list_with_match(self):
        assert due_now(_only(0, AnyOf(frozenset({2015, 2014, 2016}))), JAN_FIRST)

    def test_exact_mismatch(self):
        assert not due_now(_only(0, Exact(2015)), JAN_FIRST)

    def test_exact_match(self):
        assert due_now(_only(0, Exact(2014)), JAN_FIRST)

    def test_step(self):
        assert due_now(_only(0, Step(2)), JAN_FIRST)

    @pytest.mark.parametrize("year", [2013, 2014, 2015, 2016, 2100])
    def test_step_two_iff_even_year(self, year):
        moment = datetime(year, 6, 15, 12, 0, 0, tzinfo=UTC)
        schedule = parse_schedule("*/2 * * * * *")
        assert due_now(schedule, moment) is (year % 2 == 0)


class TestDueNowMonth:
    def test_list_without_match(self):
        assert not due_now(_only(1, AnyOf(frozenset({0, 2}))), FEB_SECOND)

    def test_list_with_match(self):
        assert due_now(_only(1, AnyOf(frozenset({0, 1, 2}))), FEB_SECOND)

    def test_exact_mismatch(self):
        assert not due_now(_only(1, Exact(3)), FEB_SECOND)

    def test_exact_match_uses_stored_zero_based_value(self):
        # February is stored as 1 after parsing "2"
        assert due_now(_only(1, Exact(1)), FEB_SECOND)

    def test_step_uses_one_based_month(self):
        # February is month 2, and 2 % 2 == 0
        assert due_now(_only(1, Step(2)), FEB_SECOND)
        assert not due_now(_only(1, Step(2)), JAN_FIRST)

    @pytest.mark.parametrize("month", range(1, 13))
    def test_parsed_month_literal_matches_its_month(self, month):
        schedule = parse_schedule(f"* {month} * * * *")
        moment = datetime(2014, month, 10, 0, 0, 0, tzinfo=UTC)
        assert due_now(schedule, moment)

    @pytest.mark.parametrize("month", range(1, 13))
    def test_quarterly_step(self, month):
        schedule = parse_schedule("* */3 * * * *")
        moment = datetime(2014, month, 1, tzinfo=UTC)
        assert due_now(schedule, moment) is (month in (3, 6, 9, 12))


@pytest.mark.parametrize("position", [2, 3, 4, 5], ids=["day", "hour", "minute", "second"])
class TestDueNowFinerFields:
    def test_list_without_match(self, position):
        assert not due_now(_only(position, AnyOf(frozenset({1, 3}))), FEB_SECOND)

    def test_list_with_match(self, position):
        assert due_now(_only(position, AnyOf(frozenset({1, 2, 3}))), FEB_SECOND)

    def test_exact_mismatch(self, position):
        assert not due_now(_only(position, Exact(3)), FEB_SECOND)

    def test_exact_match(self, position):
        assert due_now(_only(position, Exact(2)), FEB_SECOND)

    def test_step(self, position):
        assert due_now(_only(position, Step(2)), FEB_SECOND)
        assert not due_now(_only(position, Step(3)), FEB_SECOND)


class TestDueNow:
    def test_all_wildcards_always_due(self):
        schedule = _schedule(*[Wildcard()] * 6)
        for moment in (
            FEB_SECOND,
            JAN_FIRST,
            datetime(1999, 12, 31, 23, 59, 59, tzinfo=UTC),
        ):
            assert due_now(schedule, moment)

    def test_default_schedule_at_second_zero(self):
        schedule = parse_schedule()
        assert due_now(schedule, datetime(2014, 1, 1, tzinfo=UTC))
        assert not due_now(schedule, datetime(2014, 1, 1, 0, 0, 1, tzinfo=UTC))

    def test_every_five_minutes(self):
        schedule = parse_schedule("* * * * */5")
        assert due_now(schedule, datetime(2014, 1, 1, 10, 15, 0, tzinfo=UTC))
        assert not due_now(schedule, datetime(2014, 1, 1, 10, 16, 0, tzinfo=UTC))
        assert not due_now(schedule, datetime(2014, 1, 1, 10, 15, 1, tzinfo=UTC))

    def test_daily_at_nine_in_2024(self):
        schedule = parse_schedule("2024 * * 9 0 0")
        assert due_now(schedule, datetime(2024, 7, 4, 9, 0, 0, tzinfo=UTC))
        assert not due_now(schedule, datetime(2025, 7, 4, 9, 0, 0, tzinfo=UTC))
        assert not due_now(schedule, datetime(2024, 7, 4, 10, 0, 0, tzinfo=UTC))

    def test_all_fields_must_match(self):
        schedule = parse_schedule("2014 2 2 2 2 3")
        assert not due_now(schedule, FEB_SECOND)
        assert due_now(parse_schedule("2014 2 2 2 2 2"), FEB_SECOND)


class TestAlreadyFiredThisSecond:
    def test_never_fired(self):
        assert not already_fired_this_second(
            None, datetime(2014, 1, 1, 0, 0, 1, 432000, tzinfo=UTC)
        )

    def test_previous_second(self):
        assert not already_fired_this_second(
            datetime(2014, 1, 1, 0, 0, 0, 123000, tzinfo=UTC),
            datetime(2014, 1, 1, 0, 0, 1, 432000, tzinfo=UTC),
        )

    def test_same_second(self):
        assert already_fired_this_second(
            datetime(2014, 1, 1, 0, 0, 0, 123000, tzinfo=UTC),
            datetime(2014, 1, 1, 0, 0, 0, 432000, tzinfo=UTC),
        )

    def test_same_second_in_other_year(self):
        assert not already_fired_this_second(
            datetime(2013, 1, 1, 0, 0, 0, tzinfo=UTC),
            datetime(2014, 1, 1, 0, 0, 0, tzinfo=UTC),
        )

    def test_same_instant_different_zones(self):
        plus_one = timezone(timedelta(hours=1))
        assert already_fired_this_second(
            datetime(2014, 1, 1, 1, 0, 0, tzinfo=plus_one),
            datetime(2014, 1, 1, 0, 0, 0, 500000, tzinfo=UTC),
        )
