"""Tests for the duration calculator (roster, working days, breaks and rounding)."""

from __future__ import annotations

import uuid
from datetime import date, time

import pytest

from leave_ledger.exceptions import EmployeeNotFound, InvalidRange, InvalidRoster
from leave_ledger.schemas.roster import RosterTemplate
from leave_ledger.services.duration import (
    break_overlap_minutes,
    calculate_duration,
    calculate_requested_minutes,
    round_minutes,
)
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService
from leave_ledger.services.settings_store import InMemorySettingsStore

EMPLOYEE_ID = uuid.uuid4()
WEEKDAYS = frozenset(range(5))
ROSTER = RosterTemplate.model_validate(
    {"dayStart": "08:00", "dayEnd": "17:00", "breaks": [{"start": "12:00", "end": "12:30"}]}
)
NO_BREAKS = RosterTemplate.model_validate({"dayStart": "08:00", "dayEnd": "17:00"})

# 2026-02-02 is a Monday.
MONDAY = date(2026, 2, 2)
TUESDAY = date(2026, 2, 3)
WEDNESDAY = date(2026, 2, 4)


def _minutes(
    start_date: date,
    end_date: date,
    start_time: time | None = None,
    end_time: time | None = None,
    *,
    roster: RosterTemplate = ROSTER,
    rounding: int = 15,
    working_days: frozenset[int] = WEEKDAYS,
) -> int:
    result = calculate_duration(
        start_date,
        end_date,
        start_time,
        end_time,
        working_days=working_days,
        roster=roster,
        rounding_minutes=rounding,
    )
    return result.minutes


# ---------------------------------------------------------------------------
# Full days
# ---------------------------------------------------------------------------


def test_three_full_workdays_exclude_lunch_break() -> None:
    """08:00-17:00 minus 30 minutes of break, three days = 1530 minutes."""
    assert _minutes(MONDAY, WEDNESDAY) == 1530


def test_weekend_only_request_is_zero() -> None:
    assert _minutes(date(2026, 2, 7), date(2026, 2, 8)) == 0


def test_range_spanning_weekend_counts_workdays_only() -> None:
    # Friday through Monday.
    assert _minutes(date(2026, 2, 6), date(2026, 2, 9)) == 2 * 510


def test_custom_working_days() -> None:
    # Works Monday and Wednesday only.
    assert _minutes(MONDAY, WEDNESDAY, working_days=frozenset({0, 2})) == 2 * 510


# ---------------------------------------------------------------------------
# Times of day
# ---------------------------------------------------------------------------


def test_single_day_partial_request() -> None:
    assert _minutes(TUESDAY, TUESDAY, time(9, 0), time(11, 0)) == 120


def test_single_day_times_outside_roster_equal_clamped_request() -> None:
    outside = _minutes(TUESDAY, TUESDAY, time(6, 0), time(19, 0))
    clamped = _minutes(TUESDAY, TUESDAY, time(8, 0), time(17, 0))
    assert outside == clamped == 510


def test_break_is_excluded_exactly_once() -> None:
    with_break = _minutes(TUESDAY, TUESDAY, time(11, 0), time(13, 0))
    without_break = _minutes(TUESDAY, TUESDAY, time(11, 0), time(13, 0), roster=NO_BREAKS)
    assert without_break - with_break == 30


def test_first_and_last_day_honor_times() -> None:
    # Monday 13:00-17:00 (240) + Tuesday 08:00-10:00 (120).
    assert _minutes(MONDAY, TUESDAY, time(13, 0), time(10, 0)) == 360


def test_interior_days_ignore_times() -> None:
    # 240 + full Tuesday 510 + 120.
    assert _minutes(MONDAY, WEDNESDAY, time(13, 0), time(10, 0)) == 870


def test_multi_day_end_time_may_precede_start_time() -> None:
    result = calculate_duration(
        MONDAY,
        TUESDAY,
        time(16, 0),
        time(9, 0),
        working_days=WEEKDAYS,
        roster=ROSTER,
        rounding_minutes=15,
    )
    assert result.minutes == 120


def test_single_day_on_non_working_day_is_zero() -> None:
    assert _minutes(date(2026, 2, 7), date(2026, 2, 7), time(9, 0), time(12, 0)) == 0


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("minutes", "rounding", "expected"),
    [
        (22, 15, 15),
        (23, 15, 30),
        (5, 10, 10),
        (4, 10, 0),
        (510, 15, 510),
        (7, 1, 7),
        (7, 0, 7),
    ],
)
def test_round_minutes(minutes: int, rounding: int, expected: int) -> None:
    assert round_minutes(minutes, rounding) == expected


def test_result_keeps_unrounded_minutes() -> None:
    result = calculate_duration(
        TUESDAY,
        TUESDAY,
        time(9, 0),
        time(9, 8),
        working_days=WEEKDAYS,
        roster=ROSTER,
        rounding_minutes=15,
    )
    assert result.unrounded_minutes == 8
    assert result.minutes == 15
    assert result.rounding_minutes == 15


def test_break_overlap_minutes() -> None:
    assert break_overlap_minutes(time(11, 45), time(12, 15), ROSTER.breaks) == 15
    assert break_overlap_minutes(time(13, 0), time(14, 0), ROSTER.breaks) == 0


# ---------------------------------------------------------------------------
# Invalid ranges
# ---------------------------------------------------------------------------


def test_end_date_before_start_date() -> None:
    with pytest.raises(InvalidRange):
        _minutes(TUESDAY, MONDAY)


def test_only_one_time_supplied() -> None:
    with pytest.raises(InvalidRange):
        _minutes(MONDAY, TUESDAY, time(9, 0), None)
    with pytest.raises(InvalidRange):
        _minutes(MONDAY, TUESDAY, None, time(9, 0))


def test_single_day_end_not_after_start() -> None:
    with pytest.raises(InvalidRange):
        _minutes(TUESDAY, TUESDAY, time(11, 0), time(11, 0))
    with pytest.raises(InvalidRange):
        _minutes(TUESDAY, TUESDAY, time(11, 0), time(9, 0))


# ---------------------------------------------------------------------------
# Service entry point
# ---------------------------------------------------------------------------


async def test_calculate_requested_minutes_uses_employee_and_settings(
    employee_service: InMemoryEmployeeService,
) -> None:
    employee_service.seed(
        EmployeeInfo(id=EMPLOYEE_ID, display_name="Piet", working_days=["ma", "di"]),
    )
    result = await calculate_requested_minutes(EMPLOYEE_ID, MONDAY, WEDNESDAY)
    assert result.minutes == 2 * 510


async def test_calculate_requested_minutes_applies_store_rounding(
    employee_service: InMemoryEmployeeService,
    settings_store: InMemorySettingsStore,
) -> None:
    employee_service.seed(EmployeeInfo(id=EMPLOYEE_ID, display_name="Piet"))
    settings_store.set_leave({"roundingMinutes": 60})
    result = await calculate_requested_minutes(EMPLOYEE_ID, TUESDAY, TUESDAY, time(9, 0), time(10, 20))
    assert result.unrounded_minutes == 80
    assert result.minutes == 60


async def test_calculate_requested_minutes_unknown_employee() -> None:
    with pytest.raises(EmployeeNotFound):
        await calculate_requested_minutes(uuid.uuid4(), MONDAY, MONDAY)


async def test_calculate_requested_minutes_invalid_roster(
    employee_service: InMemoryEmployeeService,
    settings_store: InMemorySettingsStore,
) -> None:
    employee_service.seed(EmployeeInfo(id=EMPLOYEE_ID, display_name="Piet"))
    settings_store.set_planning({"dayStart": "18:00", "dayEnd": "09:00"})
    with pytest.raises(InvalidRoster):
        await calculate_requested_minutes(EMPLOYEE_ID, MONDAY, MONDAY)


async def test_calculate_requested_minutes_invalid_working_days(
    employee_service: InMemoryEmployeeService,
) -> None:
    employee_service.seed(EmployeeInfo(id=EMPLOYEE_ID, display_name="Piet", working_days=["funday"]))
    with pytest.raises(InvalidRoster):
        await calculate_requested_minutes(EMPLOYEE_ID, MONDAY, MONDAY)
