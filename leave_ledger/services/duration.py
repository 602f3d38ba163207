# ruff: noqa: TC003
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import TYPE_CHECKING

from leave_ledger.exceptions import InvalidRange
from leave_ledger.services.employee import get_leave_config
from leave_ledger.services.roster import clamp_time, get_leave_settings, get_roster, normalize_working_days

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from leave_ledger.schemas.roster import BreakWindow, RosterTemplate


@dataclass(frozen=True)
class DurationResult:
    """Working minutes covered by a leave range."""

    minutes: int
    unrounded_minutes: int
    rounding_minutes: int


# ---------------------------------------------------------------------------
# Pure computation helpers (no I/O)
# ---------------------------------------------------------------------------


def _minute_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def break_overlap_minutes(block_start: time, block_end: time, breaks: Sequence[BreakWindow]) -> int:
    """Minutes of ``[block_start, block_end]`` covered by break windows."""
    start = _minute_of_day(block_start)
    end = _minute_of_day(block_end)
    overlap = 0
    for window in breaks:
        overlap += max(0, min(end, _minute_of_day(window.end)) - max(start, _minute_of_day(window.start)))
    return overlap


def round_minutes(minutes: int, rounding_minutes: int) -> int:
    """Round to the nearest multiple of ``rounding_minutes``, halves rounding up."""
    if rounding_minutes <= 1:
        return minutes
    return ((2 * minutes + rounding_minutes) // (2 * rounding_minutes)) * rounding_minutes


def _block_minutes(block_start: time, block_end: time, roster: RosterTemplate) -> int:
    worked = _minute_of_day(block_end) - _minute_of_day(block_start)
    return max(0, worked - break_overlap_minutes(block_start, block_end, roster.breaks))


def calculate_duration(
    start_date: date,
    end_date: date,
    start_time: time | None,
    end_time: time | None,
    *,
    working_days: Collection[int],
    roster: RosterTemplate,
    rounding_minutes: int,
) -> DurationResult:
    """Convert a date/time range into working minutes.

    Non-working days are skipped. Time-of-day is only honored on the first
    and last day of the range; interior days count the full roster day.
    Break windows are subtracted from every block and the total is rounded
    to ``rounding_minutes``.
    """
    if end_date < start_date:
        raise InvalidRange(f"end_date {end_date} is before start_date {start_date}")
    if (start_time is None) != (end_time is None):
        raise InvalidRange("start_time and end_time must be supplied together")

    with_times = start_time is not None and end_time is not None
    single_day = start_date == end_date
    if with_times and single_day and end_time <= start_time:  # type: ignore[operator]
        raise InvalidRange(f"end_time {end_time} must be after start_time {start_time}")

    total = 0
    current = start_date
    while current <= end_date:
        if current.weekday() not in working_days:
            current += timedelta(days=1)
            continue

        block_start = roster.day_start
        block_end = roster.day_end
        if with_times:
            if current == start_date:
                block_start = clamp_time(start_time, roster)  # type: ignore[arg-type]
            if current == end_date:
                block_end = clamp_time(end_time, roster)  # type: ignore[arg-type]

        total += _block_minutes(block_start, block_end, roster)
        current += timedelta(days=1)

    return DurationResult(
        minutes=round_minutes(total, rounding_minutes),
        unrounded_minutes=total,
        rounding_minutes=rounding_minutes,
    )


# ---------------------------------------------------------------------------
# Service entry point
# ---------------------------------------------------------------------------


async def calculate_requested_minutes(
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
    start_time: time | None = None,
    end_time: time | None = None,
) -> DurationResult:
    """Calculate the working minutes an employee's leave range would consume.

    Loads the employee's working days, the roster and the leave settings
    fresh for this call, then runs :func:`calculate_duration`.
    """
    config = await get_leave_config(employee_id)
    working_days = normalize_working_days(config.working_day_codes)
    roster = await get_roster()
    leave_settings = await get_leave_settings()

    return calculate_duration(
        start_date,
        end_date,
        start_time,
        end_time,
        working_days=working_days,
        roster=roster,
        rounding_minutes=leave_settings.rounding_minutes,
    )
