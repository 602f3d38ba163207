"""Roster provider: normalizes the settings store's planning and leave groups."""

from __future__ import annotations

from datetime import time
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from leave_ledger.config import get_settings
from leave_ledger.exceptions import InvalidRoster
from leave_ledger.schemas.roster import LeaveSettings, RosterTemplate
from leave_ledger.services.settings_store import get_settings_store

if TYPE_CHECKING:
    from collections.abc import Iterable

_WEEKDAY_BY_CODE: dict[str, int] = {
    "ma": 0,
    "di": 1,
    "wo": 2,
    "do": 3,
    "vr": 4,
    "za": 5,
    "zo": 6,
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
}

_DEFAULT_WORKING_DAYS = frozenset(range(5))


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def normalize_working_days(codes: Iterable[str]) -> frozenset[int]:
    """Map week-day codes (Dutch or English, any case) to ``date.weekday()`` numbers.

    An empty collection means the standard Monday-Friday week.
    """
    weekdays: set[int] = set()
    for code in codes:
        key = code.strip().lower()[:3]
        weekday = _WEEKDAY_BY_CODE.get(key, _WEEKDAY_BY_CODE.get(key[:2]))
        if weekday is None:
            raise InvalidRoster(f"Unknown working day code: {code!r}")
        weekdays.add(weekday)
    return frozenset(weekdays) if weekdays else _DEFAULT_WORKING_DAYS


def parse_roster(raw: dict[str, Any] | None) -> RosterTemplate:
    """Validate the raw planning settings group."""
    if not raw or not raw.get("dayStart") or not raw.get("dayEnd"):
        raise InvalidRoster("Planning settings dayStart/dayEnd are not configured")
    try:
        return RosterTemplate.model_validate(raw)
    except ValidationError as exc:
        raise InvalidRoster(f"Invalid roster: {_first_error(exc)}") from None


def parse_leave_settings(raw: dict[str, Any] | None) -> LeaveSettings:
    """Validate the raw leave settings group, applying defaults for missing keys."""
    data = dict(raw or {})
    data.setdefault("roundingMinutes", get_settings().default_rounding_minutes)
    try:
        return LeaveSettings.model_validate(data)
    except ValidationError as exc:
        raise InvalidRoster(f"Invalid leave settings: {_first_error(exc)}") from None


async def get_roster() -> RosterTemplate:
    """Fetch and validate the current roster template."""
    return parse_roster(await get_settings_store().get_planning_settings())


async def get_leave_settings() -> LeaveSettings:
    """Fetch and validate the current leave settings."""
    return parse_leave_settings(await get_settings_store().get_leave_settings())


def clamp_time(value: time, roster: RosterTemplate) -> time:
    """Clamp a time-of-day into the roster's working day."""
    return min(max(value, roster.day_start), roster.day_end)


def clamp_times_to_roster(
    start_time: time | None,
    end_time: time | None,
    roster: RosterTemplate,
) -> tuple[time | None, time | None]:
    """Clamp optional request times into the working day, leaving absent times absent."""
    return (
        clamp_time(start_time, roster) if start_time is not None else None,
        clamp_time(end_time, roster) if end_time is not None else None,
    )
