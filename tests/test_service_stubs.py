"""Tests for the Employee Service and settings store stubs and leave-config normalization."""

from __future__ import annotations

import uuid

import pytest

from leave_ledger.exceptions import EmployeeNotFound
from leave_ledger.models.enums import LeaveUnit
from leave_ledger.services.employee import (
    EmployeeInfo,
    InMemoryEmployeeService,
    build_leave_config,
    get_employee_service,
    require_employee,
    to_minutes,
)
from leave_ledger.services.settings_store import DEFAULT_PLANNING_SETTINGS, InMemorySettingsStore


def _make_employee(name: str = "Jane", **fields: object) -> EmployeeInfo:
    return EmployeeInfo.model_validate(
        {"id": uuid.uuid4(), "display_name": name, "email": f"{name.lower()}@example.com", **fields}
    )


# ---------------------------------------------------------------------------
# InMemoryEmployeeService tests
# ---------------------------------------------------------------------------


async def test_employee_service_get_not_found() -> None:
    svc = InMemoryEmployeeService()
    assert await svc.get_employee(uuid.uuid4()) is None


async def test_employee_service_seed_get_and_list() -> None:
    svc = InMemoryEmployeeService()
    alice = _make_employee("Alice")
    bob = _make_employee("Bob")
    svc.seed(alice)
    svc.seed(bob)

    assert (await svc.get_employee(alice.id)) == alice
    assert {e.id for e in await svc.list_employees()} == {alice.id, bob.id}


async def test_require_employee_uses_installed_service(employee_service: InMemoryEmployeeService) -> None:
    emp = _make_employee()
    employee_service.seed(emp)

    assert get_employee_service() is employee_service
    assert (await require_employee(emp.id)).id == emp.id
    with pytest.raises(EmployeeNotFound) as exc_info:
        await require_employee(uuid.uuid4())
    assert exc_info.value.status_code == 404


# ---------------------------------------------------------------------------
# Leave configuration
# ---------------------------------------------------------------------------


def test_to_minutes_for_days_and_hours() -> None:
    assert to_minutes(24, LeaveUnit.DAYS, 8) == 11520
    assert to_minutes(1.5, LeaveUnit.DAYS, 7.6) == 684
    assert to_minutes(150, LeaveUnit.HOURS, 8) == 9000
    assert to_minutes(0.0125, LeaveUnit.HOURS, 8) == 1  # 0.75 minutes rounds half-up


def test_build_leave_config_defaults() -> None:
    config = build_leave_config(_make_employee(hours_per_day=0))
    assert config.hours_per_day == 8.0
    assert config.annual_leave_minutes == 0
    assert config.working_day_codes == ["ma", "di", "wo", "do", "vr"]


def test_build_leave_config_from_record() -> None:
    emp = _make_employee(
        hours_per_day=7.5,
        annual_leave_days_or_hours=20,
        leave_unit=LeaveUnit.DAYS,
        working_days=["ma", "di", "do"],
    )
    config = build_leave_config(emp)
    assert config.employee_id == emp.id
    assert config.annual_leave_minutes == 9000
    assert config.working_day_codes == ["ma", "di", "do"]


# ---------------------------------------------------------------------------
# InMemorySettingsStore tests
# ---------------------------------------------------------------------------


async def test_settings_store_defaults() -> None:
    store = InMemorySettingsStore()
    assert await store.get_planning_settings() == DEFAULT_PLANNING_SETTINGS
    assert await store.get_leave_settings() is None


async def test_settings_store_returns_copies() -> None:
    store = InMemorySettingsStore(planning={"dayStart": "08:00", "dayEnd": "17:00", "breaks": []})
    planning = await store.get_planning_settings()
    assert planning is not None
    planning["breaks"].append({"start": "12:00", "end": "12:30"})

    assert (await store.get_planning_settings())["breaks"] == []  # type: ignore[index]
