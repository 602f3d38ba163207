# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from leave_ledger.config import get_settings
from leave_ledger.exceptions import EmployeeNotFound
from leave_ledger.models.enums import LeaveUnit


class EmployeeInfo(BaseModel):
    """Employee record fields the leave engine reads."""

    id: uuid.UUID
    display_name: str
    email: str | None = None
    hours_per_day: float = 8.0
    annual_leave_days_or_hours: float | None = None
    leave_unit: LeaveUnit = LeaveUnit.DAYS
    employment_start_date: date | None = None
    working_days: list[str] = []  # e.g. ["ma", "di", "wo", "do", "vr"]
    # Balances recorded before the ledger existed, in leave_unit.
    leave_balance_legal: float | None = None
    leave_balance_extra: float | None = None
    leave_balance_carryover: float | None = None


class EmployeeLeaveConfig(BaseModel):
    """Normalized leave configuration derived from an employee record."""

    employee_id: uuid.UUID
    hours_per_day: float
    leave_unit: LeaveUnit
    annual_leave_minutes: int
    employment_start_date: date | None = None
    working_day_codes: list[str]


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the Employee Service."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...

    async def list_employees(self) -> list[EmployeeInfo]:
        """List all active employees."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        return self._employees.get(employee_id)

    async def list_employees(self) -> list[EmployeeInfo]:
        """List all active employees."""
        return list(self._employees.values())


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """FastAPI dependency for the Employee Service."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service


def to_minutes(value: float, unit: LeaveUnit, hours_per_day: float) -> int:
    """Convert a day- or hour-denominated amount to whole minutes (half-up)."""
    hours = Decimal(str(value)) if unit == LeaveUnit.HOURS else Decimal(str(value)) * Decimal(str(hours_per_day))
    return int((hours * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_leave_config(employee: EmployeeInfo) -> EmployeeLeaveConfig:
    """Normalize hours per day and the annual entitlement of an employee record."""
    settings = get_settings()
    hours_per_day = employee.hours_per_day if employee.hours_per_day > 0 else settings.default_hours_per_day
    annual_minutes = 0
    if employee.annual_leave_days_or_hours is not None:
        annual_minutes = to_minutes(employee.annual_leave_days_or_hours, employee.leave_unit, hours_per_day)
    return EmployeeLeaveConfig(
        employee_id=employee.id,
        hours_per_day=hours_per_day,
        leave_unit=employee.leave_unit,
        annual_leave_minutes=annual_minutes,
        employment_start_date=employee.employment_start_date,
        working_day_codes=employee.working_days or list(settings.default_working_days),
    )


async def require_employee(employee_id: uuid.UUID) -> EmployeeInfo:
    """Fetch an employee from the Employee Service or raise EmployeeNotFound."""
    employee = await get_employee_service().get_employee(employee_id)
    if employee is None:
        raise EmployeeNotFound(employee_id)
    return employee


async def get_leave_config(employee_id: uuid.UUID) -> EmployeeLeaveConfig:
    """Leave configuration for one employee."""
    return build_leave_config(await require_employee(employee_id))
