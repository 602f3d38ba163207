"""Accrual engine: monthly entitlement bookings with exact-remainder allocation."""

from __future__ import annotations

import logging
import uuid
from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from leave_ledger.models.enums import LedgerEntryType
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.services.balance import _sync_balance
from leave_ledger.services.employee import build_leave_config, get_employee_service, require_employee, to_minutes
from leave_ledger.services.ledger import append_entry, count_entries, lock_employee_balance, upsert_entry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.services.employee import EmployeeInfo, EmployeeLeaveConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass
class AccrualResult:
    """Outcome of bringing one employee's accruals up to date."""

    employee_id: uuid.UUID
    year: int
    through_month: int = 0
    booked_periods: list[str] = field(default_factory=list)
    booked_minutes: int = 0
    opening_seeded: bool = False
    carryover_created: bool = False
    carryover_minutes: int | None = None


@dataclass
class AccrualBatchResult:
    """Summary of an accrual run over every employee."""

    year: int
    processed: int = 0
    succeeded: int = 0
    errors: int = 0


# ---------------------------------------------------------------------------
# Pure computation helpers (no DB)
# ---------------------------------------------------------------------------


def calculate_monthly_accrual_minutes(annual_minutes: int, month: int) -> int:
    """Minutes booked for ``month`` (1-12) out of an annual entitlement.

    Books the growth of ``floor(annual * m / 12)`` so rounding remainders
    land in the month where they accumulate and the twelve months sum to
    exactly ``annual_minutes``.
    """
    if not 1 <= month <= 12:
        msg = f"month must be between 1 and 12, got {month}"
        raise ValueError(msg)
    return (annual_minutes * month) // 12 - (annual_minutes * (month - 1)) // 12


def prorate_hire_month(amount: int, start_day: int, days_in_month: int) -> int:
    """Scale a month's amount to the days employed, counting the start day."""
    employed_days = days_in_month - start_day + 1
    return (amount * employed_days) // days_in_month


def compute_month_accrual(
    annual_minutes: int,
    year: int,
    month: int,
    employment_start_date: date | None = None,
) -> int:
    """Amount to book for one month, honoring the employment start date.

    Months before the hire month accrue nothing.
    """
    amount = calculate_monthly_accrual_minutes(annual_minutes, month)
    if employment_start_date is None:
        return amount

    hire_month = (employment_start_date.year, employment_start_date.month)
    if (year, month) < hire_month:
        return 0
    if (year, month) == hire_month:
        _, days_in_month = monthrange(year, month)
        return prorate_hire_month(amount, employment_start_date.day, days_in_month)
    return amount


def accrual_period_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def accrual_through_month(year: int, today: date) -> int:
    """Last month that should be booked for ``year`` as of ``today``. 0 means none."""
    if year < today.year:
        return 12
    if year == today.year:
        return today.month
    return 0


# ---------------------------------------------------------------------------
# DB-backed helpers (caller holds the employee lock and commits)
# ---------------------------------------------------------------------------


async def seed_opening_balance_if_missing(
    session: AsyncSession,
    employee: EmployeeInfo,
    config: EmployeeLeaveConfig,
    *,
    today: date,
    actor: uuid.UUID | None = None,
) -> bool:
    """Seed the ledger from the employee's pre-ledger balances.

    Runs only while the employee has no ledger entries. Writes an
    ADJUSTMENT for the legal plus extra vacation balance (when non-zero) and
    the ``CARRYOVER-{year}`` entry that opens the ledger, even at zero.
    Returns True when the seed was written.
    """
    if await count_entries(session, employee.id) > 0:
        return False

    vacation = (employee.leave_balance_legal or 0) + (employee.leave_balance_extra or 0)
    vacation_minutes = to_minutes(vacation, config.leave_unit, config.hours_per_day)
    carryover_minutes = to_minutes(employee.leave_balance_carryover or 0, config.leave_unit, config.hours_per_day)

    if vacation_minutes != 0:
        await append_entry(
            session,
            LeaveLedgerEntry(
                employee_id=employee.id,
                entry_type=LedgerEntryType.ADJUSTMENT.value,
                amount_minutes=vacation_minutes,
                period_key=f"OPENING-{today.year}",
                created_by=actor,
                notes="Opening vacation balance",
            ),
        )

    from leave_ledger.services.carryover import carryover_period_key

    await upsert_entry(
        session,
        employee_id=employee.id,
        entry_type=LedgerEntryType.CARRYOVER,
        period_key=carryover_period_key(today.year),
        amount_minutes=carryover_minutes,
        created_by=actor,
        notes="Opening carryover balance",
    )

    logger.info(
        "Seeded opening balance for employee=%s vacation=%d carryover=%d",
        employee.id,
        vacation_minutes,
        carryover_minutes,
    )
    return True


async def _book_accruals(
    session: AsyncSession,
    config: EmployeeLeaveConfig,
    year: int,
    through_month: int,
    *,
    actor: uuid.UUID | None = None,
) -> list[tuple[str, int]]:
    """Upsert the ACCRUAL entries of ``year`` for months 1..through_month."""
    booked: list[tuple[str, int]] = []
    for month in range(1, through_month + 1):
        amount = compute_month_accrual(config.annual_leave_minutes, year, month, config.employment_start_date)
        if amount == 0:
            continue
        period_key = accrual_period_key(year, month)
        await upsert_entry(
            session,
            employee_id=config.employee_id,
            entry_type=LedgerEntryType.ACCRUAL,
            period_key=period_key,
            amount_minutes=amount,
            created_by=actor,
            notes=f"Monthly accrual {period_key}",
        )
        booked.append((period_key, amount))
    return booked


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


async def ensure_accrual_up_to_date(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
    *,
    today: date | None = None,
    actor: uuid.UUID | None = None,
) -> AccrualResult:
    """Bring the employee's ACCRUAL entries for ``year`` up to date.

    Past years are booked through December, the current year through the
    current month and future years not at all. For the current year the
    carryover roll-forward runs first. Re-running never duplicates an entry.

    Args:
        session: Database session; committed on success.
        employee_id: Employee to process.
        year: Accrual year.
        today: Reference date (defaults to today).
        actor: User recorded as the creator of new entries.
    """
    from leave_ledger.services.carryover import _roll_forward

    if today is None:
        today = date.today()

    employee = await require_employee(employee_id)
    config = build_leave_config(employee)

    await lock_employee_balance(session, employee_id)

    result = AccrualResult(employee_id=employee_id, year=year)
    result.opening_seeded = await seed_opening_balance_if_missing(session, employee, config, today=today, actor=actor)

    if year == today.year:
        carryover = await _roll_forward(session, config, year, today=today, actor=actor)
        result.carryover_created = carryover.created
        result.carryover_minutes = carryover.amount_minutes

    result.through_month = accrual_through_month(year, today)
    booked = await _book_accruals(session, config, year, result.through_month, actor=actor)
    result.booked_periods = [period_key for period_key, _ in booked]
    result.booked_minutes = sum(amount for _, amount in booked)

    await _sync_balance(session, employee_id)
    await session.commit()
    return result


async def run_accruals_for_all_employees(
    session: AsyncSession,
    year: int | None = None,
    *,
    today: date | None = None,
) -> AccrualBatchResult:
    """Run :func:`ensure_accrual_up_to_date` for every employee.

    Each employee is committed on its own; a failure is logged, rolled back
    and counted without aborting the batch.
    """
    if today is None:
        today = date.today()
    if year is None:
        year = today.year

    result = AccrualBatchResult(year=year)
    employees = await get_employee_service().list_employees()

    for employee in employees:
        result.processed += 1
        try:
            await ensure_accrual_up_to_date(session, employee.id, year, today=today)
            result.succeeded += 1
        except Exception:
            logger.exception("Error processing accruals for employee=%s year=%s", employee.id, year)
            await session.rollback()
            result.errors += 1

    logger.info(
        "Accrual run for %s: processed=%d succeeded=%d errors=%d",
        year,
        result.processed,
        result.succeeded,
        result.errors,
    )
    return result
