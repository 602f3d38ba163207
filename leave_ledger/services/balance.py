from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.models.balance import LeaveBalanceSnapshot
from leave_ledger.models.enums import LedgerEntryType
from leave_ledger.schemas.balance import BalanceResponse, BalanceSummaryResponse
from leave_ledger.services.employee import require_employee
from leave_ledger.services.ledger import OpenPeriod, load_open_period, lock_employee_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_HUNDREDTH = Decimal("0.01")


def minutes_to_hours(minutes: int) -> Decimal:
    """Convert ledger minutes to display hours, two decimals, half-up."""
    return (Decimal(minutes) / Decimal(60)).quantize(_HUNDREDTH, rounding=ROUND_HALF_UP)


def hours_to_minutes(hours: Decimal) -> int:
    return int((hours * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _sum_type(period: OpenPeriod, entry_type: LedgerEntryType) -> int:
    return sum(item.amount_minutes for item in period.entries if item.entry_type == entry_type)


def summarize(employee_id: uuid.UUID, period: OpenPeriod) -> BalanceSummaryResponse:
    """Aggregate an open period per entry type.

    ``taken_minutes`` is reported as a positive magnitude; the total is the
    signed sum of every entry in the period.
    """
    accrued = _sum_type(period, LedgerEntryType.ACCRUAL)
    taken = -_sum_type(period, LedgerEntryType.TAKEN)
    adjustments = _sum_type(period, LedgerEntryType.ADJUSTMENT)
    carryover = _sum_type(period, LedgerEntryType.CARRYOVER)
    total = period.total_minutes
    return BalanceSummaryResponse(
        employee_id=employee_id,
        accrued_minutes=accrued,
        taken_minutes=taken,
        adjustment_minutes=adjustments,
        carryover_minutes=carryover,
        total_minutes=total,
        total_hours=minutes_to_hours(total),
        period_start_year=period.start_year,
    )


def _build_balance_response(snapshot: LeaveBalanceSnapshot) -> BalanceResponse:
    return BalanceResponse(
        employee_id=snapshot.employee_id,
        legal_hours=snapshot.legal_hours,
        non_legal_hours=snapshot.non_legal_hours,
        carryover_hours=snapshot.carryover_hours,
        total_hours=snapshot.legal_hours + snapshot.non_legal_hours + snapshot.carryover_hours,
        updated_at=snapshot.updated_at,
        version=snapshot.version,
    )


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_balance_summary(session: AsyncSession, employee_id: uuid.UUID) -> BalanceSummaryResponse:
    """Aggregate the employee's open period straight from the ledger."""
    return summarize(employee_id, await load_open_period(session, employee_id))


async def get_balance(session: AsyncSession, employee_id: uuid.UUID) -> BalanceResponse:
    """Return the cached bucket balances.

    Falls back to a ledger computation when no snapshot row exists yet.
    """
    await require_employee(employee_id)

    result = await session.execute(
        select(LeaveBalanceSnapshot).where(col(LeaveBalanceSnapshot.employee_id) == employee_id)
    )
    snapshot = result.scalar_one_or_none()
    if snapshot is not None:
        return _build_balance_response(snapshot)

    period = await load_open_period(session, employee_id)
    carryover = _sum_type(period, LedgerEntryType.CARRYOVER)
    legal_hours = minutes_to_hours(period.total_minutes - carryover)
    carryover_hours = minutes_to_hours(carryover)
    return BalanceResponse(
        employee_id=employee_id,
        legal_hours=legal_hours,
        non_legal_hours=Decimal("0.00"),
        carryover_hours=carryover_hours,
        total_hours=legal_hours + carryover_hours,
        updated_at=None,
        version=None,
    )


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


async def _sync_balance(session: AsyncSession, employee_id: uuid.UUID) -> LeaveBalanceSnapshot:
    """Recompute the cached buckets from the open period. Caller commits."""
    snapshot = await lock_employee_balance(session, employee_id)
    period = await load_open_period(session, employee_id)

    carryover = _sum_type(period, LedgerEntryType.CARRYOVER)
    snapshot.carryover_hours = minutes_to_hours(carryover)
    snapshot.legal_hours = minutes_to_hours(period.total_minutes - carryover)
    snapshot.non_legal_hours = Decimal("0.00")
    snapshot.updated_at = datetime.now(UTC)
    snapshot.version += 1

    await session.flush()
    return snapshot


async def sync_balance_from_ledger(session: AsyncSession, employee_id: uuid.UUID) -> BalanceResponse:
    """Rebuild the employee's cached balance from the ledger and commit."""
    await require_employee(employee_id)
    snapshot = await _sync_balance(session, employee_id)
    await session.commit()
    return _build_balance_response(snapshot)
