"""Carryover roll-forward: turns a year's closing balance into next year's opening entry."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from leave_ledger.models.enums import LedgerEntryType
from leave_ledger.services.accrual import _book_accruals, seed_opening_balance_if_missing
from leave_ledger.services.balance import _sync_balance
from leave_ledger.services.employee import build_leave_config, require_employee
from leave_ledger.services.ledger import (
    delete_entries_where,
    find_entry,
    load_attributed_entries,
    lock_employee_balance,
    upsert_entry,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.services.employee import EmployeeLeaveConfig
    from leave_ledger.services.ledger import AttributedEntry

logger = logging.getLogger(__name__)


@dataclass
class CarryoverResult:
    """Outcome of a roll-forward into ``year``."""

    employee_id: uuid.UUID
    year: int
    created: bool = False
    amount_minutes: int | None = None
    purged: int = 0
    skipped_reason: str | None = None


def carryover_period_key(year: int) -> str:
    return f"CARRYOVER-{year}"


def compute_closing_balance(entries: Sequence[AttributedEntry], closing_year: int) -> int:
    """Balance at the end of ``closing_year``.

    Starts from the latest carryover attributed to ``closing_year`` or
    earlier and adds every non-carryover entry from that carryover's year
    through ``closing_year``. Without a carryover every entry up to
    ``closing_year`` counts.
    """
    carryovers = [
        item for item in entries if item.entry_type == LedgerEntryType.CARRYOVER and item.year <= closing_year
    ]
    base = max(carryovers, key=lambda item: item.year) if carryovers else None

    total = base.amount_minutes if base is not None else 0
    for item in entries:
        if item.entry_type == LedgerEntryType.CARRYOVER or item.year > closing_year:
            continue
        if base is not None and item.year < base.year:
            continue
        total += item.amount_minutes
    return total


def _first_open_year(entries: Sequence[AttributedEntry], config: EmployeeLeaveConfig, year: int) -> int:
    """Earliest year not yet absorbed into a carryover before ``year``."""
    base_years = [
        item.year for item in entries if item.entry_type == LedgerEntryType.CARRYOVER and item.year <= year - 1
    ]
    first = max(base_years) if base_years else year - 1
    if config.employment_start_date is not None:
        first = max(first, min(config.employment_start_date.year, year - 1))
    return first


async def _roll_forward(
    session: AsyncSession,
    config: EmployeeLeaveConfig,
    year: int,
    *,
    today: date,
    actor: uuid.UUID | None = None,
) -> CarryoverResult:
    """Write ``CARRYOVER-{year}`` once. Caller holds the employee lock and commits."""
    employee_id = config.employee_id
    period_key = carryover_period_key(year)
    result = CarryoverResult(employee_id=employee_id, year=year)

    existing = await find_entry(session, employee_id, LedgerEntryType.CARRYOVER, period_key)
    if existing is not None:
        result.amount_minutes = existing.amount_minutes
        return result

    if year > today.year:
        result.skipped_reason = f"{year} has not started yet"
        logger.info("Skipping carryover for employee=%s: %s", employee_id, result.skipped_reason)
        return result

    entries = await load_attributed_entries(session, employee_id)
    later = [item for item in entries if item.entry_type == LedgerEntryType.CARRYOVER and item.year > year]
    if later:
        result.skipped_reason = f"carryover for {max(item.year for item in later)} already exists"
        logger.info("Skipping carryover for employee=%s: %s", employee_id, result.skipped_reason)
        return result

    # Every year since the base carryover closes with its accruals complete.
    for closing_year in range(_first_open_year(entries, config, year), year):
        await _book_accruals(session, config, closing_year, 12, actor=actor)
    entries = await load_attributed_entries(session, employee_id)
    closing = compute_closing_balance(entries, year - 1)

    result.purged = await delete_entries_where(
        session,
        employee_id,
        LedgerEntryType.CARRYOVER,
        lambda entry: entry.period_key != period_key,
    )
    await upsert_entry(
        session,
        employee_id=employee_id,
        entry_type=LedgerEntryType.CARRYOVER,
        period_key=period_key,
        amount_minutes=closing,
        created_by=actor,
        notes=f"Closing balance {year - 1} carried into {year}",
    )
    await _sync_balance(session, employee_id)

    result.created = True
    result.amount_minutes = closing
    logger.info(
        "Rolled balance forward for employee=%s into %s: %d minutes (purged %d stale)",
        employee_id,
        year,
        closing,
        result.purged,
    )
    return result


async def ensure_carryover_from_previous_year(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
    *,
    today: date | None = None,
    actor: uuid.UUID | None = None,
) -> CarryoverResult:
    """Materialize the closing balance of ``year - 1`` as ``CARRYOVER-{year}``.

    A no-op when that entry already exists.
    """
    if today is None:
        today = date.today()

    employee = await require_employee(employee_id)
    config = build_leave_config(employee)

    await lock_employee_balance(session, employee_id)
    await seed_opening_balance_if_missing(session, employee, config, today=today, actor=actor)
    result = await _roll_forward(session, config, year, today=today, actor=actor)

    await session.commit()
    return result
