"""Ledger writes driven by people: manual adjustments and booked leave usage."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from leave_ledger.exceptions import AppError, DuplicateConflict
from leave_ledger.models.enums import LedgerEntryType
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.services.accrual import seed_opening_balance_if_missing
from leave_ledger.services.balance import _sync_balance
from leave_ledger.services.employee import build_leave_config, require_employee
from leave_ledger.services.ledger import (
    _build_ledger_entry_response,
    append_entry,
    find_entry,
    find_taken_entry,
    lock_employee_balance,
)
from leave_ledger.services.request import _get_request_or_404

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.balance import LedgerEntryResponse


async def _prepare_write(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    today: date,
    actor: uuid.UUID | None,
) -> None:
    """Lock the employee and make sure the opening balance exists."""
    employee = await require_employee(employee_id)
    await lock_employee_balance(session, employee_id)
    await seed_opening_balance_if_missing(session, employee, build_leave_config(employee), today=today, actor=actor)


async def record_manual_adjustment(
    session: AsyncSession,
    employee_id: uuid.UUID,
    amount_minutes: int,
    note: str,
    actor: uuid.UUID | None = None,
    *,
    year: int | None = None,
    today: date | None = None,
) -> LedgerEntryResponse:
    """Append a signed ADJUSTMENT entry and resync the cached balance.

    ``year`` attributes the adjustment to a calendar year (defaults to the
    current one).
    """
    if today is None:
        today = date.today()
    await _prepare_write(session, employee_id, today=today, actor=actor)

    entry_id = uuid.uuid4()
    entry = await append_entry(
        session,
        LeaveLedgerEntry(
            id=entry_id,
            employee_id=employee_id,
            entry_type=LedgerEntryType.ADJUSTMENT.value,
            amount_minutes=amount_minutes,
            period_key=f"ADJUSTMENT-{year or today.year}-{entry_id}",
            created_by=actor,
            notes=note,
        ),
    )
    await _sync_balance(session, employee_id)

    await session.commit()
    return _build_ledger_entry_response(entry)


async def book_leave_taken(
    session: AsyncSession,
    leave_request_id: uuid.UUID,
    actor: uuid.UUID | None = None,
    *,
    today: date | None = None,
) -> LedgerEntryResponse:
    """Book the TAKEN entry of a leave request. Each request is booked once."""
    if today is None:
        today = date.today()
    request = await _get_request_or_404(session, leave_request_id)
    await _prepare_write(session, request.employee_id, today=today, actor=actor)

    entry = await append_entry(
        session,
        LeaveLedgerEntry(
            employee_id=request.employee_id,
            entry_type=LedgerEntryType.TAKEN.value,
            amount_minutes=-request.total_minutes,
            period_key=f"TAKEN-{request.id}",
            leave_request_id=request.id,
            created_by=actor,
            notes=f"Leave {request.start_date.isoformat()} to {request.end_date.isoformat()}",
        ),
    )
    await _sync_balance(session, request.employee_id)

    await session.commit()
    return _build_ledger_entry_response(entry)


async def reverse_leave_taken(
    session: AsyncSession,
    leave_request_id: uuid.UUID,
    actor: uuid.UUID | None = None,
    *,
    today: date | None = None,
) -> LedgerEntryResponse:
    """Give back the minutes of a booked request after it was cancelled."""
    if today is None:
        today = date.today()
    request = await _get_request_or_404(session, leave_request_id)
    await _prepare_write(session, request.employee_id, today=today, actor=actor)

    taken = await find_taken_entry(session, request.id)
    if taken is None:
        raise AppError("Leave request has no booked usage to reverse", status_code=409)

    period_key = f"CANCEL-{request.start_date.year}-{request.id}"
    if await find_entry(session, request.employee_id, LedgerEntryType.ADJUSTMENT, period_key) is not None:
        raise DuplicateConflict(f"Leave request {request.id} is already reversed")

    entry = await append_entry(
        session,
        LeaveLedgerEntry(
            employee_id=request.employee_id,
            entry_type=LedgerEntryType.ADJUSTMENT.value,
            amount_minutes=-taken.amount_minutes,
            period_key=period_key,
            leave_request_id=request.id,
            created_by=actor,
            notes="Cancelled leave returned to balance",
        ),
    )
    await _sync_balance(session, request.employee_id)

    await session.commit()
    return _build_ledger_entry_response(entry)
