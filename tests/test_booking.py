"""Tests for manual adjustments, leave request registration and booked usage."""

from __future__ import annotations

import uuid
from datetime import date, time
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from leave_ledger.exceptions import AppError, DuplicateConflict, EmployeeNotFound, InvalidRange
from leave_ledger.models.enums import LedgerEntryType
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.request import CreateLeaveRequestPayload
from leave_ledger.services.balance import get_balance, get_balance_summary
from leave_ledger.services.booking import book_leave_taken, record_manual_adjustment, reverse_leave_taken
from leave_ledger.services.employee import EmployeeInfo, InMemoryEmployeeService
from leave_ledger.services.ledger import query_entries
from leave_ledger.services.request import create_leave_request

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

EMPLOYEE_ID = uuid.uuid4()
ACTOR_ID = uuid.uuid4()
TODAY = date(2026, 2, 1)


@pytest.fixture(autouse=True)
def _seed_employee(employee_service: InMemoryEmployeeService) -> None:
    employee_service.seed(
        EmployeeInfo(id=EMPLOYEE_ID, display_name="Test Employee", leave_balance_legal=2),
    )


async def _request(
    session: AsyncSession,
    start: date = date(2026, 2, 3),
    end: date = date(2026, 2, 3),
    start_time: time | None = time(7, 0),
    end_time: time | None = time(12, 0),
) -> uuid.UUID:
    response = await create_leave_request(
        session,
        EMPLOYEE_ID,
        CreateLeaveRequestPayload(start_date=start, end_date=end, start_time=start_time, end_time=end_time),
        ACTOR_ID,
    )
    return response.id


# ---------------------------------------------------------------------------
# Manual adjustments
# ---------------------------------------------------------------------------


async def test_manual_adjustment_seeds_opening_and_syncs(db_session: AsyncSession) -> None:
    response = await record_manual_adjustment(db_session, EMPLOYEE_ID, -90, "Doctor visit", ACTOR_ID, today=TODAY)

    assert response.entry_type == LedgerEntryType.ADJUSTMENT
    assert response.period_key.startswith("ADJUSTMENT-2026-")
    assert response.notes == "Doctor visit"
    assert response.created_by == ACTOR_ID

    opening = await query_entries(db_session, EMPLOYEE_ID, period_prefix="OPENING-")
    assert [e.amount_minutes for e in opening] == [960]

    balance = await get_balance(db_session, EMPLOYEE_ID)
    assert balance.legal_hours == Decimal("14.50")


async def test_manual_adjustment_for_explicit_year(db_session: AsyncSession) -> None:
    response = await record_manual_adjustment(db_session, EMPLOYEE_ID, 30, "Backdated", year=2025, today=TODAY)
    assert response.period_key.startswith("ADJUSTMENT-2025-")


async def test_manual_adjustment_unknown_employee(db_session: AsyncSession) -> None:
    with pytest.raises(EmployeeNotFound):
        await record_manual_adjustment(db_session, uuid.uuid4(), 30, "Nobody", today=TODAY)


# ---------------------------------------------------------------------------
# Leave requests
# ---------------------------------------------------------------------------


async def test_create_leave_request_stores_clamped_times(db_session: AsyncSession) -> None:
    request_id = await _request(db_session)

    stored = await db_session.get(LeaveRequest, request_id)
    assert stored is not None
    assert stored.start_time == time(8, 0)
    assert stored.end_time == time(12, 0)
    assert stored.total_minutes == 240
    assert stored.created_by == ACTOR_ID


async def test_invalid_range_writes_nothing(db_session: AsyncSession) -> None:
    with pytest.raises(InvalidRange):
        await _request(db_session, start=date(2026, 2, 5), end=date(2026, 2, 4))

    count = await db_session.execute(select(func.count()).select_from(LeaveRequest))
    assert count.scalar_one() == 0


# ---------------------------------------------------------------------------
# Taken and reversal
# ---------------------------------------------------------------------------


async def test_book_leave_taken(db_session: AsyncSession) -> None:
    request_id = await _request(db_session)

    entry = await book_leave_taken(db_session, request_id, ACTOR_ID, today=TODAY)

    assert entry.entry_type == LedgerEntryType.TAKEN
    assert entry.amount_minutes == -240
    assert entry.period_key == f"TAKEN-{request_id}"
    assert entry.leave_request_id == request_id

    summary = await get_balance_summary(db_session, EMPLOYEE_ID)
    assert summary.taken_minutes == 240
    assert summary.total_minutes == 960 - 240


async def test_book_leave_taken_twice_conflicts(db_session: AsyncSession) -> None:
    request_id = await _request(db_session)
    await book_leave_taken(db_session, request_id, today=TODAY)

    with pytest.raises(DuplicateConflict):
        await book_leave_taken(db_session, request_id, today=TODAY)


async def test_book_unknown_request(db_session: AsyncSession) -> None:
    with pytest.raises(AppError) as exc_info:
        await book_leave_taken(db_session, uuid.uuid4(), today=TODAY)
    assert exc_info.value.status_code == 404


async def test_reverse_leave_taken(db_session: AsyncSession) -> None:
    request_id = await _request(db_session, start=date(2026, 2, 3), end=date(2026, 2, 4), start_time=None, end_time=None)
    await book_leave_taken(db_session, request_id, today=TODAY)

    reversal = await reverse_leave_taken(db_session, request_id, ACTOR_ID, today=TODAY)

    assert reversal.entry_type == LedgerEntryType.ADJUSTMENT
    assert reversal.amount_minutes == 1020
    assert reversal.period_key == f"CANCEL-2026-{request_id}"
    assert reversal.leave_request_id == request_id

    summary = await get_balance_summary(db_session, EMPLOYEE_ID)
    assert summary.total_minutes == 960


async def test_reverse_twice_conflicts(db_session: AsyncSession) -> None:
    request_id = await _request(db_session)
    await book_leave_taken(db_session, request_id, today=TODAY)
    await reverse_leave_taken(db_session, request_id, today=TODAY)

    with pytest.raises(DuplicateConflict):
        await reverse_leave_taken(db_session, request_id, today=TODAY)


async def test_reverse_without_taken_is_rejected(db_session: AsyncSession) -> None:
    request_id = await _request(db_session)
    with pytest.raises(AppError) as exc_info:
        await reverse_leave_taken(db_session, request_id, today=TODAY)
    assert exc_info.value.status_code == 409
