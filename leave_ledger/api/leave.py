# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AdminDep, AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import LedgerEntryType
from leave_ledger.schemas.accrual import AccrualRunResponse
from leave_ledger.schemas.balance import (
    BalanceResponse,
    BalanceSummaryResponse,
    CreateAdjustmentRequest,
    DeductionRequest,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leave_ledger.schemas.request import (
    CreateLeaveRequestPayload,
    DurationRequest,
    DurationResponse,
    LeaveRequestResponse,
)
from leave_ledger.services import balance as balance_service
from leave_ledger.services import booking as booking_service
from leave_ledger.services import deduction as deduction_service
from leave_ledger.services import ledger as ledger_service
from leave_ledger.services import request as request_service
from leave_ledger.services.accrual import AccrualResult, ensure_accrual_up_to_date
from leave_ledger.services.balance import minutes_to_hours
from leave_ledger.services.duration import calculate_requested_minutes

employee_leave_router = APIRouter(
    prefix="/employees/{employee_id}/leave",
    tags=["leave"],
)


def _build_accrual_response(result: AccrualResult) -> AccrualRunResponse:
    return AccrualRunResponse(
        employee_id=result.employee_id,
        year=result.year,
        through_month=result.through_month,
        booked_periods=result.booked_periods,
        booked_minutes=result.booked_minutes,
        opening_seeded=result.opening_seeded,
        carryover_created=result.carryover_created,
        carryover_minutes=result.carryover_minutes,
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@employee_leave_router.post("/duration", response_model=DurationResponse)
async def calculate_duration(
    employee_id: uuid.UUID,
    payload: DurationRequest,
    auth: AuthDep,
) -> DurationResponse:
    """Calculate the working minutes a leave range would consume."""
    result = await calculate_requested_minutes(
        employee_id,
        payload.start_date,
        payload.end_date,
        payload.start_time,
        payload.end_time,
    )
    return DurationResponse(
        requested_minutes=result.minutes,
        requested_hours=minutes_to_hours(result.minutes),
        unrounded_minutes=result.unrounded_minutes,
        rounding_minutes=result.rounding_minutes,
    )


@employee_leave_router.get("/summary", response_model=BalanceSummaryResponse)
async def get_summary(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=2000, le=9999),
) -> BalanceSummaryResponse:
    """Bring accruals up to date, then summarize the open balance period."""
    await ensure_accrual_up_to_date(session, employee_id, year or date.today().year, actor=auth.user_id)
    return await balance_service.get_balance_summary(session, employee_id)


@employee_leave_router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Get the cached bucket balances."""
    return await balance_service.get_balance(session, employee_id)


@employee_leave_router.get("/ledger", response_model=LedgerListResponse)
async def get_ledger(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    entry_type: LedgerEntryType | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LedgerListResponse:
    """Get paginated ledger entries, newest first."""
    return await ledger_service.list_ledger_entries(
        session, employee_id, entry_type=entry_type, offset=offset, limit=limit
    )


# ---------------------------------------------------------------------------
# Writes (admin only)
# ---------------------------------------------------------------------------


@employee_leave_router.post("/accruals/ensure", response_model=AccrualRunResponse)
async def ensure_accruals(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    year: int | None = Query(default=None, ge=2000, le=9999),
) -> AccrualRunResponse:
    """Book missing monthly accruals for a year (defaults to the current year)."""
    result = await ensure_accrual_up_to_date(session, employee_id, year or date.today().year, actor=auth.user_id)
    return _build_accrual_response(result)


@employee_leave_router.post("/adjustments", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    employee_id: uuid.UUID,
    payload: CreateAdjustmentRequest,
    session: SessionDep,
    auth: AdminDep,
) -> LedgerEntryResponse:
    """Record a manual balance adjustment."""
    return await booking_service.record_manual_adjustment(
        session,
        employee_id,
        payload.amount_minutes,
        payload.note,
        auth.user_id,
        year=payload.year,
    )


@employee_leave_router.post("/deductions", response_model=BalanceResponse)
async def deduct(
    employee_id: uuid.UUID,
    payload: DeductionRequest,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceResponse:
    """Debit minutes from the cached buckets in policy order."""
    policy = await deduction_service.resolve_deduction_policy(payload.order, payload.allow_negative)
    return await deduction_service.deduct(session, employee_id, payload.requested_minutes, policy)


@employee_leave_router.post("/sync", response_model=BalanceResponse)
async def sync_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceResponse:
    """Rebuild the cached balance from the ledger."""
    return await balance_service.sync_balance_from_ledger(session, employee_id)


@employee_leave_router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    employee_id: uuid.UUID,
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveRequestResponse:
    """Register a leave request and its computed duration."""
    return await request_service.create_leave_request(session, employee_id, payload, auth.user_id)
