# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.exceptions import AppError
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.request import LeaveRequestResponse
from leave_ledger.services.duration import calculate_requested_minutes
from leave_ledger.services.roster import clamp_times_to_roster, get_roster

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.request import CreateLeaveRequestPayload


def _build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    return LeaveRequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        start_date=request.start_date,
        end_date=request.end_date,
        start_time=request.start_time,
        end_time=request.end_time,
        total_minutes=request.total_minutes,
        reason=request.reason,
        created_by=request.created_by,
        created_at=request.created_at,
    )


async def _get_request_or_404(session: AsyncSession, leave_request_id: uuid.UUID) -> LeaveRequest:
    result = await session.execute(select(LeaveRequest).where(col(LeaveRequest.id) == leave_request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise AppError("Leave request not found", status_code=404)
    return request


async def get_leave_request(session: AsyncSession, leave_request_id: uuid.UUID) -> LeaveRequestResponse:
    return _build_request_response(await _get_request_or_404(session, leave_request_id))


async def create_leave_request(
    session: AsyncSession,
    employee_id: uuid.UUID,
    payload: CreateLeaveRequestPayload,
    actor: uuid.UUID | None = None,
) -> LeaveRequestResponse:
    """Register a leave request with its computed working-time duration.

    Times are stored clamped to the roster's working day. Validation errors
    surface before anything is written.
    """
    duration = await calculate_requested_minutes(
        employee_id,
        payload.start_date,
        payload.end_date,
        payload.start_time,
        payload.end_time,
    )
    start_time, end_time = clamp_times_to_roster(payload.start_time, payload.end_time, await get_roster())

    request = LeaveRequest(
        employee_id=employee_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        start_time=start_time,
        end_time=end_time,
        total_minutes=duration.minutes,
        reason=payload.reason,
        created_by=actor,
    )
    session.add(request)
    await session.commit()
    await session.refresh(request)
    return _build_request_response(request)
