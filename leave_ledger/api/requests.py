# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from leave_ledger.api.deps import AdminDep, AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.balance import LedgerEntryResponse
from leave_ledger.schemas.request import LeaveRequestResponse
from leave_ledger.services import booking as booking_service
from leave_ledger.services import request as request_service

leave_requests_router = APIRouter(
    prefix="/leave-requests",
    tags=["leave-requests"],
)


@leave_requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a registered leave request."""
    return await request_service.get_leave_request(session, request_id)


@leave_requests_router.post("/{request_id}/taken", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
async def book_taken(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> LedgerEntryResponse:
    """Book an approved request's usage in the ledger (admin only)."""
    return await booking_service.book_leave_taken(session, request_id, auth.user_id)


@leave_requests_router.post(
    "/{request_id}/reversal", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED
)
async def reverse_taken(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> LedgerEntryResponse:
    """Return a cancelled request's usage to the balance (admin only)."""
    return await booking_service.reverse_leave_taken(session, request_id, auth.user_id)
