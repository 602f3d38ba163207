# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, time

from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A leave request whose working-time duration has been computed."""

    __tablename__ = "leave_request"

    employee_id: uuid.UUID = Field(index=True)
    start_date: date = Field(index=True)
    end_date: date
    start_time: time | None = None
    end_time: time | None = None
    total_minutes: int
    reason: str | None = None
    created_by: uuid.UUID | None = None
