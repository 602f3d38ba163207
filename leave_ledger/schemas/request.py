# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, Field


class DurationRequest(BaseModel):
    """Date/time range to convert into working minutes."""

    start_date: date
    end_date: date
    start_time: time | None = None
    end_time: time | None = None


class DurationResponse(BaseModel):
    """Working time covered by a range, after rounding."""

    requested_minutes: int
    requested_hours: Decimal
    unrounded_minutes: int
    rounding_minutes: int


class CreateLeaveRequestPayload(DurationRequest):
    """Register a leave request so its usage can be booked later."""

    reason: str | None = Field(default=None, max_length=2000)


class LeaveRequestResponse(BaseModel):
    """A registered leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    start_time: time | None
    end_time: time | None
    total_minutes: int
    reason: str | None
    created_by: uuid.UUID | None
    created_at: datetime
