# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class AccrualRunResponse(BaseModel):
    """Outcome of bringing one employee's accruals up to date."""

    employee_id: uuid.UUID
    year: int
    through_month: int
    booked_periods: list[str]
    booked_minutes: int
    opening_seeded: bool
    carryover_created: bool
    carryover_minutes: int | None


class AccrualBatchResponse(BaseModel):
    """Outcome of an accrual run over every employee."""

    year: int
    processed: int
    succeeded: int
    errors: int
