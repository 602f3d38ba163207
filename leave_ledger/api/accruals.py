# ruff: noqa: B008
"""API endpoint for the accrual batch trigger."""

from __future__ import annotations

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AdminDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.accrual import AccrualBatchResponse
from leave_ledger.services.accrual import run_accruals_for_all_employees

accrual_trigger_router = APIRouter(
    prefix="/leave/accruals",
    tags=["accruals"],
)


@accrual_trigger_router.post("/run", response_model=AccrualBatchResponse)
async def run_accruals(
    session: SessionDep,
    auth: AdminDep,
    year: int | None = Query(default=None, ge=2000, le=9999),
) -> AccrualBatchResponse:
    """Bring every employee's accruals up to date (admin only).

    Useful for backfills; the same run happens lazily whenever a summary is read.
    """
    result = await run_accruals_for_all_employees(session, year)
    return AccrualBatchResponse(
        year=result.year,
        processed=result.processed,
        succeeded=result.succeeded,
        errors=result.errors,
    )
