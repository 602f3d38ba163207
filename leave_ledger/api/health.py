import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import func, select

from leave_ledger.config import get_settings
from leave_ledger.db import SessionDep
from leave_ledger.models import LeaveLedgerEntry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Liveness plus reachability of the ledger table."""

    status: Literal["ok", "degraded"]
    version: str
    environment: str
    ledger_entries: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report liveness and whether the ledger table answers. Never requires auth."""
    settings = get_settings()
    ledger_entries: int | None = None

    try:
        ledger_entries = (await session.execute(select(func.count()).select_from(LeaveLedgerEntry))).scalar_one()
    except Exception:
        logger.exception("Health check: ledger table unreachable")

    return HealthResponse(
        status="ok" if ledger_entries is not None else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        ledger_entries=ledger_entries,
    )
