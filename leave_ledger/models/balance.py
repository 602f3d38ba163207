# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leave_ledger.models.base import utc_now


def _hours_field() -> Any:
    return Field(
        default=Decimal("0.00"),
        sa_type=sa.Numeric(12, 2),
        sa_column_kwargs={"server_default": "0"},
    )


class LeaveBalanceSnapshot(SQLModel, table=True):
    """Per-employee bucket cache in display hours; also the employee's lock row."""

    __tablename__ = "leave_balance_snapshot"

    employee_id: uuid.UUID = Field(primary_key=True, sa_type=sa.Uuid)
    legal_hours: Decimal = _hours_field()
    non_legal_hours: Decimal = _hours_field()
    carryover_hours: Decimal = _hours_field()
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
