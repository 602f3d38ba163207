# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveLedgerEntry(UUIDBase, TimestampMixin, table=True):
    """Immutable accounting fact that moves an employee's leave balance."""

    __tablename__ = "leave_ledger_entry"
    __table_args__ = (
        sa.Index("ix_leave_ledger_employee_type", "employee_id", "entry_type"),
        sa.UniqueConstraint("employee_id", "entry_type", "period_key", name="uq_leave_ledger_period"),
    )

    employee_id: uuid.UUID = Field(index=True)
    entry_type: str = Field(max_length=50)
    amount_minutes: int
    period_key: str = Field(max_length=100)
    leave_request_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_request.id", ondelete="SET NULL"), nullable=True, index=True),
    )
    created_by: uuid.UUID | None = None
    notes: str | None = None