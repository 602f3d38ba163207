# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_ledger.models.enums import BalanceBucket, LedgerEntryType

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BucketBalances(BaseModel):
    """The three deduction buckets, in hours with two-decimal precision."""

    legal_hours: Decimal = Decimal("0.00")
    non_legal_hours: Decimal = Decimal("0.00")
    carryover_hours: Decimal = Decimal("0.00")

    def get(self, bucket: BalanceBucket) -> Decimal:
        if bucket == BalanceBucket.LEGAL:
            return self.legal_hours
        if bucket == BalanceBucket.NON_LEGAL:
            return self.non_legal_hours
        return self.carryover_hours

    def with_value(self, bucket: BalanceBucket, value: Decimal) -> BucketBalances:
        field = {
            BalanceBucket.LEGAL: "legal_hours",
            BalanceBucket.NON_LEGAL: "non_legal_hours",
            BalanceBucket.CARRYOVER: "carryover_hours",
        }[bucket]
        return self.model_copy(update={field: value})

    @property
    def total_hours(self) -> Decimal:
        return self.legal_hours + self.non_legal_hours + self.carryover_hours


class BalanceResponse(BaseModel):
    """Cached balance for an employee."""

    employee_id: uuid.UUID
    legal_hours: Decimal
    non_legal_hours: Decimal
    carryover_hours: Decimal
    total_hours: Decimal
    updated_at: datetime | None
    version: int | None


class BalanceSummaryResponse(BaseModel):
    """Ledger aggregation over the open balance period."""

    employee_id: uuid.UUID
    accrued_minutes: int
    taken_minutes: int
    adjustment_minutes: int
    carryover_minutes: int
    total_minutes: int
    total_hours: Decimal
    period_start_year: int | None = Field(
        default=None,
        description="Year of the carryover entry that opens the period; None before the first carryover",
    )


# ---------------------------------------------------------------------------
# Ledger response schemas
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    """A single ledger entry."""

    id: uuid.UUID
    employee_id: uuid.UUID
    entry_type: LedgerEntryType
    amount_minutes: int
    period_key: str
    leave_request_id: uuid.UUID | None
    created_by: uuid.UUID | None
    notes: str | None
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Paginated ledger entries."""

    items: list[LedgerEntryResponse]
    total: int


# ---------------------------------------------------------------------------
# Write request schemas
# ---------------------------------------------------------------------------


class CreateAdjustmentRequest(BaseModel):
    """Request body for a manual balance adjustment."""

    amount_minutes: int = Field(description="Signed integer: positive to add, negative to deduct")
    note: str = Field(min_length=1, max_length=1000)
    year: int | None = Field(default=None, ge=2000, le=9999, description="Year the adjustment belongs to")


class DeductionRequest(BaseModel):
    """Request body for a bucket deduction.

    Omitted ``order``/``allow_negative`` fall back to the organization's leave settings.
    """

    requested_minutes: int = Field(ge=0)
    order: list[BalanceBucket] | None = None
    allow_negative: list[BalanceBucket] | None = None


class DeductionPolicy(BaseModel):
    """Bucket order for a deduction and the buckets allowed to go negative."""

    order: list[BalanceBucket] = Field(min_length=1)
    allow_negative: frozenset[BalanceBucket] = frozenset()

    @model_validator(mode="after")
    def _validate_order(self) -> Self:
        if len(set(self.order)) != len(self.order):
            msg = "Deduction order must not repeat a bucket"
            raise ValueError(msg)
        return self

    def allows_negative(self, bucket: BalanceBucket) -> bool:
        return bucket in self.allow_negative
