# ruff: noqa: TC003
from __future__ import annotations

from datetime import time
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from leave_ledger.models.enums import BalanceBucket


class BreakWindow(BaseModel):
    """A daily break excluded from working time."""

    start: time
    end: time

    @model_validator(mode="after")
    def _validate_order(self) -> Self:
        if self.end <= self.start:
            msg = f"Break end {self.end:%H:%M} must be after start {self.start:%H:%M}"
            raise ValueError(msg)
        return self


class RosterTemplate(BaseModel):
    """The organization's standard working day."""

    model_config = ConfigDict(populate_by_name=True)

    day_start: time = Field(alias="dayStart")
    day_end: time = Field(alias="dayEnd")
    breaks: list[BreakWindow] = []

    @model_validator(mode="after")
    def _validate_roster(self) -> Self:
        if self.day_end <= self.day_start:
            msg = "dayEnd must be after dayStart"
            raise ValueError(msg)
        ordered = sorted(self.breaks, key=lambda b: b.start)
        for window in ordered:
            if window.start < self.day_start or window.end > self.day_end:
                msg = f"Break {window.start:%H:%M}-{window.end:%H:%M} lies outside the working day"
                raise ValueError(msg)
        for previous, current in zip(ordered, ordered[1:], strict=False):
            if current.start < previous.end:
                msg = f"Breaks starting {previous.start:%H:%M} and {current.start:%H:%M} overlap"
                raise ValueError(msg)
        self.breaks = ordered
        return self


class LeaveSettings(BaseModel):
    """Organization-wide leave policy read from the settings store."""

    model_config = ConfigDict(populate_by_name=True)

    rounding_minutes: int = Field(default=15, ge=0, alias="roundingMinutes")
    allow_negative_balance: bool = Field(default=True, alias="allowNegativeBalance")
    deduction_order: list[BalanceBucket] = Field(
        default_factory=lambda: [BalanceBucket.CARRYOVER, BalanceBucket.NON_LEGAL, BalanceBucket.LEGAL],
        alias="deductionOrder",
    )

