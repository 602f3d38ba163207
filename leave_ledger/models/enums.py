from __future__ import annotations

import enum


class LedgerEntryType(enum.StrEnum):
    """Type of ledger entry affecting balance."""

    ACCRUAL = "ACCRUAL"
    TAKEN = "TAKEN"
    ADJUSTMENT = "ADJUSTMENT"
    CARRYOVER = "CARRYOVER"


# Entry types whose (employee, type, period_key) tuple is written through upsert only.
IDEMPOTENT_ENTRY_TYPES = frozenset({LedgerEntryType.ACCRUAL, LedgerEntryType.CARRYOVER})


class BalanceBucket(enum.StrEnum):
    """Balance category walked by the deduction engine."""

    CARRYOVER = "CARRYOVER"
    NON_LEGAL = "NON_LEGAL"
    LEGAL = "LEGAL"


class LeaveUnit(enum.StrEnum):
    """Unit an employee's annual entitlement and legacy balances are recorded in."""

    DAYS = "DAYS"
    HOURS = "HOURS"
