from sqlmodel import SQLModel

from leave_ledger.models.balance import LeaveBalanceSnapshot
from leave_ledger.models.base import TimestampMixin, UUIDBase
from leave_ledger.models.enums import IDEMPOTENT_ENTRY_TYPES, BalanceBucket, LedgerEntryType, LeaveUnit
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.models.request import LeaveRequest

__all__ = [
    "IDEMPOTENT_ENTRY_TYPES",
    "BalanceBucket",
    "LeaveBalanceSnapshot",
    "LeaveLedgerEntry",
    "LeaveRequest",
    "LeaveUnit",
    "LedgerEntryType",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
