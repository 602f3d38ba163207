"""Ledger store: the per-employee append-only log every balance is derived from."""

# ruff: noqa: TC003
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.exceptions import DuplicateConflict
from leave_ledger.models.balance import LeaveBalanceSnapshot
from leave_ledger.models.enums import IDEMPOTENT_ENTRY_TYPES, LedgerEntryType
from leave_ledger.models.ledger import LeaveLedgerEntry
from leave_ledger.models.request import LeaveRequest
from leave_ledger.schemas.balance import LedgerEntryResponse, LedgerListResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

_YEAR_PATTERN = re.compile(r"\d{4}")


@dataclass(frozen=True)
class AttributedEntry:
    """A ledger entry together with the calendar year it counts towards."""

    entry: LeaveLedgerEntry
    year: int

    @property
    def entry_type(self) -> LedgerEntryType:
        return LedgerEntryType(self.entry.entry_type)

    @property
    def amount_minutes(self) -> int:
        return self.entry.amount_minutes


@dataclass
class OpenPeriod:
    """Entries not yet absorbed into a carryover.

    ``start_year`` is the year of the carryover entry that opens the period,
    or None when the employee has no carryover entry yet.
    """

    start_year: int | None
    entries: list[AttributedEntry] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return sum(item.amount_minutes for item in self.entries)


# ---------------------------------------------------------------------------
# Year attribution (no DB)
# ---------------------------------------------------------------------------


def year_from_period_key(period_key: str) -> int | None:
    """Return the first four-digit year embedded in a period key."""
    match = _YEAR_PATTERN.search(period_key)
    return int(match.group()) if match else None


def attribute_entry_year(entry: LeaveLedgerEntry, request_start: date | None = None) -> int:
    """Attribute an entry to a calendar year.

    TAKEN entries belong to the year their leave request starts in; every
    other type carries its year in the period key. Both fall back to the
    entry's creation year.
    """
    if entry.entry_type == LedgerEntryType.TAKEN:
        if request_start is not None:
            return request_start.year
        return entry.created_at.year
    year = year_from_period_key(entry.period_key)
    return year if year is not None else entry.created_at.year


def open_period(entries: Sequence[AttributedEntry]) -> OpenPeriod:
    """Select the entries that make up the current balance.

    The latest CARRYOVER entry already contains every earlier year, so the
    period is that entry plus the non-carryover entries attributed to its
    year or later.
    """
    carryovers = [item for item in entries if item.entry_type == LedgerEntryType.CARRYOVER]
    if not carryovers:
        return OpenPeriod(start_year=None, entries=list(entries))

    base = max(carryovers, key=lambda item: item.year)
    period = [base]
    period.extend(
        item for item in entries if item.entry_type != LedgerEntryType.CARRYOVER and item.year >= base.year
    )
    return OpenPeriod(start_year=base.year, entries=period)


# ---------------------------------------------------------------------------
# Locking
# ---------------------------------------------------------------------------


async def lock_employee_balance(session: AsyncSession, employee_id: uuid.UUID) -> LeaveBalanceSnapshot:
    """Get the employee's balance row with a FOR UPDATE lock, creating it if absent.

    Every ledger mutation takes this lock first so concurrent writers for
    the same employee serialize.
    """
    result = await session.execute(
        select(LeaveBalanceSnapshot)
        .where(col(LeaveBalanceSnapshot.employee_id) == employee_id)
        .with_for_update()
    )
    snapshot = result.scalar_one_or_none()

    if snapshot is None:
        snapshot = LeaveBalanceSnapshot(employee_id=employee_id, version=1)
        session.add(snapshot)
        await session.flush()

    return snapshot


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def count_entries(session: AsyncSession, employee_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(LeaveLedgerEntry)
        .where(col(LeaveLedgerEntry.employee_id) == employee_id)
    )
    return int(result.scalar_one())


async def find_entry(
    session: AsyncSession,
    employee_id: uuid.UUID,
    entry_type: LedgerEntryType,
    period_key: str,
) -> LeaveLedgerEntry | None:
    """Look up the entry identified by the composite idempotency key."""
    result = await session.execute(
        select(LeaveLedgerEntry).where(
            col(LeaveLedgerEntry.employee_id) == employee_id,
            col(LeaveLedgerEntry.entry_type) == entry_type.value,
            col(LeaveLedgerEntry.period_key) == period_key,
        )
    )
    return result.scalar_one_or_none()


async def find_taken_entry(session: AsyncSession, leave_request_id: uuid.UUID) -> LeaveLedgerEntry | None:
    result = await session.execute(
        select(LeaveLedgerEntry).where(
            col(LeaveLedgerEntry.entry_type) == LedgerEntryType.TAKEN.value,
            col(LeaveLedgerEntry.leave_request_id) == leave_request_id,
        )
    )
    return result.scalars().first()


async def query_entries(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    entry_type: LedgerEntryType | None = None,
    period_prefix: str | None = None,
    period_contains: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> list[LeaveLedgerEntry]:
    """Query an employee's entries, oldest first."""
    filters = [col(LeaveLedgerEntry.employee_id) == employee_id]
    if entry_type is not None:
        filters.append(col(LeaveLedgerEntry.entry_type) == entry_type.value)
    if period_prefix is not None:
        filters.append(col(LeaveLedgerEntry.period_key).startswith(period_prefix, autoescape=True))
    if period_contains is not None:
        filters.append(col(LeaveLedgerEntry.period_key).contains(period_contains, autoescape=True))
    if created_from is not None:
        filters.append(col(LeaveLedgerEntry.created_at) >= created_from)
    if created_to is not None:
        filters.append(col(LeaveLedgerEntry.created_at) < created_to)

    result = await session.execute(
        select(LeaveLedgerEntry)
        .where(*filters)
        .order_by(col(LeaveLedgerEntry.created_at), col(LeaveLedgerEntry.period_key))
    )
    return list(result.scalars().all())


async def load_attributed_entries(session: AsyncSession, employee_id: uuid.UUID) -> list[AttributedEntry]:
    """Load every entry of an employee with its attributed year."""
    result = await session.execute(
        select(LeaveLedgerEntry, col(LeaveRequest.start_date))
        .outerjoin(LeaveRequest, col(LeaveRequest.id) == col(LeaveLedgerEntry.leave_request_id))
        .where(col(LeaveLedgerEntry.employee_id) == employee_id)
        .order_by(col(LeaveLedgerEntry.created_at), col(LeaveLedgerEntry.period_key))
    )
    return [
        AttributedEntry(entry=entry, year=attribute_entry_year(entry, start_date))
        for entry, start_date in result.all()
    ]


async def load_open_period(session: AsyncSession, employee_id: uuid.UUID) -> OpenPeriod:
    return open_period(await load_attributed_entries(session, employee_id))


def _build_ledger_entry_response(entry: LeaveLedgerEntry) -> LedgerEntryResponse:
    """Map a ledger entry model to its response schema."""
    return LedgerEntryResponse(
        id=entry.id,
        employee_id=entry.employee_id,
        entry_type=LedgerEntryType(entry.entry_type),
        amount_minutes=entry.amount_minutes,
        period_key=entry.period_key,
        leave_request_id=entry.leave_request_id,
        created_by=entry.created_by,
        notes=entry.notes,
        created_at=entry.created_at,
    )


async def list_ledger_entries(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    entry_type: LedgerEntryType | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LedgerListResponse:
    """Get paginated ledger entries for an employee, newest first."""
    base_filter = [col(LeaveLedgerEntry.employee_id) == employee_id]
    if entry_type is not None:
        base_filter.append(col(LeaveLedgerEntry.entry_type) == entry_type.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveLedgerEntry).where(*base_filter))
    total = count_result.scalar_one()

    entries_result = await session.execute(
        select(LeaveLedgerEntry)
        .where(*base_filter)
        .order_by(
            col(LeaveLedgerEntry.created_at).desc(),
            col(LeaveLedgerEntry.period_key).desc(),
        )
        .offset(offset)
        .limit(limit)
    )
    entries = list(entries_result.scalars().all())

    return LedgerListResponse(
        items=[_build_ledger_entry_response(e) for e in entries],
        total=total,
    )


# ---------------------------------------------------------------------------
# Write path (callers hold the employee lock and commit)
# ---------------------------------------------------------------------------


async def append_entry(session: AsyncSession, entry: LeaveLedgerEntry) -> LeaveLedgerEntry:
    """Write a new immutable entry.

    Raises DuplicateConflict when the composite key is taken (idempotent
    types must go through :func:`upsert_entry`) or when the leave request
    already has a TAKEN entry.
    """
    entry_type = LedgerEntryType(entry.entry_type)
    existing = await find_entry(session, entry.employee_id, entry_type, entry.period_key)
    if existing is not None:
        if entry_type in IDEMPOTENT_ENTRY_TYPES:
            raise DuplicateConflict(f"{entry_type} entry {entry.period_key} already exists; use upsert")
        raise DuplicateConflict(f"{entry_type} entry {entry.period_key} already exists")

    if entry_type == LedgerEntryType.TAKEN and entry.leave_request_id is not None:
        if await find_taken_entry(session, entry.leave_request_id) is not None:
            raise DuplicateConflict(f"Leave request {entry.leave_request_id} is already booked as taken")

    session.add(entry)
    await session.flush()
    return entry


async def upsert_entry(
    session: AsyncSession,
    *,
    employee_id: uuid.UUID,
    entry_type: LedgerEntryType,
    period_key: str,
    amount_minutes: int,
    notes: str | None = None,
    created_by: uuid.UUID | None = None,
) -> tuple[LeaveLedgerEntry, bool]:
    """Create or overwrite the entry keyed by ``(employee_id, entry_type, period_key)``.

    Returns ``(entry, created)``. Only ACCRUAL and CARRYOVER entries are
    upserted.
    """
    if entry_type not in IDEMPOTENT_ENTRY_TYPES:
        msg = f"upsert_entry does not accept {entry_type} entries"
        raise ValueError(msg)

    entry = await find_entry(session, employee_id, entry_type, period_key)
    if entry is None:
        entry = LeaveLedgerEntry(
            employee_id=employee_id,
            entry_type=entry_type.value,
            period_key=period_key,
            amount_minutes=amount_minutes,
            notes=notes,
            created_by=created_by,
        )
        session.add(entry)
        await session.flush()
        return entry, True

    entry.amount_minutes = amount_minutes
    entry.notes = notes
    entry.created_by = created_by
    await session.flush()
    return entry, False


async def delete_entries_where(
    session: AsyncSession,
    employee_id: uuid.UUID,
    entry_type: LedgerEntryType,
    predicate: Callable[[LeaveLedgerEntry], bool],
) -> int:
    """Delete the employee's entries of one type that match ``predicate``.

    Only superseded carryover entries are ever purged; TAKEN entries are
    refused outright.
    """
    if entry_type == LedgerEntryType.TAKEN:
        msg = "TAKEN entries are never deleted"
        raise ValueError(msg)

    deleted = 0
    for entry in await query_entries(session, employee_id, entry_type=entry_type):
        if predicate(entry):
            await session.delete(entry)
            deleted += 1
    if deleted:
        await session.flush()
    return deleted
