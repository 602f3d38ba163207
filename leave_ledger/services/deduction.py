from __future__ import annotations

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import ValidationError

from leave_ledger.exceptions import AppError
from leave_ledger.models.enums import BalanceBucket
from leave_ledger.schemas.balance import BalanceResponse, BucketBalances, DeductionPolicy
from leave_ledger.services.balance import minutes_to_hours
from leave_ledger.services.employee import require_employee
from leave_ledger.services.ledger import lock_employee_balance
from leave_ledger.services.roster import get_leave_settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.roster import LeaveSettings

_ZERO = Decimal("0.00")


def default_deduction_policy(leave_settings: LeaveSettings) -> DeductionPolicy:
    """Build the organization's deduction policy.

    Only the LEGAL bucket may go negative, and only when the settings allow it.
    """
    allow_negative = frozenset({BalanceBucket.LEGAL}) if leave_settings.allow_negative_balance else frozenset()
    return DeductionPolicy(order=list(leave_settings.deduction_order), allow_negative=allow_negative)


def apply_deduction(balances: BucketBalances, requested_minutes: int, policy: DeductionPolicy) -> BucketBalances:
    """Walk the policy order taking hours from each bucket.

    A bucket that may go negative absorbs the whole remainder; any other
    bucket gives at most what it holds and ends at zero or above. Whatever
    is left after the last bucket is dropped.
    """
    remaining = minutes_to_hours(requested_minutes)
    for bucket in policy.order:
        if remaining <= 0:
            break
        value = balances.get(bucket)
        if policy.allows_negative(bucket):
            balances = balances.with_value(bucket, value - remaining)
            remaining = _ZERO
            continue
        taken = max(_ZERO, min(remaining, value))
        balances = balances.with_value(bucket, value - taken)
        remaining -= taken

    for bucket in BalanceBucket:
        if not policy.allows_negative(bucket) and balances.get(bucket) < 0:
            balances = balances.with_value(bucket, _ZERO)
    return balances


async def deduct(
    session: AsyncSession,
    employee_id: uuid.UUID,
    requested_minutes: int,
    policy: DeductionPolicy | None = None,
) -> BalanceResponse:
    """Debit ``requested_minutes`` from the cached buckets and commit.

    Without an explicit policy the organization's leave settings decide the
    order and the negative-balance rule. Only the snapshot moves: the ledger
    stays authoritative, so the next sync rebuilds the buckets from it. Leave
    that must persist is booked as TAKEN.
    """
    await require_employee(employee_id)
    if policy is None:
        policy = default_deduction_policy(await get_leave_settings())

    snapshot = await lock_employee_balance(session, employee_id)
    current = BucketBalances(
        legal_hours=snapshot.legal_hours,
        non_legal_hours=snapshot.non_legal_hours,
        carryover_hours=snapshot.carryover_hours,
    )
    updated = apply_deduction(current, requested_minutes, policy)

    snapshot.legal_hours = updated.legal_hours
    snapshot.non_legal_hours = updated.non_legal_hours
    snapshot.carryover_hours = updated.carryover_hours
    snapshot.updated_at = datetime.now(UTC)
    snapshot.version += 1

    await session.commit()
    return BalanceResponse(
        employee_id=employee_id,
        legal_hours=updated.legal_hours,
        non_legal_hours=updated.non_legal_hours,
        carryover_hours=updated.carryover_hours,
        total_hours=updated.total_hours,
        updated_at=snapshot.updated_at,
        version=snapshot.version,
    )


async def resolve_deduction_policy(
    order: list[BalanceBucket] | None = None,
    allow_negative: list[BalanceBucket] | None = None,
) -> DeductionPolicy:
    """Merge caller overrides with the organization's default policy."""
    default = default_deduction_policy(await get_leave_settings())
    try:
        return DeductionPolicy(
            order=order if order is not None else default.order,
            allow_negative=frozenset(allow_negative) if allow_negative is not None else default.allow_negative,
        )
    except ValidationError as exc:
        raise AppError(f"Invalid deduction policy: {exc.errors()[0]['msg']}", status_code=422) from None
