from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Timezone-aware current time; ledger timestamps are always UTC."""
    return datetime.now(UTC)


class UUIDBase(SQLModel):
    """Base for ledger tables keyed by a random UUID."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class TimestampMixin(SQLModel):
    """Adds created_at, which also breaks year ties for entries without a period year."""

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
