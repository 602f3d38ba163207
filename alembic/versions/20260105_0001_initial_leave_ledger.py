"""initial leave ledger schema

Revision ID: 0001
Revises:
Create Date: 2026-01-05 09:00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=True),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("total_minutes", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leave_request_employee_id", "leave_request", ["employee_id"])
    op.create_index("ix_leave_request_start_date", "leave_request", ["start_date"])

    op.create_table(
        "leave_ledger_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("entry_type", sa.String(length=50), nullable=False),
        sa.Column("amount_minutes", sa.Integer(), nullable=False),
        sa.Column("period_key", sa.String(length=100), nullable=False),
        sa.Column("leave_request_id", sa.Uuid(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["leave_request_id"], ["leave_request.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "entry_type", "period_key", name="uq_leave_ledger_period"),
    )
    op.create_index("ix_leave_ledger_entry_employee_id", "leave_ledger_entry", ["employee_id"])
    op.create_index("ix_leave_ledger_entry_leave_request_id", "leave_ledger_entry", ["leave_request_id"])
    op.create_index("ix_leave_ledger_employee_type", "leave_ledger_entry", ["employee_id", "entry_type"])

    op.create_table(
        "leave_balance_snapshot",
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("legal_hours", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("non_legal_hours", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("carryover_hours", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.PrimaryKeyConstraint("employee_id"),
    )


def downgrade() -> None:
    op.drop_table("leave_balance_snapshot")
    op.drop_index("ix_leave_ledger_employee_type", table_name="leave_ledger_entry")
    op.drop_index("ix_leave_ledger_entry_leave_request_id", table_name="leave_ledger_entry")
    op.drop_index("ix_leave_ledger_entry_employee_id", table_name="leave_ledger_entry")
    op.drop_table("leave_ledger_entry")
    op.drop_index("ix_leave_request_start_date", table_name="leave_request")
    op.drop_index("ix_leave_request_employee_id", table_name="leave_request")
    op.drop_table("leave_request")
