# ruff: noqa: I001
"""Bank accounts and imported ledger transactions.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "si_bank_accounts",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "si_transactions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "bank_account_id",
            sa.String(64),
            sa.ForeignKey("si_bank_accounts.id"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("type", sa.String(6), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("reference", sa.String(), nullable=True),
        sa.Column("merchant", sa.Text(), nullable=True),
        sa.Column("balance", sa.Numeric(18, 2), nullable=True),
        sa.Column(
            "is_reconciled", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("type in ('debit','credit')", name="ck_si_tx_type"),
        sa.CheckConstraint("amount > 0", name="ck_si_tx_amount_positive"),
    )

    op.create_index(
        "ix_si_tx_account_date",
        "si_transactions",
        ["bank_account_id", "date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_si_tx_account_date", table_name="si_transactions")
    op.drop_table("si_transactions")
    op.drop_table("si_bank_accounts")
