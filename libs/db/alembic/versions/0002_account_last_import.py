# ruff: noqa: I001
"""Track the last import per bank account.

Revision ID: 0002_account_last_import
Revises: 0001_ledger_core
Create Date: 2026-10-20
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_account_last_import"
down_revision: str | None = "0001_ledger_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "si_bank_accounts",
        sa.Column("last_import_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    with op.batch_alter_table("si_bank_accounts") as batch:
        batch.drop_column("last_import_at")
