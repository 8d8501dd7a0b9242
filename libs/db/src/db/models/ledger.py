from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return str(uuid4())


# ---------------------------
# Reference: si_bank_accounts
# ---------------------------


class SiBankAccount(Base):
    __tablename__ = "si_bank_accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Inactive accounts are rejected by the importer as a precondition failure.
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Touched at the start of every import; the UPDATE doubles as the per-account
    # write lock that serializes concurrent imports across processes.
    last_import_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# ---------------------------
# Core: si_transactions
# ---------------------------


class SiTransaction(Base):
    __tablename__ = "si_transactions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    # Back-reference only; the importer never mutates accounts.
    bank_account_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("si_bank_accounts.id"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    # Stored exactly as normalized at import; exact duplicate matching relies on it.
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    type: Mapped[str] = mapped_column(String(6), nullable=False)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    reference: Mapped[str | None] = mapped_column(String, nullable=True)
    merchant: Mapped[str | None] = mapped_column(Text, nullable=True)
    balance: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    is_reconciled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("type in ('debit','credit')", name="ck_si_tx_type"),
        CheckConstraint("amount > 0", name="ck_si_tx_amount_positive"),
        # Duplicate detection reads the ledger window per account and date.
        Index("ix_si_tx_account_date", "bank_account_id", "date"),
    )


__all__ = [
    "Base",
    "SiBankAccount",
    "SiTransaction",
]
