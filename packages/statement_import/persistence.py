# ruff: noqa: I001
"""Ledger Store contract and its SQLAlchemy implementation.

The import engine needs three things from storage: whether an account may
receive imports, the account's existing transactions (the duplicate
comparison window), and an all-or-nothing batch insert. An import reads the
window and inserts in one exclusive per-account transaction opened with
:meth:`LedgerStore.lock_account`, so a concurrent import for the same account
(in this process or another one) only sees the ledger after the first commit.

``SqlLedgerStore`` takes that exclusivity by updating the account row's
``last_import_at`` first: the UPDATE holds the row lock on PostgreSQL and the
database write lock on SQLite until the transaction ends.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import AbstractContextManager, contextmanager
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.client import session_scope
from db.models.ledger import SiBankAccount, SiTransaction
from .logging_setup import get_logger
from .errors import LedgerStoreError
from .models import LedgerTransaction, NormalizedTransaction
from .normalize import iso_date

_logger = get_logger("statement_import.persistence")


class AccountLedger(Protocol):
    """One account's ledger inside an exclusive, not yet committed transaction."""

    def list_transactions(self) -> list[LedgerTransaction]: ...

    def insert_batch(self, transactions: Sequence[NormalizedTransaction]) -> list[LedgerTransaction]: ...


@runtime_checkable
class LedgerStore(Protocol):
    """Backing store of committed transactions, keyed by bank account."""

    def account_exists(self, account_id: str) -> bool: ...

    def list_transactions(self, account_id: str) -> list[LedgerTransaction]: ...

    def insert_batch(
        self, account_id: str, transactions: Sequence[NormalizedTransaction]
    ) -> list[LedgerTransaction]:
        """Persist every row or none of them; raise ``LedgerStoreError`` on failure."""
        ...

    def lock_account(self, account_id: str) -> AbstractContextManager[AccountLedger]:
        """Open an exclusive transaction for ``account_id``.

        Inserts become visible when the ``with`` block exits cleanly and are
        discarded if it raises. Failures, including the final commit, raise
        ``LedgerStoreError``.
        """
        ...
def _to_ledger(row: SiTransaction) -> LedgerTransaction:
    return LedgerTransaction(
        id=row.id,
        bank_account_id=row.bank_account_id,
        date=row.date,
        description=row.description,
        amount=row.amount,
        type=row.type,
        category=row.category,
        reference=row.reference,
        merchant=row.merchant,
        balance=row.balance,
        is_reconciled=row.is_reconciled,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_row(account_id: str, tx: NormalizedTransaction, now: datetime) -> SiTransaction:
    d = iso_date(tx.date)
    if d is None or tx.amount is None:
        # Validation runs before commit; reaching this is a programming error.
        raise ValueError(f"cannot persist unvalidated row: {tx!r}")
    return SiTransaction(
        bank_account_id=account_id,
        date=d,
        description=tx.description,
        amount=tx.amount,
        type=tx.type,
        category=tx.category,
        reference=tx.reference,
        merchant=tx.merchant,
        balance=tx.balance,
        is_reconciled=False,
        created_at=now,
        updated_at=now,
    )


class _SqlAccountLedger:
    """:class:`AccountLedger` bound to the session holding the account lock."""

    def __init__(self, session: Session, account_id: str) -> None:
        self._session = session
        self.account_id = account_id

    def list_transactions(self) -> list[LedgerTransaction]:
        stmt = (
            select(SiTransaction)
            .where(SiTransaction.bank_account_id == self.account_id)
            .order_by(SiTransaction.date, SiTransaction.created_at, SiTransaction.id)
        )
        return [_to_ledger(r) for r in self._session.execute(stmt).scalars().all()]

    def insert_batch(self, transactions: Sequence[NormalizedTransaction]) -> list[LedgerTransaction]:
        if not transactions:
            return []
        now = datetime.now(UTC)
        rows = [_to_row(self.account_id, tx, now) for tx in transactions]
        self._session.add_all(rows)
        self._session.flush()
        return [_to_ledger(r) for r in rows]


class SqlLedgerStore:
    """:class:`LedgerStore` backed by ``si_bank_accounts``/``si_transactions``."""

    def __init__(self, *, database_url: str | None = None) -> None:
        self.database_url = database_url

    def account_exists(self, account_id: str) -> bool:
        try:
            with session_scope(database_url=self.database_url) as session:
                active = session.execute(
                    select(SiBankAccount.is_active).where(SiBankAccount.id == account_id)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise LedgerStoreError(f"account lookup failed for {account_id!r}: {e}") from e
        return bool(active)

    def list_transactions(self, account_id: str) -> list[LedgerTransaction]:
        """Unlocked read of the committed ledger (previews)."""

        try:
            with session_scope(database_url=self.database_url) as session:
                return _SqlAccountLedger(session, account_id).list_transactions()
        except SQLAlchemyError as e:
            raise LedgerStoreError(f"listing transactions failed for {account_id!r}: {e}") from e

    @contextmanager
    def lock_account(self, account_id: str) -> Iterator[AccountLedger]:
        try:
            with session_scope(database_url=self.database_url) as session:
                touched = session.execute(
                    update(SiBankAccount)
                    .where(SiBankAccount.id == account_id)
                    .values(last_import_at=datetime.now(UTC))
                    .execution_options(synchronize_session=False)
                ).rowcount
                if not touched:
                    raise LedgerStoreError(f"bank account disappeared: {account_id!r}")
                _logger.debug("holding ledger lock for account %s", account_id)
                yield _SqlAccountLedger(session, account_id)
        except SQLAlchemyError as e:
            raise LedgerStoreError(f"ledger transaction failed for {account_id!r}: {e}") from e

    def insert_batch(
        self, account_id: str, transactions: Sequence[NormalizedTransaction]
    ) -> list[LedgerTransaction]:
        if not transactions:
            return []
        with self.lock_account(account_id) as ledger:
            saved = ledger.insert_batch(transactions)
        _logger.debug("inserted %d transactions for account %s", len(saved), account_id)
        return saved


def create_account(
    account_id: str,
    *,
    name: str,
    is_active: bool = True,
    database_url: str | None = None,
) -> None:
    """Insert a bank account row; idempotent for an existing ``account_id``."""

    with session_scope(database_url=database_url) as session:
        existing = session.get(SiBankAccount, account_id)
        if existing is not None:
            return
        session.add(SiBankAccount(id=account_id, name=name, is_active=is_active))


__all__ = [
    "AccountLedger",
    "LedgerStore",
    "SqlLedgerStore",
    "create_account",
]
