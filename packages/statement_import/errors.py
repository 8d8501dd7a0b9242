"""Exception types raised by the import engine.

Row-level problems (bad dates, empty descriptions, duplicates) are reported in
results and never raised. Only caller mistakes, contention, and storage
failures surface as exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ImportResult


class StatementImportError(Exception):
    """Base exception for the import engine."""


class ImportPreconditionError(StatementImportError, ValueError):
    """The import was rejected before any row was processed."""


class MissingAccountError(ImportPreconditionError):
    """No bank account was selected for the import."""


class EmptyBatchError(ImportPreconditionError):
    """The batch contains no rows."""


class UnknownAccountError(ImportPreconditionError):
    """The bank account does not exist or is inactive."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Bank account not found or inactive: {account_id!r}")
        self.account_id = account_id


class ImportInProgressError(StatementImportError):
    """Another import holds the account and the wait timed out."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"An import is already running for bank account {account_id!r}")
        self.account_id = account_id


class LedgerStoreError(StatementImportError, RuntimeError):
    """The Ledger Store could not complete a read or write."""


class ImportCommitError(StatementImportError):
    """The batch could not be committed; nothing was persisted.

    ``result`` is the failed outcome (``success=False``, zero imported) so
    callers can still render validation errors and duplicate counts.
    """

    def __init__(self, message: str, *, result: ImportResult) -> None:
        super().__init__(message)
        self.result = result


__all__ = [
    "StatementImportError",
    "ImportPreconditionError",
    "MissingAccountError",
    "EmptyBatchError",
    "UnknownAccountError",
    "ImportInProgressError",
    "LedgerStoreError",
    "ImportCommitError",
]
