"""Public interface for the ``statement_import`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import (
    categorize_transactions,
    detect_duplicates,
    duplicate_options,
    get_import_summary,
    preview_import,
    run_import,
    validate_import_data,
)
from .config import ImportSettings, load_settings
from .errors import (
    EmptyBatchError,
    ImportCommitError,
    ImportInProgressError,
    ImportPreconditionError,
    LedgerStoreError,
    MissingAccountError,
    StatementImportError,
    UnknownAccountError,
)
from .models import (
    DateRange,
    DuplicateOptions,
    ImportPreview,
    ImportResult,
    ImportSummary,
    LedgerTransaction,
    NormalizedTransaction,
    RawRow,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from .normalize import normalize_rows
from .persistence import LedgerStore, SqlLedgerStore

__all__ = [
    # API
    "validate_import_data",
    "detect_duplicates",
    "categorize_transactions",
    "duplicate_options",
    "preview_import",
    "run_import",
    "get_import_summary",
    "normalize_rows",
    # Storage
    "LedgerStore",
    "SqlLedgerStore",
    # Configuration
    "ImportSettings",
    "load_settings",
    # Models / types
    "RawRow",
    "NormalizedTransaction",
    "LedgerTransaction",
    "ValidationError",
    "ValidationWarning",
    "ValidationResult",
    "DuplicateOptions",
    "ImportPreview",
    "ImportResult",
    "ImportSummary",
    "DateRange",
    # Errors
    "StatementImportError",
    "ImportPreconditionError",
    "MissingAccountError",
    "EmptyBatchError",
    "UnknownAccountError",
    "ImportInProgressError",
    "ImportCommitError",
    "LedgerStoreError",
]
