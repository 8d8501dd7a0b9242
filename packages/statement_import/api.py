"""Public operations of the ``statement_import`` package.

This module is the stable import surface for callers (upload/preview UIs,
the CLI). The preview operations are pure; :func:`run_import` is the only
operation with side effects.

- :func:`validate_import_data`: validate raw rows for a live preview.
- :func:`detect_duplicates`: indices that would be skipped as duplicates.
- :func:`categorize_transactions`: annotate rows with rule-based categories.
- :func:`preview_import`: all of the above against an account's ledger.
- :func:`run_import`: the full pipeline including the commit.
- :func:`get_import_summary`: reporting projection over an import result.
"""

from __future__ import annotations

from .categorization import categorize_transactions
from .duplicates import detect_duplicates
from .importer import duplicate_options, preview_import, run_import
from .summary import get_import_summary
from .validation import validate_import_data

__all__ = [
    "validate_import_data",
    "detect_duplicates",
    "categorize_transactions",
    "duplicate_options",
    "preview_import",
    "run_import",
    "get_import_summary",
]
