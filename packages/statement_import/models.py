"""Data models and type aliases for ``statement_import``.

Rows move one way through the engine: raw extractor rows are normalized,
validated, categorized, filtered against the ledger, persisted, and
summarized. Every model here is an immutable value; stages return new
instances instead of mutating their inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

# ---------------------------------------------------------------------------
# Input rows
# ---------------------------------------------------------------------------

type RawRow = Mapping[str, Any]
"""A single tabular row as yielded by the external Row Extractor.

Expected keys are ``date``, ``description``, ``amount`` and ``type``; the
optional ``reference``, ``merchant``, ``balance`` and ``category`` keys are
carried through when present. Values are whatever the extractor produced
(usually strings); unknown keys are ignored.
"""

type TransactionType = Literal["debit", "credit"]

TRANSACTION_TYPES: frozenset[str] = frozenset({"debit", "credit"})


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """A raw row coerced into canonical shape, still unvalidated.

    ``date`` is ``YYYY-MM-DD`` when the input parsed, otherwise the trimmed
    original text and ``date_parsed`` is False (even if that text happens to
    look like an ISO date the configured formats do not accept). ``amount`` is a non-negative ``Decimal`` with two places,
    or ``None`` when the input was not numeric. ``type`` is ``debit`` or
    ``credit`` when recognized, otherwise the lower-cased input.
    ``category`` stays ``None`` until the categorizer assigns one.
    """

    date: str
    description: str
    amount: Decimal | None
    type: str
    category: str | None = None
    reference: str | None = None
    merchant: str | None = None
    balance: Decimal | None = None
    date_parsed: bool = True


@dataclass(frozen=True, slots=True)
class LedgerTransaction:
    """A transaction persisted in the Ledger Store for one bank account."""

    id: str
    bank_account_id: str
    date: date
    description: str
    amount: Decimal
    type: str
    category: str | None = None
    reference: str | None = None
    merchant: str | None = None
    balance: Decimal | None = None
    is_reconciled: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A rule violation for one row. Rows with any error are not imported."""

    row_index: int
    field: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationWarning:
    """An advisory finding for one row. Never excludes the row."""

    row_index: int
    field: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    is_valid: bool
    errors: tuple[ValidationError, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()

    @property
    def invalid_rows(self) -> frozenset[int]:
        """Indices of rows with at least one error."""

        return frozenset(e.row_index for e in self.errors)


# ---------------------------------------------------------------------------
# Duplicate matching options
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DuplicateOptions:
    """Knobs for :func:`statement_import.duplicates.detect_duplicates`.

    Attributes
    ----------
    fuzzy_match:
        Also treat rows whose description is merely similar as duplicates.
    similarity_threshold:
        Minimum description similarity in ``[0, 1]`` for a fuzzy match.
    date_tolerance_days:
        Maximum date distance for a fuzzy match. Exact matching always
        requires the same date.
    match_type:
        Require candidates to share ``type`` (debit/credit) as well.
    """

    fuzzy_match: bool = False
    similarity_threshold: float = 0.8
    date_tolerance_days: int = 0
    match_type: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError("DuplicateOptions.similarity_threshold must be within [0,1]")
        # Booleans are ints; disallow them explicitly.
        if (
            isinstance(self.date_tolerance_days, bool)
            or not isinstance(self.date_tolerance_days, int)
            or self.date_tolerance_days < 0
        ):
            raise ValueError("DuplicateOptions.date_tolerance_days must be a non-negative integer")


# ---------------------------------------------------------------------------
# Import outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImportResult:
    """The atomic outcome of one import run against one bank account.

    ``success`` reports whether the commit completed; rows rejected by
    validation are listed in ``errors`` and excluded from both
    ``imported_count`` and ``duplicates_skipped``.
    """

    success: bool
    imported_count: int
    duplicates_skipped: int
    errors: tuple[ValidationError, ...] = ()
    transactions: tuple[LedgerTransaction, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()
    account_id: str | None = None


@dataclass(frozen=True, slots=True)
class ImportPreview:
    """Everything an import would do, computed without persisting anything.

    ``duplicate_indices`` and ``to_import_indices`` index into the original
    input batch.
    """

    account_id: str
    validation: ValidationResult
    transactions: tuple[NormalizedTransaction, ...]
    duplicate_indices: tuple[int, ...]
    to_import_indices: tuple[int, ...]

    @property
    def to_import(self) -> list[NormalizedTransaction]:
        return [self.transactions[i] for i in self.to_import_indices]


@dataclass(frozen=True, slots=True)
class DateRange:
    earliest: date | None = None
    latest: date | None = None


@dataclass(frozen=True, slots=True)
class ImportSummary:
    """Read-only reporting view over an :class:`ImportResult`."""

    total_processed: int
    successful_imports: int
    duplicates_skipped: int
    errors_count: int
    categorized_count: int
    date_range: DateRange = field(default_factory=DateRange)
    total_credits: Decimal = Decimal("0.00")
    total_debits: Decimal = Decimal("0.00")
    net_amount: Decimal = Decimal("0.00")
    category_counts: Mapping[str, int] = field(default_factory=dict)


__all__ = [
    "RawRow",
    "TransactionType",
    "TRANSACTION_TYPES",
    "NormalizedTransaction",
    "LedgerTransaction",
    "ValidationError",
    "ValidationWarning",
    "ValidationResult",
    "DuplicateOptions",
    "ImportResult",
    "ImportPreview",
    "DateRange",
    "ImportSummary",
]
