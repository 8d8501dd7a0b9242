"""Row integrity rules applied before categorization and duplicate checks.

Every rule is evaluated for every row so callers get the complete report in
one pass. Rows with at least one error are excluded downstream; warnings are
advisory only.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from .config import ImportSettings
from .models import (
    TRANSACTION_TYPES,
    NormalizedTransaction,
    RawRow,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from .normalize import iso_date, normalize_rows

MSG_INVALID_DATE = "Invalid date format"
MSG_DESCRIPTION_REQUIRED = "Description is required"
MSG_AMOUNT_NOT_POSITIVE = "Amount must be greater than zero"
MSG_INVALID_TYPE = "Type must be debit or credit"
MSG_LARGE_AMOUNT = "Large transaction amount - please verify"
MSG_LONG_DESCRIPTION = "Description is very long and may be truncated"
MSG_AMOUNT_TOO_LARGE = "Amount exceeds the maximum the ledger can store"

# Ledger amounts are Numeric(18, 2): sixteen integer digits.
MAX_AMOUNT = Decimal("9999999999999999.99")

_DEFAULT_SETTINGS = ImportSettings()


def _row_errors(idx: int, tx: NormalizedTransaction) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if not tx.date_parsed or iso_date(tx.date) is None:
        errors.append(ValidationError(idx, "date", MSG_INVALID_DATE))
    if not tx.description.strip():
        errors.append(ValidationError(idx, "description", MSG_DESCRIPTION_REQUIRED))
    if tx.amount is None or tx.amount <= 0:
        errors.append(ValidationError(idx, "amount", MSG_AMOUNT_NOT_POSITIVE))
    elif tx.amount > MAX_AMOUNT:
        errors.append(ValidationError(idx, "amount", MSG_AMOUNT_TOO_LARGE))
    if tx.balance is not None and abs(tx.balance) > MAX_AMOUNT:
        errors.append(ValidationError(idx, "balance", MSG_AMOUNT_TOO_LARGE))
    if tx.type not in TRANSACTION_TYPES:
        errors.append(ValidationError(idx, "type", MSG_INVALID_TYPE))
    return errors


def _row_warnings(
    idx: int, tx: NormalizedTransaction, settings: ImportSettings
) -> list[ValidationWarning]:
    warnings: list[ValidationWarning] = []
    if tx.amount is not None and tx.amount > settings.large_amount_warning:
        warnings.append(ValidationWarning(idx, "amount", MSG_LARGE_AMOUNT))
    if len(tx.description) > settings.max_description_length:
        warnings.append(ValidationWarning(idx, "description", MSG_LONG_DESCRIPTION))
    return warnings


def validate_transactions(
    transactions: Sequence[NormalizedTransaction],
    *,
    settings: ImportSettings | None = None,
) -> ValidationResult:
    """Validate normalized rows; ``row_index`` is the position in ``transactions``."""

    cfg = settings or _DEFAULT_SETTINGS
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []
    for idx, tx in enumerate(transactions):
        errors.extend(_row_errors(idx, tx))
        warnings.extend(_row_warnings(idx, tx, cfg))
    return ValidationResult(
        is_valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )


def validate_import_data(
    rows: Iterable[RawRow],
    *,
    settings: ImportSettings | None = None,
) -> ValidationResult:
    """Normalize and validate raw rows for a live preview. Pure."""

    cfg = settings or _DEFAULT_SETTINGS
    return validate_transactions(
        normalize_rows(rows, date_formats=cfg.date_formats), settings=cfg
    )


__all__ = [
    "MSG_INVALID_DATE",
    "MSG_DESCRIPTION_REQUIRED",
    "MSG_AMOUNT_NOT_POSITIVE",
    "MSG_INVALID_TYPE",
    "MSG_LARGE_AMOUNT",
    "MSG_LONG_DESCRIPTION",
    "MSG_AMOUNT_TOO_LARGE",
    "MAX_AMOUNT",
    "validate_transactions",
    "validate_import_data",
]
