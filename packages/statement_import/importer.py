"""Import orchestration: normalize → validate → categorize → dedupe → commit.

The pipeline is sequential and synchronous. Nothing is persisted before the
commit step, so :func:`preview_import` can run the first four steps for a
"what would happen" report and be discarded freely. :func:`run_import` holds
the in-process account lock and the store's account transaction from the
ledger snapshot through the commit so concurrent imports for the same account
cannot both pass duplicate detection against a stale snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .categorization import categorize_transactions
from .config import ImportSettings
from .duplicates import detect_duplicates
from .errors import (
    EmptyBatchError,
    ImportCommitError,
    LedgerStoreError,
    MissingAccountError,
    UnknownAccountError,
)
from .locking import DEFAULT_ACCOUNT_LOCKS, AccountLocks
from .logging_setup import get_logger
from .models import DuplicateOptions, ImportPreview, ImportResult, LedgerTransaction, RawRow
from .normalize import normalize_rows
from .persistence import LedgerStore
from .validation import validate_transactions

_logger = get_logger("statement_import.importer")

_DEFAULT_SETTINGS = ImportSettings()


def duplicate_options(
    settings: ImportSettings | None = None, *, fuzzy_match: bool = False
) -> DuplicateOptions:
    """Build :class:`DuplicateOptions` from configured thresholds."""

    cfg = settings or _DEFAULT_SETTINGS
    return DuplicateOptions(
        fuzzy_match=fuzzy_match,
        similarity_threshold=cfg.fuzzy_similarity_threshold,
        date_tolerance_days=cfg.date_tolerance_days,
    )


def _check_preconditions(account_id: str | None, rows: list[RawRow], store: LedgerStore) -> str:
    if account_id is None or not str(account_id).strip():
        raise MissingAccountError("A bank account must be selected before importing")
    if not rows:
        raise EmptyBatchError("No rows to import")
    acct = str(account_id).strip()
    if not store.account_exists(acct):
        raise UnknownAccountError(acct)
    return acct


def _prepare(
    account_id: str,
    rows: list[RawRow],
    *,
    existing: Sequence[LedgerTransaction],
    options: DuplicateOptions,
    settings: ImportSettings,
) -> ImportPreview:
    # 1) Normalize; positions stay aligned with the caller's rows
    normalized = normalize_rows(rows, date_formats=settings.date_formats)

    # 2) Validate; failing rows drop out but their errors are kept
    validation = validate_transactions(normalized, settings=settings)
    invalid = validation.invalid_rows
    valid_positions = [i for i in range(len(normalized)) if i not in invalid]

    # 3) Categorize the valid subset
    categorized = categorize_transactions(normalized[i] for i in valid_positions)
    transactions = list(normalized)
    for pos, tx in zip(valid_positions, categorized, strict=True):
        transactions[pos] = tx

    # 4) Duplicate-check the valid subset against this account's ledger
    dup_local = detect_duplicates(categorized, existing, options, account_id=account_id)
    dup_positions = {valid_positions[j] for j in dup_local}

    return ImportPreview(
        account_id=account_id,
        validation=validation,
        transactions=tuple(transactions),
        duplicate_indices=tuple(sorted(dup_positions)),
        to_import_indices=tuple(p for p in valid_positions if p not in dup_positions),
    )


def preview_import(
    account_id: str | None,
    rows: Iterable[RawRow],
    *,
    store: LedgerStore,
    fuzzy_match: bool = False,
    options: DuplicateOptions | None = None,
    settings: ImportSettings | None = None,
) -> ImportPreview:
    """Run every step except the commit. Reads the ledger; writes nothing."""

    cfg = settings or _DEFAULT_SETTINGS
    materialized = list(rows)
    acct = _check_preconditions(account_id, materialized, store)
    opts = options or duplicate_options(cfg, fuzzy_match=fuzzy_match)
    existing = store.list_transactions(acct)
    return _prepare(acct, materialized, existing=existing, options=opts, settings=cfg)


def run_import(
    account_id: str | None,
    rows: Iterable[RawRow],
    *,
    store: LedgerStore,
    fuzzy_match: bool = False,
    options: DuplicateOptions | None = None,
    settings: ImportSettings | None = None,
    locks: AccountLocks | None = None,
) -> ImportResult:
    """Import ``rows`` into the ledger of ``account_id`` and report the outcome.

    Raises
    ------
    ImportPreconditionError
        No account selected, empty batch, or unknown/inactive account.
    ImportInProgressError
        Another import held the account past ``settings.lock_timeout_seconds``.
    ImportCommitError
        The batch insert failed; nothing was persisted. ``.result`` carries the
        failed outcome.
    LedgerStoreError
        The account could not be locked or its ledger snapshot could not be read.
    """

    cfg = settings or _DEFAULT_SETTINGS
    materialized = list(rows)
    acct = _check_preconditions(account_id, materialized, store)
    opts = options or duplicate_options(cfg, fuzzy_match=fuzzy_match)
    registry = locks or DEFAULT_ACCOUNT_LOCKS

    _logger.info(
        "import start: account=%s rows=%d fuzzy=%s", acct, len(materialized), opts.fuzzy_match
    )
    preview: ImportPreview | None = None
    with registry.hold(acct, timeout=cfg.lock_timeout_seconds):
        try:
            # Snapshot, dedupe and insert share one locked store transaction, so
            # an import running in another process waits here and then sees
            # these rows in its own snapshot.
            with store.lock_account(acct) as ledger:
                preview = _prepare(
                    acct,
                    materialized,
                    existing=ledger.list_transactions(),
                    options=opts,
                    settings=cfg,
                )
                if preview.validation.errors:
                    _logger.info(
                        "validation rejected %d of %d rows",
                        len(preview.validation.invalid_rows),
                        len(materialized),
                    )

                # 5) Commit the survivors as one all-or-nothing batch
                saved = ledger.insert_batch(preview.to_import)
        except LedgerStoreError as e:
            if preview is None:
                # Lock or snapshot read failed before any row was considered.
                raise
            _logger.error("import commit failed for account %s", acct, exc_info=True)
            failed = ImportResult(
                success=False,
                imported_count=0,
                duplicates_skipped=len(preview.duplicate_indices),
                errors=preview.validation.errors,
                transactions=(),
                warnings=preview.validation.warnings,
                account_id=acct,
            )
            raise ImportCommitError(f"Import failed for account {acct!r}: {e}", result=failed) from e

    # 6) Build the result
    result = ImportResult(
        success=True,
        imported_count=len(saved),
        duplicates_skipped=len(preview.duplicate_indices),
        errors=preview.validation.errors,
        transactions=tuple(saved),
        warnings=preview.validation.warnings,
        account_id=acct,
    )
    _logger.info(
        "import done: account=%s imported=%d duplicates=%d errors=%d",
        acct,
        result.imported_count,
        result.duplicates_skipped,
        len(result.errors),
    )
    return result


__all__ = ["duplicate_options", "preview_import", "run_import"]
