"""Duplicate detection of incoming rows against an account's ledger.

Two layers are applied per row, in order:

- exact: an existing transaction with the same date, the same amount and a
  byte-for-byte identical description (case-sensitive);
- fuzzy (opt-in): same amount, date within ``date_tolerance_days`` (0 by
  default) and a description whose normalized key is similar enough.

Fuzzy matching only ever adds matches, so the fuzzy result is always a
superset of the exact one. A row matching several existing transactions is
reported once. Rows are never compared with each other: two identical
purchases in one statement are both real.

The existing ledger window is an explicit argument; this module holds no
state and performs no I/O.
"""

from __future__ import annotations

import re
import unicodedata
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from rapidfuzz import fuzz

from .logging_setup import get_logger
from .models import DuplicateOptions, LedgerTransaction, NormalizedTransaction
from .normalize import iso_date

_logger = get_logger("statement_import.duplicates")

_NON_WORD_RE = re.compile(r"[\W_]+")


# ---- Description similarity --------------------------------------------------


def description_key(text: str) -> str:
    """Return the comparison key used for fuzzy description matching.

    NFKC-normalizes and case-folds, turns punctuation into spaces, drops
    purely numeric tokens (store numbers, terminal ids) and collapses
    whitespace. ``"STARBUCKS #123 MAIN ST"`` becomes ``"starbucks main st"``.
    """

    s = unicodedata.normalize("NFKC", text).casefold()
    tokens = [t for t in _NON_WORD_RE.sub(" ", s).split() if not t.isdigit()]
    return " ".join(tokens)


def description_similarity(a: str, b: str) -> float:
    """Token-set similarity of two descriptions in ``[0, 1]``.

    One key's tokens being a subset of the other's scores 1.0. Empty keys
    score 0.0 so blank or number-only descriptions never match fuzzily.
    """

    ka, kb = description_key(a), description_key(b)
    if not ka or not kb:
        return 0.0
    return fuzz.token_set_ratio(ka, kb) / 100.0


# ---- Ledger index --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Candidate:
    date: date
    type: str
    key: str


class _LedgerIndex:
    """Lookup structures over the existing ledger window."""

    def __init__(self, existing: Iterable[LedgerTransaction], *, match_type: bool) -> None:
        self._match_type = match_type
        self.exact: set[tuple[object, ...]] = set()
        self.by_amount: defaultdict[Decimal, list[_Candidate]] = defaultdict(list)
        for tx in existing:
            self.exact.add(self.exact_key(tx.date, tx.amount, tx.description, tx.type))
            self.by_amount[tx.amount].append(
                _Candidate(date=tx.date, type=tx.type, key=description_key(tx.description))
            )

    def exact_key(
        self, d: date, amount: Decimal, description: str, tx_type: str
    ) -> tuple[object, ...]:
        if self._match_type:
            return (d, amount, description, tx_type)
        return (d, amount, description)


def _fuzzy_hit(
    d: date,
    tx: NormalizedTransaction,
    candidates: Sequence[_Candidate],
    options: DuplicateOptions,
) -> float | None:
    key = description_key(tx.description)
    if not key:
        return None
    for cand in candidates:
        if abs((cand.date - d).days) > options.date_tolerance_days:
            continue
        if options.match_type and cand.type != tx.type:
            continue
        if not cand.key:
            continue
        score = fuzz.token_set_ratio(key, cand.key) / 100.0
        if score >= options.similarity_threshold:
            return score
    return None


# ---- Public API ----------------------------------------------------------------


def detect_duplicates(
    transactions: Sequence[NormalizedTransaction],
    existing: Iterable[LedgerTransaction],
    options: DuplicateOptions | None = None,
    *,
    account_id: str | None = None,
) -> list[int]:
    """Return ascending indices into ``transactions`` already present in ``existing``.

    When ``account_id`` is given, existing transactions from other bank
    accounts are ignored. Rows whose date or amount is unusable are never
    reported as duplicates.
    """

    opts = options or DuplicateOptions()
    window = [
        tx for tx in existing if account_id is None or tx.bank_account_id == account_id
    ]
    if not window:
        return []
    index = _LedgerIndex(window, match_type=opts.match_type)

    duplicates: list[int] = []
    fuzzy_hits = 0
    for i, tx in enumerate(transactions):
        d = iso_date(tx.date)
        if not tx.date_parsed or d is None or tx.amount is None:
            continue
        if index.exact_key(d, tx.amount, tx.description, tx.type) in index.exact:
            duplicates.append(i)
            continue
        if not opts.fuzzy_match:
            continue
        score = _fuzzy_hit(d, tx, index.by_amount.get(tx.amount, ()), opts)
        if score is not None:
            fuzzy_hits += 1
            _logger.debug(
                "fuzzy duplicate row=%d description=%r similarity=%.2f", i, tx.description, score
            )
            duplicates.append(i)

    _logger.debug(
        "duplicate check: rows=%d existing=%d duplicates=%d (fuzzy=%d)",
        len(transactions),
        len(window),
        len(duplicates),
        fuzzy_hits,
    )
    return duplicates


__all__ = [
    "description_key",
    "description_similarity",
    "detect_duplicates",
]
