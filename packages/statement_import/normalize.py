"""Raw extractor rows → :class:`NormalizedTransaction`.

The normalizer never rejects a row. Output is positionally 1:1 with input so
that validation errors always point at the caller's original row index;
anything that cannot be coerced is passed through for the validator to
report.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .config import DEFAULT_DATE_FORMATS
from .models import NormalizedTransaction, RawRow

_TYPE_ALIASES: dict[str, str] = {
    "debit": "debit",
    "dr": "debit",
    "withdrawal": "debit",
    "credit": "credit",
    "cr": "credit",
    "deposit": "credit",
}

_CENTS = Decimal("0.01")


# ---------------------------------------------------------------------------
# Field coercion helpers
# ---------------------------------------------------------------------------


def _norm_str(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def _to_decimal(raw: Any) -> Decimal | None:
    """Parse a signed amount; ``None`` when not numeric.

    Accepts numbers and strings like ``"1,234.56"``, ``"$12.00"``,
    ``"-4.50"`` and ``"(4.50)"`` (parentheses mean negative).
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, int | float):
        # str() keeps 4.5 as "4.5" rather than its binary expansion
        d = Decimal(str(raw))
    else:
        s = str(raw).strip()
        negative = False
        # Strip sign, currency symbol and parentheses in any order until stable.
        while True:
            changed = False
            if s.startswith("+"):
                s = s[1:].lstrip()
                changed = True
            elif s.startswith("-"):
                negative = True
                s = s[1:].lstrip()
                changed = True
            if s.startswith("$"):
                s = s[1:].lstrip()
                changed = True
            if s.startswith("(") and s.endswith(")") and len(s) >= 2:
                negative = True
                s = s[1:-1].strip()
                changed = True
            if not changed:
                break
        s = s.replace(",", "").strip()
        if not s:
            return None
        try:
            d = Decimal(s)
        except InvalidOperation:
            return None
        if negative:
            d = -abs(d)
    if not d.is_finite():
        return None
    try:
        return d.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold
        return None


def parse_date(raw: Any, formats: Sequence[str] = DEFAULT_DATE_FORMATS) -> date | None:
    """Return the calendar date for ``raw`` or ``None`` when it does not parse.

    ``date``/``datetime`` objects pass through. Strings are tried against
    ``formats`` in order; an ISO timestamp (``YYYY-MM-DDTHH:MM:SS``) is
    reduced to its date part first.
    """

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = _norm_str(raw)
    if s is None:
        return None
    candidates = [s]
    head = s.split("T", 1)[0].split(" ", 1)[0]
    if head != s:
        candidates.append(head)
    for text in candidates:
        for fmt in formats:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
    return None


def iso_date(text: str) -> date | None:
    """Parse a normalized ``YYYY-MM-DD`` date string."""

    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def _normalize_type(raw: Any, signed_amount: Decimal | None) -> str:
    t = _norm_str(raw)
    if t is None:
        # Statement exports without a type column sign debits negative.
        if signed_amount is None:
            return ""
        return "debit" if signed_amount < 0 else "credit"
    lowered = t.lower()
    return _TYPE_ALIASES.get(lowered, lowered)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_row(
    row: RawRow, *, date_formats: Sequence[str] = DEFAULT_DATE_FORMATS
) -> NormalizedTransaction:
    """Coerce a single raw row; never raises for bad field values."""

    raw_date = row.get("date")
    parsed = parse_date(raw_date, date_formats)
    if parsed is not None:
        date_text = parsed.isoformat()
    else:
        date_text = "" if raw_date is None else str(raw_date).strip()

    signed = _to_decimal(row.get("amount"))
    balance = _to_decimal(row.get("balance"))

    return NormalizedTransaction(
        date=date_text,
        description="" if row.get("description") is None else str(row["description"]).strip(),
        amount=abs(signed) if signed is not None else None,
        type=_normalize_type(row.get("type"), signed),
        category=_norm_str(row.get("category")),
        reference=_norm_str(row.get("reference")),
        merchant=_norm_str(row.get("merchant")),
        balance=balance,
        date_parsed=parsed is not None,
    )


def normalize_rows(
    rows: Iterable[RawRow], *, date_formats: Sequence[str] = DEFAULT_DATE_FORMATS
) -> list[NormalizedTransaction]:
    """Normalize a batch, preserving length and order."""

    return [normalize_row(r, date_formats=date_formats) for r in rows]


__all__ = ["iso_date", "normalize_row", "normalize_rows", "parse_date"]
