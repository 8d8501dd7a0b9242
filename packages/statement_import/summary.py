"""Reporting projection over an :class:`ImportResult`."""

from __future__ import annotations

from collections import Counter
from decimal import Decimal

from .models import DateRange, ImportResult, ImportSummary


def get_import_summary(result: ImportResult) -> ImportSummary:
    """Summarize an import; date range and totals cover imported rows only.

    ``total_processed`` counts rows that reached duplicate detection
    (imported + skipped); rows rejected by validation are reported through
    ``errors_count`` instead. ``category_counts`` omits uncategorized rows.
    """

    txs = result.transactions
    dates = sorted(t.date for t in txs)
    credits = sum((t.amount for t in txs if t.type == "credit"), Decimal("0.00"))
    debits = sum((t.amount for t in txs if t.type == "debit"), Decimal("0.00"))
    categories = Counter(t.category for t in txs if t.category)

    return ImportSummary(
        total_processed=result.imported_count + result.duplicates_skipped,
        successful_imports=result.imported_count,
        duplicates_skipped=result.duplicates_skipped,
        errors_count=len(result.errors),
        categorized_count=sum(categories.values()),
        date_range=DateRange(
            earliest=dates[0] if dates else None,
            latest=dates[-1] if dates else None,
        ),
        total_credits=credits,
        total_debits=debits,
        net_amount=credits - debits,
        category_counts=dict(categories),
    )


__all__ = ["get_import_summary"]
