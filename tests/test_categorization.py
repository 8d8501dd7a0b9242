from __future__ import annotations

from decimal import Decimal

import pytest
from statement_import.categorization import (
    CATEGORY_RULES,
    CategoryRule,
    categorize_transactions,
    match_category,
)
from statement_import.models import NormalizedTransaction


def _tx(description: str, category: str | None = None) -> NormalizedTransaction:
    return NormalizedTransaction(
        date="2024-01-15",
        description=description,
        amount=Decimal("10.00"),
        type="debit",
        category=category,
    )


def test_merchant_heuristics_assign_expected_categories() -> None:
    out = categorize_transactions(
        [
            _tx("STARBUCKS #123 MAIN ST"),
            _tx("SHELL GAS STATION 0042"),
            _tx("SALARY DEPOSIT ACME CORP"),
        ]
    )
    assert [t.category for t in out] == ["Food & Dining", "Transportation", "Income"]


def test_unmatched_rows_stay_uncategorized() -> None:
    (tx,) = categorize_transactions([_tx("ZXQ HOLDINGS 991")])
    assert tx.category is None


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("City Gas Company bill", "Utilities"),
        ("Uber trip", "Transportation"),
        ("AMAZON MKTPLACE", "Shopping"),
        ("ATM withdrawal", "Banking"),
        ("CVS Pharmacy", "Healthcare"),
        ("coffee and a shop visit", "Food & Dining"),
    ],
)
def test_first_matching_rule_wins(description: str, expected: str) -> None:
    assert match_category(description) == expected


def test_existing_category_is_kept() -> None:
    (tx,) = categorize_transactions([_tx("STARBUCKS", category="Business Meals")])
    assert tx.category == "Business Meals"


def test_categorization_is_deterministic_and_pure() -> None:
    rows = [_tx("Starbucks"), _tx("Walmart"), _tx("Unknown")]
    first = categorize_transactions(rows)
    second = categorize_transactions(rows)

    assert first == second
    assert all(r.category is None for r in rows)


def test_custom_rule_table() -> None:
    rules = (CategoryRule(keywords=frozenset({"gym"}), category="Fitness"),)
    assert match_category("PURE GYM MONTHLY", rules) == "Fitness"
    assert match_category("Starbucks", rules) is None


def test_rule_table_keywords_are_lowercase() -> None:
    for rule in CATEGORY_RULES:
        assert all(k == k.casefold() for k in rule.keywords)
