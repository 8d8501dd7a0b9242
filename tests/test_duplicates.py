from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from statement_import.duplicates import description_key, description_similarity, detect_duplicates
from statement_import.models import DuplicateOptions, LedgerTransaction, NormalizedTransaction

ACCOUNT = "acct-checking"


def _incoming(
    description: str = "Coffee Shop Purchase",
    amount: str = "4.50",
    d: str = "2024-01-15",
    tx_type: str = "debit",
) -> NormalizedTransaction:
    return NormalizedTransaction(date=d, description=description, amount=Decimal(amount), type=tx_type)


def _existing(
    description: str = "Coffee Shop Purchase",
    amount: str = "4.50",
    d: date = date(2024, 1, 15),
    tx_type: str = "debit",
    account: str = ACCOUNT,
    tx_id: str = "tx-1",
) -> LedgerTransaction:
    return LedgerTransaction(
        id=tx_id,
        bank_account_id=account,
        date=d,
        description=description,
        amount=Decimal(amount),
        type=tx_type,
    )


FUZZY = DuplicateOptions(fuzzy_match=True)


def test_exact_duplicate_is_reported() -> None:
    assert detect_duplicates([_incoming()], [_existing()]) == [0]


def test_amount_must_match_even_when_fuzzy() -> None:
    existing = [_existing(amount="5.50")]
    assert detect_duplicates([_incoming()], existing) == []
    assert detect_duplicates([_incoming()], existing, FUZZY) == []


def test_similar_description_only_matches_in_fuzzy_mode() -> None:
    rows = [_incoming(description="STARBUCKS #123 MAIN ST")]
    existing = [_existing(description="STARBUCKS MAIN STREET")]

    assert detect_duplicates(rows, existing) == []
    assert detect_duplicates(rows, existing, FUZZY) == [0]


def test_exact_match_is_case_sensitive() -> None:
    rows = [_incoming(description="coffee shop purchase")]
    existing = [_existing()]
    assert detect_duplicates(rows, existing) == []
    assert detect_duplicates(rows, existing, FUZZY) == [0]


def test_amount_scale_does_not_matter() -> None:
    rows = [_incoming(amount="4.5")]
    assert detect_duplicates(rows, [_existing(amount="4.50")]) == [0]


def test_fuzzy_result_is_superset_of_exact() -> None:
    rows = [
        _incoming(),
        _incoming(description="COFFEE SHOP PURCHASE #88"),
        _incoming(description="Gym membership", amount="30.00"),
        _incoming(d="2024-01-16"),
    ]
    existing = [_existing(), _existing(description="Gym Membership Monthly", amount="30.00", tx_id="tx-2")]

    exact = detect_duplicates(rows, existing)
    fuzzy = detect_duplicates(rows, existing, FUZZY)

    assert exact == [0]
    assert set(exact) <= set(fuzzy)
    assert fuzzy == [0, 1, 2]


def test_row_matching_many_existing_is_reported_once() -> None:
    existing = [_existing(tx_id="a"), _existing(tx_id="b"), _existing(tx_id="c")]
    assert detect_duplicates([_incoming()], existing, FUZZY) == [0]


def test_rows_in_same_batch_are_not_compared_with_each_other() -> None:
    assert detect_duplicates([_incoming(), _incoming()], []) == []
    assert detect_duplicates([_incoming(), _incoming()], [_existing()]) == [0, 1]


def test_other_accounts_are_ignored_when_account_given() -> None:
    existing = [_existing(account="acct-savings")]
    assert detect_duplicates([_incoming()], existing, account_id=ACCOUNT) == []
    assert detect_duplicates([_incoming()], existing) == [0]


def test_unusable_rows_are_never_duplicates() -> None:
    rows = [
        NormalizedTransaction(date="invalid-date", description="Coffee Shop Purchase", amount=Decimal("4.50"), type="debit"),
        NormalizedTransaction(date="2024-01-15", description="Coffee Shop Purchase", amount=None, type="debit"),
    ]
    assert detect_duplicates(rows, [_existing()], FUZZY) == []


def test_date_tolerance_widens_fuzzy_matching_only() -> None:
    rows = [_incoming(d="2024-01-17")]
    existing = [_existing()]

    assert detect_duplicates(rows, existing, FUZZY) == []
    assert detect_duplicates(rows, existing, DuplicateOptions(date_tolerance_days=2)) == []
    assert detect_duplicates(rows, existing, DuplicateOptions(fuzzy_match=True, date_tolerance_days=2)) == [0]


def test_match_type_requires_same_direction() -> None:
    rows = [_incoming(tx_type="credit")]
    existing = [_existing()]

    assert detect_duplicates(rows, existing) == [0]
    assert detect_duplicates(rows, existing, DuplicateOptions(match_type=True)) == []
    assert detect_duplicates(rows, existing, DuplicateOptions(fuzzy_match=True, match_type=True)) == []


def test_threshold_controls_fuzzy_cutoff() -> None:
    rows = [_incoming(description="STARBUCKS #123 MAIN ST")]
    existing = [_existing(description="STARBUCKS MAIN STREET")]
    strict = DuplicateOptions(fuzzy_match=True, similarity_threshold=0.95)
    assert detect_duplicates(rows, existing, strict) == []


def test_detection_is_deterministic() -> None:
    rows = [_incoming(), _incoming(description="Lunch", amount="12.00")]
    existing = [_existing()]
    assert detect_duplicates(rows, existing, FUZZY) == detect_duplicates(rows, existing, FUZZY)


def test_description_key_strips_noise() -> None:
    assert description_key("STARBUCKS #123 MAIN ST") == "starbucks main st"
    assert description_key("  POS_PURCHASE  4411 ") == "pos purchase"
    assert description_key("#123 4567") == ""


def test_description_similarity_bounds() -> None:
    assert description_similarity("Coffee Shop", "coffee shop") == 1.0
    assert description_similarity("Coffee Shop", "COFFEE SHOP PURCHASE") == 1.0
    assert description_similarity("#1", "#1") == 0.0
    assert 0.0 <= description_similarity("Netflix", "Spotify") < 0.8


@pytest.mark.parametrize(
    "kwargs",
    [{"similarity_threshold": 1.5}, {"similarity_threshold": -0.1}, {"date_tolerance_days": -1}, {"date_tolerance_days": True}],
)
def test_invalid_options_are_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        DuplicateOptions(**kwargs)


def test_rows_with_unparsed_dates_are_never_duplicates() -> None:
    row = NormalizedTransaction(
        date="2024-01-15",
        description="Coffee Shop Purchase",
        amount=Decimal("4.50"),
        type="debit",
        date_parsed=False,
    )
    assert detect_duplicates([row], [_existing()]) == []
