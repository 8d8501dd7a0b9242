"""Keyword rule table and the merchant-heuristic categorizer.

Rules are matched case-insensitively by substring containment against the
description, in table order; the first matching rule wins. Rows matching no
rule keep ``category=None`` so they stay visible for manual review. Rows that
already carry a category are left untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from .models import NormalizedTransaction


@dataclass(frozen=True, slots=True)
class CategoryRule:
    keywords: frozenset[str]
    category: str

    def matches(self, folded_description: str) -> bool:
        return any(k in folded_description for k in self.keywords)


def _rule(category: str, *keywords: str) -> CategoryRule:
    return CategoryRule(keywords=frozenset(k.casefold() for k in keywords), category=category)


# Order matters: "gas company" must be seen before the bare "gas" token.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    _rule(
        "Food & Dining",
        "starbucks",
        "mcdonald",
        "kfc",
        "burger",
        "pizza",
        "restaurant",
        "cafe",
        "coffee",
    ),
    _rule("Utilities", "electric", "power", "water", "gas company", "internet", "phone"),
    _rule(
        "Transportation",
        "shell",
        "mobil",
        "gas",
        "fuel",
        "petrol",
        "taxi",
        "uber",
        "lyft",
    ),
    _rule("Shopping", "amazon", "walmart", "target", "mall", "store", "shop"),
    _rule("Income", "salary", "wages", "payroll", "deposit", "income"),
    _rule("Banking", "atm", "bank fee", "transfer", "withdrawal"),
    _rule("Healthcare", "pharmacy", "doctor", "medical", "hospital", "clinic"),
)


def match_category(
    description: str, rules: Sequence[CategoryRule] = CATEGORY_RULES
) -> str | None:
    """Return the category of the first rule matching ``description``."""

    folded = description.casefold()
    for rule in rules:
        if rule.matches(folded):
            return rule.category
    return None


def categorize_transactions(
    transactions: Iterable[NormalizedTransaction],
    *,
    rules: Sequence[CategoryRule] = CATEGORY_RULES,
) -> list[NormalizedTransaction]:
    """Return the rows with ``category`` filled in where a rule matches."""

    out: list[NormalizedTransaction] = []
    for tx in transactions:
        if tx.category:
            out.append(tx)
            continue
        cat = match_category(tx.description, rules)
        out.append(replace(tx, category=cat) if cat is not None else tx)
    return out


__all__ = [
    "CategoryRule",
    "CATEGORY_RULES",
    "match_category",
    "categorize_transactions",
]
