"""Deterministic keyword categorization.

Public API:
    - :func:`categorize`
    - :data:`DEFAULT_RULES`, :data:`CATEGORIES`

Rules are evaluated strictly in order and the first match wins. Keywords are
not mutually exclusive (a travel insurance matches both ``versicherung`` and
``reise``), so the order of :data:`DEFAULT_RULES` decides the outcome.
Results are advisory; a category supplied by the bank always takes
precedence in the builder.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

INCOME: str = "Income"
OTHER: str = "Other"


@dataclass(frozen=True, slots=True)
class CategoryRule:
    pattern: re.Pattern[str]
    category: str

    def matches(self, haystack: str) -> bool:
        return self.pattern.search(haystack) is not None


def _rule(keywords: str, category: str) -> CategoryRule:
    return CategoryRule(re.compile(f"({keywords})"), category)


DEFAULT_RULES: tuple[CategoryRule, ...] = (
    _rule("aldi|lidl|rewe|edeka|penny|kaufland|netto|dm|rossmann", "Groceries"),
    _rule("miete|vermieter|kaltmiete|warmmiete|rent", "Rent"),
    _rule("strom|gas|wasser|energie|enbw|rwe|eon", "Utilities"),
    _rule("db|bahn|swb|kvb|verkehrsbetriebe|tankstelle|shell|esso|aral", "Transport"),
    _rule("amazon|zalando|ikea|decathlon|saturn|mediamarkt", "Shopping"),
    _rule(
        "restaurant|delivery|wolt|lieferando|mc ?donald|burger king|subway|pizza",
        "Eating Out",
    ),
    _rule("apotheke|arzt|praxis|zahnarzt|klinik", "Healthcare"),
    _rule("spotify|netflix|disney|adobe|microsoft|apple|icloud|prime", "Subscriptions"),
    _rule("gebühr|konto|dispo|zinsen|entgelt|fee", "Fees"),
    _rule("uni|hochschule|semester|studien|tuition", "Education"),
    _rule("versicherung|versicherungsschutz|allianz|axa", "Insurance"),
    _rule("urlaub|reise|hotel|airbnb|ryanair|eurowings", "Travel"),
)

CATEGORIES: tuple[str, ...] = (
    INCOME,
    *dict.fromkeys(r.category for r in DEFAULT_RULES),
    OTHER,
)


def categorize(
    description: str,
    payee: str | None,
    amount: float,
    *,
    rules: Sequence[CategoryRule] = DEFAULT_RULES,
) -> str:
    """Return one category label for a transaction.

    Non-negative amounts are always ``"Income"``; keyword rules only apply
    to outflows. Falls back to ``"Other"`` when nothing matches.
    """

    if amount >= 0:
        return INCOME
    haystack = f"{description} {payee or ''}".lower()
    for rule in rules:
        if rule.matches(haystack):
            return rule.category
    return OTHER


__all__ = ["CATEGORIES", "CategoryRule", "DEFAULT_RULES", "INCOME", "OTHER", "categorize"]
