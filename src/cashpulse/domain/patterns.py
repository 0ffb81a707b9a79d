"""Spending pattern detection."""

from collections import defaultdict
from typing import Iterable, Optional

from cashpulse.domain.entities import (
    Frequency,
    SpendingPattern,
    Transaction,
    TransactionCategory,
)

DAILY_THRESHOLD = 20
WEEKLY_THRESHOLD = 5


def classify_frequency(count: int) -> Frequency:
    """Classify how often a category occurs from its transaction count."""
    if count > DAILY_THRESHOLD:
        return Frequency.DAILY
    if count > WEEKLY_THRESHOLD:
        return Frequency.WEEKLY
    return Frequency.MONTHLY


def detect_patterns(transactions: Iterable[Transaction]) -> list[SpendingPattern]:
    """Derive one SpendingPattern per category present in ``transactions``.

    Patterns are ordered by category declaration order, so running the
    detector twice over the same transactions yields the same list.
    """
    by_category: dict[TransactionCategory, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        by_category[txn.category].append(txn)

    patterns = []
    for category in TransactionCategory:
        category_transactions = by_category.get(category)
        if not category_transactions:
            continue
        count = len(category_transactions)
        patterns.append(
            SpendingPattern(
                category=category,
                average_amount=sum(t.amount for t in category_transactions) / count,
                frequency=classify_frequency(count),
                last_occurrence=max(t.timestamp for t in category_transactions),
                transaction_count=count,
            )
        )
    return patterns


def find_pattern(
    patterns: Iterable[SpendingPattern], category: TransactionCategory
) -> Optional[SpendingPattern]:
    """Return the pattern for ``category``, if one exists."""
    for pattern in patterns:
        if pattern.category == category:
            return pattern
    return None
