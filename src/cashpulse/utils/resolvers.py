"""Utilities for resolving user input to domain values."""

from typing import Iterable, Optional

from cashpulse.domain.entities import TransactionCategory, TransactionType
from cashpulse.domain.errors import (
    ValidationError,
    category_not_in_scope,
    unknown_category,
)


def resolve_category(name: str, txn_type: TransactionType) -> TransactionCategory:
    """Resolve a category name for a transaction of the given type.

    Matching is case-insensitive.

    Args:
        name: Category name, e.g. "food" or "Salary"
        txn_type: Type of the transaction being created

    Returns:
        TransactionCategory

    Raises:
        ValidationError: If the name is unknown or belongs to the other type
    """
    lookup = {category.value.lower(): category for category in TransactionCategory}
    category = lookup.get(name.strip().lower())
    if category is None:
        raise ValidationError(unknown_category(name))
    if category.transaction_type != txn_type:
        raise ValidationError(category_not_in_scope(category.value, txn_type.value))
    return category


def resolve_id(ids: Iterable[str], prefix: str) -> Optional[str]:
    """Resolve a full id from a unique prefix.

    Returns:
        The matching id, or None when nothing matches

    Raises:
        ValidationError: If the prefix matches more than one id
    """
    prefix = prefix.strip().lower()
    if not prefix:
        return None
    matches = [candidate for candidate in ids if candidate.startswith(prefix)]
    if len(matches) > 1:
        raise ValidationError(f"Id prefix '{prefix}' is ambiguous ({len(matches)} matches)")
    return matches[0] if matches else None
