"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class DecodeError(DomainError):
    """Stored record could not be decoded into a domain entity."""


def category_not_in_scope(category: str, txn_type: str) -> str:
    """Return message for a category used with the wrong transaction type."""
    return f"Category '{category}' cannot be used for {txn_type.lower()} transactions"


def unknown_category(name: str) -> str:
    """Return message for an unrecognised category name."""
    return f"Unknown category '{name}'"


def malformed_record(kind: str, detail: object) -> str:
    """Return message for a stored record that failed to decode."""
    return f"Malformed {kind} record: {detail}"
