"""Record codec between domain entities and stored blobs.

Entities are written as JSON objects with named fields. Enums are stored by
their label and timestamps as ISO-8601 strings with microseconds, so the
order of fields and of enum members never matters.
"""

import json
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, TypeVar

from cashpulse.domain import entities as domain
from cashpulse.domain.errors import DecodeError, malformed_record

T = TypeVar("T")


def _timestamp_to_text(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def _timestamp_from_text(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"timestamp must be a string, got {value!r}")
    parsed = datetime.fromisoformat(value)
    # Ledger arithmetic uses naive local time throughout
    if parsed.tzinfo is not None:
        raise ValueError(f"timestamp must not carry a UTC offset: {value!r}")
    return parsed


def _required_timestamp(value: Optional[str]) -> datetime:
    if value is None:
        raise ValueError("timestamp is missing")
    return _timestamp_from_text(value)


def _flag(record: dict[str, Any], key: str, default: bool) -> bool:
    value = record.get(key, default)
    if not isinstance(value, bool):
        raise TypeError(f"{key} must be true or false, got {value!r}")
    return value


def transaction_to_record(txn: domain.Transaction) -> dict[str, Any]:
    """Convert domain Transaction to a stored record."""
    return {
        "id": txn.id,
        "amount": txn.amount,
        "type": txn.type.value,
        "category": txn.category.value,
        "timestamp": _timestamp_to_text(txn.timestamp),
        "note": txn.note,
        "location": txn.location,
        "isRecurring": txn.is_recurring,
    }


def transaction_from_record(record: dict[str, Any]) -> domain.Transaction:
    """Convert a stored record to domain Transaction."""
    return domain.Transaction(
        id=record["id"],
        amount=float(record["amount"]),
        type=domain.TransactionType(record["type"]),
        category=domain.TransactionCategory(record["category"]),
        timestamp=_required_timestamp(record["timestamp"]),
        note=record.get("note"),
        location=record.get("location"),
        is_recurring=_flag(record, "isRecurring", False),
    )


def alert_rule_to_record(rule: domain.AlertRule) -> dict[str, Any]:
    """Convert domain AlertRule to a stored record."""
    return {
        "id": rule.id,
        "name": rule.name,
        "condition": rule.condition.value,
        "isEnabled": rule.is_enabled,
        "triggerCount": rule.trigger_count,
    }


def alert_rule_from_record(record: dict[str, Any]) -> domain.AlertRule:
    """Convert a stored record to domain AlertRule."""
    return domain.AlertRule(
        id=record["id"],
        name=record["name"],
        condition=domain.AlertCondition(record["condition"]),
        is_enabled=_flag(record, "isEnabled", True),
        trigger_count=int(record.get("triggerCount", 0)),
    )


def achievement_to_record(achievement: domain.Achievement) -> dict[str, Any]:
    """Convert domain Achievement to a stored record."""
    return {
        "id": achievement.id,
        "kind": achievement.kind.value,
        "title": achievement.title,
        "description": achievement.description,
        "icon": achievement.icon,
        "isUnlocked": achievement.is_unlocked,
        "unlockedAt": _timestamp_to_text(achievement.unlocked_at),
        "progress": achievement.progress,
        "target": achievement.target,
    }


def achievement_from_record(record: dict[str, Any]) -> domain.Achievement:
    """Convert a stored record to domain Achievement."""
    return domain.Achievement(
        id=record["id"],
        kind=domain.AchievementKind(record["kind"]),
        title=record["title"],
        description=record["description"],
        icon=record["icon"],
        target=float(record["target"]),
        is_unlocked=_flag(record, "isUnlocked", False),
        unlocked_at=_timestamp_from_text(record.get("unlockedAt")),
        progress=float(record.get("progress", 0.0)),
    )


def _encode(items: Sequence[T], to_record: Callable[[T], dict[str, Any]]) -> bytes:
    return json.dumps([to_record(item) for item in items]).encode("utf-8")


def _decode(
    blob: bytes, from_record: Callable[[dict[str, Any]], T], kind: str
) -> list[T]:
    try:
        records = json.loads(blob.decode("utf-8"))
        if not isinstance(records, list):
            raise DecodeError(malformed_record(kind, "expected a list"))
        return [from_record(record) for record in records]
    except DecodeError:
        raise
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
        raise DecodeError(malformed_record(kind, e)) from e


def encode_transactions(transactions: Sequence[domain.Transaction]) -> bytes:
    return _encode(transactions, transaction_to_record)


def decode_transactions(blob: bytes) -> list[domain.Transaction]:
    """Decode a transactions blob.

    Raises:
        DecodeError: If the blob is not a valid list of transaction records
    """
    return _decode(blob, transaction_from_record, "transaction")


def encode_alert_rules(rules: Sequence[domain.AlertRule]) -> bytes:
    return _encode(rules, alert_rule_to_record)


def decode_alert_rules(blob: bytes) -> list[domain.AlertRule]:
    """Decode an alert rules blob.

    Raises:
        DecodeError: If the blob is not a valid list of alert rule records
    """
    return _decode(blob, alert_rule_from_record, "alert rule")


def encode_achievements(achievements: Sequence[domain.Achievement]) -> bytes:
    return _encode(achievements, achievement_to_record)


def decode_achievements(blob: bytes) -> list[domain.Achievement]:
    """Decode an achievements blob.

    Raises:
        DecodeError: If the blob is not a valid list of achievement records
    """
    return _decode(blob, achievement_from_record, "achievement")
