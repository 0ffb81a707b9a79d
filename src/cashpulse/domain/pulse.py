"""Pulse events emitted for the presentation layer."""

from datetime import datetime, timedelta
from typing import Iterable

from cashpulse.domain.entities import PulseEvent, Transaction, TransactionType, new_id

INCOME_COLOR = "#00FF88"
EXPENSE_COLOR = "#FF4757"
PULSE_LIFETIME = timedelta(seconds=3)
FULL_INTENSITY_AMOUNT = 1000.0


def pulse_color(txn: Transaction) -> str:
    return INCOME_COLOR if txn.type == TransactionType.INCOME else EXPENSE_COLOR


def pulse_intensity(txn: Transaction) -> float:
    return min(abs(txn.amount) / FULL_INTENSITY_AMOUNT, 1.0)


def create_pulse(txn: Transaction, now: datetime) -> PulseEvent:
    """Build the pulse announcing ``txn``, expiring after a fixed lifetime."""
    return PulseEvent(
        id=new_id(),
        color=pulse_color(txn),
        intensity=pulse_intensity(txn),
        lifetime=PULSE_LIFETIME,
        created_at=now,
    )


def live_pulses(pulses: Iterable[PulseEvent], now: datetime) -> list[PulseEvent]:
    """Drop pulses whose lifetime has elapsed."""
    return [pulse for pulse in pulses if not pulse.is_expired(now)]
