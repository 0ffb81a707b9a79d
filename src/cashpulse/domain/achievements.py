"""Achievement progress tracking.

Every achievement carries an ``AchievementKind``. The kind selects an
``AchievementDefinition`` holding the measure function and the default
target, so display titles can change without touching the logic.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Callable, Sequence

from cashpulse.domain.aggregation import active_days, calendar_month_totals
from cashpulse.domain.entities import (
    Achievement,
    AchievementKind,
    Transaction,
    new_id,
)

logger = logging.getLogger(__name__)

PERFECT_WEEK_DAYS = 7


@dataclass(frozen=True)
class MeasureContext:
    """Ledger state that achievement measures are computed from."""

    transactions: Sequence[Transaction]
    balance: float
    now: datetime


def day_streak(days: set[date], today: date) -> int:
    """Count consecutive days with activity, walking back from ``today``."""
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def covered_days(days: set[date], today: date, window: int = PERFECT_WEEK_DAYS) -> int:
    """Count days among ``today`` and the ``window - 1`` days before it that have activity."""
    return sum(1 for offset in range(window) if today - timedelta(days=offset) in days)


def transaction_count(ctx: MeasureContext) -> float:
    return float(len(ctx.transactions))


def absolute_balance(ctx: MeasureContext) -> float:
    return abs(ctx.balance)


def positive_balance(ctx: MeasureContext) -> float:
    return 1.0 if ctx.balance > 0 else 0.0


def streak_length(ctx: MeasureContext) -> float:
    return float(day_streak(active_days(ctx.transactions), ctx.now.date()))


def perfect_week_days(ctx: MeasureContext) -> float:
    return float(covered_days(active_days(ctx.transactions), ctx.now.date()))


def is_saver(ctx: MeasureContext) -> float:
    income, expense = calendar_month_totals(ctx.transactions, ctx.now)
    return 1.0 if income > expense and income > 0 else 0.0


def largest_amount(ctx: MeasureContext) -> float:
    return max((abs(txn.amount) for txn in ctx.transactions), default=0.0)


@dataclass(frozen=True)
class AchievementDefinition:
    """Static description of one achievement kind."""

    kind: AchievementKind
    title: str
    description: str
    icon: str
    target: float
    measure: Callable[[MeasureContext], float]


DEFINITIONS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        AchievementKind.FIRST_TRANSACTION,
        "First Steps",
        "Add your first transaction",
        "star.fill",
        1,
        transaction_count,
    ),
    AchievementDefinition(
        AchievementKind.TEN_TRANSACTIONS,
        "Getting Started",
        "Add 10 transactions",
        "star.circle.fill",
        10,
        transaction_count,
    ),
    AchievementDefinition(
        AchievementKind.FIFTY_TRANSACTIONS,
        "Regular User",
        "Add 50 transactions",
        "star.circle",
        50,
        transaction_count,
    ),
    AchievementDefinition(
        AchievementKind.HUNDRED_TRANSACTIONS,
        "Power User",
        "Add 100 transactions",
        "crown.fill",
        100,
        transaction_count,
    ),
    AchievementDefinition(
        AchievementKind.THOUSAND_BALANCE,
        "Thousandaire",
        "Reach $1,000 balance",
        "dollarsign.circle.fill",
        1000,
        absolute_balance,
    ),
    AchievementDefinition(
        AchievementKind.TEN_THOUSAND_BALANCE,
        "Ten Thousandaire",
        "Reach $10,000 balance",
        "dollarsign.square.fill",
        10000,
        absolute_balance,
    ),
    AchievementDefinition(
        AchievementKind.POSITIVE_BALANCE,
        "In the Green",
        "Have a positive balance",
        "arrow.up.circle.fill",
        1,
        positive_balance,
    ),
    AchievementDefinition(
        AchievementKind.WEEK_STREAK,
        "Week Warrior",
        "Use app for 7 days straight",
        "calendar.badge.clock",
        7,
        streak_length,
    ),
    AchievementDefinition(
        AchievementKind.MONTH_STREAK,
        "Month Master",
        "Use app for 30 days straight",
        "calendar",
        30,
        streak_length,
    ),
    AchievementDefinition(
        AchievementKind.PERFECT_WEEK,
        "Perfect Week",
        "Add transactions every day for a week",
        "checkmark.seal.fill",
        7,
        perfect_week_days,
    ),
    AchievementDefinition(
        AchievementKind.SAVER,
        "Saver",
        "Save more than you spend in a month",
        "banknote.fill",
        1,
        is_saver,
    ),
    AchievementDefinition(
        AchievementKind.BIG_SPENDER,
        "Big Spender",
        "Make a transaction over $1,000",
        "creditcard.fill",
        1000,
        largest_amount,
    ),
)

DEFINITIONS_BY_KIND: dict[AchievementKind, AchievementDefinition] = {
    definition.kind: definition for definition in DEFINITIONS
}


def default_achievements() -> list[Achievement]:
    """Return the locked achievement set installed on first run."""
    return [
        Achievement(
            id=new_id(),
            kind=definition.kind,
            title=definition.title,
            description=definition.description,
            icon=definition.icon,
            target=definition.target,
        )
        for definition in DEFINITIONS
    ]


class AchievementTracker:
    """Recomputes progress and unlock state for a list of achievements."""

    def __init__(self, definitions: dict[AchievementKind, AchievementDefinition] | None = None):
        self.definitions = definitions if definitions is not None else DEFINITIONS_BY_KIND

    def update(
        self, achievements: Sequence[Achievement], ctx: MeasureContext
    ) -> list[Achievement]:
        """Return ``achievements`` with progress recomputed against ``ctx``.

        Unlocking is one-way: an unlocked achievement keeps its flag and
        timestamp even if the measured value later drops.
        """
        measured_cache: dict[Callable[[MeasureContext], float], float] = {}
        updated = []
        for achievement in achievements:
            definition = self.definitions.get(achievement.kind)
            if definition is None:
                updated.append(achievement)
                continue

            if definition.measure not in measured_cache:
                measured_cache[definition.measure] = definition.measure(ctx)
            measured = measured_cache[definition.measure]

            target = achievement.target
            progress = min(measured / target, 1.0) if target > 0 else 0.0
            changes: dict = {"progress": progress}
            if not achievement.is_unlocked and measured >= target:
                changes["is_unlocked"] = True
                changes["unlocked_at"] = ctx.now
                logger.info("Achievement unlocked: %s", achievement.title)
            updated.append(replace(achievement, **changes))
        return updated
