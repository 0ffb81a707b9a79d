"""Domain model entities for cashpulse.

These are pure data classes representing ledger concepts, independent of how
they are stored. Constructors do not validate; the ledger and the CLI decide
what goes in.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "Income"
    EXPENSE = "Expense"


class TransactionCategory(str, Enum):
    """Transaction category, scoped to either income or expense."""

    # Income
    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENT = "Investment"
    GIFT = "Gift"

    # Expenses
    FOOD = "Food"
    TRANSPORT = "Transport"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    HEALTH = "Health"
    EDUCATION = "Education"
    OTHER = "Other"

    @property
    def is_income(self) -> bool:
        return self in _INCOME_CATEGORIES

    @property
    def transaction_type(self) -> TransactionType:
        return TransactionType.INCOME if self.is_income else TransactionType.EXPENSE

    @classmethod
    def income_categories(cls) -> list["TransactionCategory"]:
        return [c for c in cls if c.is_income]

    @classmethod
    def expense_categories(cls) -> list["TransactionCategory"]:
        return [c for c in cls if not c.is_income]

    @classmethod
    def for_type(cls, txn_type: TransactionType) -> list["TransactionCategory"]:
        """Categories allowed for the given transaction type."""
        if txn_type == TransactionType.INCOME:
            return cls.income_categories()
        return cls.expense_categories()


_INCOME_CATEGORIES = frozenset(
    {
        TransactionCategory.SALARY,
        TransactionCategory.FREELANCE,
        TransactionCategory.INVESTMENT,
        TransactionCategory.GIFT,
    }
)


class Frequency(str, Enum):
    """Coarse frequency classification of a spending pattern."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    # Not produced by the count-based detector.
    IRREGULAR = "Irregular"


class AlertCondition(str, Enum):
    """Condition evaluated by an alert rule."""

    UNUSUAL_SPENDING = "Unusual Spending"
    LARGE_TRANSACTION = "Large Transaction"
    INCOME_DROP = "Income Drop"
    BUDGET_EXCEEDED = "Budget Exceeded"


class AchievementKind(str, Enum):
    """Stable discriminant selecting an achievement's measure."""

    FIRST_TRANSACTION = "FIRST_TRANSACTION"
    TEN_TRANSACTIONS = "TEN_TRANSACTIONS"
    FIFTY_TRANSACTIONS = "FIFTY_TRANSACTIONS"
    HUNDRED_TRANSACTIONS = "HUNDRED_TRANSACTIONS"
    THOUSAND_BALANCE = "THOUSAND_BALANCE"
    TEN_THOUSAND_BALANCE = "TEN_THOUSAND_BALANCE"
    POSITIVE_BALANCE = "POSITIVE_BALANCE"
    WEEK_STREAK = "WEEK_STREAK"
    MONTH_STREAK = "MONTH_STREAK"
    PERFECT_WEEK = "PERFECT_WEEK"
    SAVER = "SAVER"
    BIG_SPENDER = "BIG_SPENDER"


def new_id() -> str:
    """Return a fresh random identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always a non-negative magnitude; ``type`` carries the sign.
    """

    amount: float
    type: TransactionType
    category: TransactionCategory
    timestamp: datetime
    note: Optional[str] = None
    location: Optional[str] = None
    is_recurring: bool = False
    id: str = field(default_factory=new_id)

    @property
    def signed_amount(self) -> float:
        """Contribution of this transaction to the balance."""
        return self.amount if self.type == TransactionType.INCOME else -self.amount

    @property
    def day(self) -> date:
        return self.timestamp.date()


@dataclass(frozen=True)
class DailyBucket:
    """Transactions that fall on one calendar day."""

    day: date
    transactions: tuple[Transaction, ...]

    @property
    def total_income(self) -> float:
        return sum(t.amount for t in self.transactions if t.type == TransactionType.INCOME)

    @property
    def total_expense(self) -> float:
        return sum(t.amount for t in self.transactions if t.type == TransactionType.EXPENSE)

    @property
    def net_flow(self) -> float:
        return self.total_income - self.total_expense

    @property
    def flow_intensity(self) -> float:
        """Day volume scaled to [0, 1], saturating at 5000."""
        total = self.total_income + self.total_expense
        if total <= 0:
            return 0.0
        return min(total / 5000.0, 1.0)


@dataclass(frozen=True)
class SpendingPattern:
    """Per-category summary derived from transaction history."""

    category: TransactionCategory
    average_amount: float
    frequency: Frequency
    last_occurrence: datetime
    transaction_count: int


@dataclass(frozen=True)
class AlertRule:
    """User-configurable alert rule with a trigger counter."""

    id: str
    name: str
    condition: AlertCondition
    is_enabled: bool = True
    trigger_count: int = 0


@dataclass(frozen=True)
class Achievement:
    """Gamified milestone with progress in [0, 1]."""

    id: str
    kind: AchievementKind
    title: str
    description: str
    icon: str
    target: float
    is_unlocked: bool = False
    unlocked_at: Optional[datetime] = None
    progress: float = 0.0

    @property
    def progress_percentage(self) -> int:
        return int(min(self.progress * 100, 100))


@dataclass(frozen=True)
class PeriodTotals:
    """Income and expense totals for the three rolling windows."""

    today_income: float = 0.0
    today_expense: float = 0.0
    week_income: float = 0.0
    week_expense: float = 0.0
    month_income: float = 0.0
    month_expense: float = 0.0


@dataclass(frozen=True)
class PulseEvent:
    """Transient visual event emitted when a transaction is added."""

    id: str
    color: str
    intensity: float
    lifetime: timedelta
    created_at: datetime

    @property
    def expires_at(self) -> datetime:
        return self.created_at + self.lifetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class LedgerSnapshot:
    """Computed values handed to the presentation layer."""

    balance: float
    totals: PeriodTotals
    buckets: tuple[DailyBucket, ...]
    patterns: tuple[SpendingPattern, ...]
    alert_rules: tuple[AlertRule, ...]
    achievements: tuple[Achievement, ...]
    pulses: tuple[PulseEvent, ...]
