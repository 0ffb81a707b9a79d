"""Aggregation functions over a transaction collection.

All functions are pure: they take the transactions and a reference instant
and return new values without touching the input.
"""

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from cashpulse.domain.entities import (
    DailyBucket,
    PeriodTotals,
    Transaction,
    TransactionType,
)


def start_of_day(moment: datetime) -> datetime:
    """Return local midnight of the day containing ``moment``."""
    return datetime.combine(moment.date(), time.min)


def week_start(now: datetime) -> datetime:
    """Start of the trailing 7-day window."""
    return now - timedelta(days=7)


def month_start(now: datetime) -> datetime:
    """Start of the trailing one-calendar-month window."""
    return now - relativedelta(months=1)


def calendar_month_start(now: datetime) -> datetime:
    """First instant of the calendar month containing ``now``."""
    return datetime.combine(now.date().replace(day=1), time.min)


def sum_by_type(
    transactions: Iterable[Transaction], since: datetime
) -> tuple[float, float]:
    """Sum income and expense amounts for transactions at or after ``since``.

    Returns:
        Tuple of (income, expense)
    """
    income = 0.0
    expense = 0.0
    for txn in transactions:
        if txn.timestamp < since:
            continue
        if txn.type == TransactionType.INCOME:
            income += txn.amount
        else:
            expense += txn.amount
    return income, expense


def period_totals(transactions: Sequence[Transaction], now: datetime) -> PeriodTotals:
    """Compute today, trailing-week and trailing-month totals.

    Args:
        transactions: Full transaction collection
        now: Reference instant

    Returns:
        PeriodTotals with zeroes for windows without transactions
    """
    today_income, today_expense = sum_by_type(transactions, start_of_day(now))
    week_income, week_expense = sum_by_type(transactions, week_start(now))
    month_income, month_expense = sum_by_type(transactions, month_start(now))
    return PeriodTotals(
        today_income=today_income,
        today_expense=today_expense,
        week_income=week_income,
        week_expense=week_expense,
        month_income=month_income,
        month_expense=month_expense,
    )


def calendar_month_totals(
    transactions: Sequence[Transaction], now: datetime
) -> tuple[float, float]:
    """Income and expense since the first day of the current month."""
    return sum_by_type(transactions, calendar_month_start(now))


def group_by_day(transactions: Iterable[Transaction]) -> list[DailyBucket]:
    """Group transactions by calendar day, most recent day first."""
    grouped: dict[date, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        grouped[txn.day].append(txn)
    return [
        DailyBucket(day=day, transactions=tuple(grouped[day]))
        for day in sorted(grouped, reverse=True)
    ]


def compute_balance(transactions: Iterable[Transaction]) -> float:
    """Signed sum over all transactions (income positive, expense negative)."""
    return sum((txn.signed_amount for txn in transactions), 0.0)


def transactions_for_date(
    transactions: Iterable[Transaction], for_date: date | datetime
) -> list[Transaction]:
    """Transactions on the given calendar day, newest first."""
    if isinstance(for_date, datetime):
        for_date = for_date.date()
    matching = [txn for txn in transactions if txn.day == for_date]
    return sorted(matching, key=lambda txn: txn.timestamp, reverse=True)


def active_days(transactions: Iterable[Transaction]) -> set[date]:
    """Set of calendar days with at least one transaction."""
    return {txn.day for txn in transactions}


def income_between(
    transactions: Iterable[Transaction],
    after: datetime,
    until: Optional[datetime] = None,
) -> float:
    """Income strictly after ``after`` and at or before ``until`` (if given)."""
    return sum(
        (
            txn.amount
            for txn in transactions
            if txn.type == TransactionType.INCOME
            and txn.timestamp > after
            and (until is None or txn.timestamp <= until)
        ),
        0.0,
    )
