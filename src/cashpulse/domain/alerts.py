"""Alert rule evaluation."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Sequence

from cashpulse.domain.aggregation import income_between
from cashpulse.domain.entities import (
    AlertCondition,
    AlertRule,
    PeriodTotals,
    SpendingPattern,
    Transaction,
    TransactionType,
    new_id,
)
from cashpulse.domain.patterns import find_pattern

logger = logging.getLogger(__name__)

LARGE_TRANSACTION_THRESHOLD = 1000.0
UNUSUAL_DEVIATION = 0.5
INCOME_DROP_RATIO = 0.7
BUDGET_RATIO = 1.2

DEFAULT_ALERT_RULES: tuple[tuple[str, AlertCondition], ...] = (
    ("Large Transaction Alert", AlertCondition.LARGE_TRANSACTION),
    ("Unusual Spending Alert", AlertCondition.UNUSUAL_SPENDING),
    ("Income Drop Alert", AlertCondition.INCOME_DROP),
    ("Budget Exceeded Alert", AlertCondition.BUDGET_EXCEEDED),
)


def default_alert_rules() -> list[AlertRule]:
    """Return the rule set installed on first run and after a reset."""
    return [
        AlertRule(id=new_id(), name=name, condition=condition)
        for name, condition in DEFAULT_ALERT_RULES
    ]


class AlertContext:
    """State an alert predicate may look at."""

    def __init__(
        self,
        transactions: Sequence[Transaction],
        patterns: Sequence[SpendingPattern],
        totals: PeriodTotals,
        now: datetime,
    ):
        self.transactions = transactions
        self.patterns = patterns
        self.totals = totals
        self.now = now


def is_large_transaction(txn: Transaction, ctx: AlertContext) -> bool:
    return abs(txn.amount) > LARGE_TRANSACTION_THRESHOLD


def is_unusual_spending(txn: Transaction, ctx: AlertContext) -> bool:
    """Expense deviating more than 50% from its category average."""
    if txn.type != TransactionType.EXPENSE:
        return False
    pattern = find_pattern(ctx.patterns, txn.category)
    if pattern is None or pattern.average_amount == 0:
        return False
    deviation = abs(txn.amount - pattern.average_amount) / pattern.average_amount
    return deviation > UNUSUAL_DEVIATION


def is_income_drop(txn: Transaction, ctx: AlertContext) -> bool:
    """Income in the last week fell below 70% of the week before."""
    if txn.type != TransactionType.INCOME:
        return False
    one_week_ago = ctx.now - timedelta(days=7)
    two_weeks_ago = ctx.now - timedelta(days=14)
    recent = income_between(ctx.transactions, after=one_week_ago)
    previous = income_between(ctx.transactions, after=two_weeks_ago, until=one_week_ago)
    if previous <= 0:
        return False
    return recent < previous * INCOME_DROP_RATIO


def is_budget_exceeded(txn: Transaction, ctx: AlertContext) -> bool:
    return ctx.totals.month_expense > ctx.totals.month_income * BUDGET_RATIO


PREDICATES: dict[AlertCondition, Callable[[Transaction, AlertContext], bool]] = {
    AlertCondition.LARGE_TRANSACTION: is_large_transaction,
    AlertCondition.UNUSUAL_SPENDING: is_unusual_spending,
    AlertCondition.INCOME_DROP: is_income_drop,
    AlertCondition.BUDGET_EXCEEDED: is_budget_exceeded,
}


class AlertEvaluator:
    """Evaluates enabled rules against a newly added transaction."""

    def __init__(self, predicates=None):
        """Initialize alert evaluator.

        Args:
            predicates: Optional mapping of condition to predicate, defaults
                to the built-in predicates
        """
        self.predicates = predicates if predicates is not None else PREDICATES

    def evaluate(
        self,
        rules: Sequence[AlertRule],
        txn: Transaction,
        ctx: AlertContext,
    ) -> tuple[list[AlertRule], list[AlertRule]]:
        """Evaluate ``rules`` for ``txn``.

        Each enabled rule whose predicate holds has its trigger counter
        increased by exactly one. Disabled rules are passed through untouched.

        Args:
            rules: Current rule list
            txn: The transaction that was just added
            ctx: Ledger state including ``txn``

        Returns:
            Tuple of (updated rule list, rules that fired)
        """
        updated = []
        fired = []
        for rule in rules:
            if not rule.is_enabled:
                updated.append(rule)
                continue
            predicate = self.predicates.get(rule.condition)
            if predicate is not None and predicate(txn, ctx):
                rule = replace(rule, trigger_count=rule.trigger_count + 1)
                fired.append(rule)
                logger.info("Alert rule '%s' triggered by transaction %s", rule.name, txn.id)
            updated.append(rule)
        return updated, fired
