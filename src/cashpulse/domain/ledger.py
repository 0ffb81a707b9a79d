"""Ledger controller.

Owns the transaction list and every value derived from it. Each public
mutation runs the same explicit pipeline: mutate the collection, recompute
derived state, persist.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from cashpulse.domain.achievements import (
    AchievementTracker,
    MeasureContext,
    default_achievements,
)
from cashpulse.domain.aggregation import (
    compute_balance,
    group_by_day,
    period_totals,
    transactions_for_date,
)
from cashpulse.domain.alerts import AlertContext, AlertEvaluator, default_alert_rules
from cashpulse.domain.entities import (
    Achievement,
    AlertRule,
    DailyBucket,
    LedgerSnapshot,
    PeriodTotals,
    PulseEvent,
    SpendingPattern,
    Transaction,
)
from cashpulse.domain.errors import DecodeError
from cashpulse.domain.patterns import detect_patterns
from cashpulse.domain.pulse import create_pulse, live_pulses
from cashpulse.storage import codec
from cashpulse.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"
BALANCE_KEY = "currentBalance"
ALERT_RULES_KEY = "alertRules"
ACHIEVEMENTS_KEY = "achievements"

STORE_KEYS = (TRANSACTIONS_KEY, BALANCE_KEY, ALERT_RULES_KEY, ACHIEVEMENTS_KEY)

BALANCE_TOLERANCE = 0.005


class Ledger:
    """Transaction ledger and derived-state engine."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = datetime.now,
        alert_evaluator: Optional[AlertEvaluator] = None,
        achievement_tracker: Optional[AchievementTracker] = None,
    ):
        """Initialize an empty ledger with default rules and achievements.

        Use ``Ledger.load`` to restore persisted state.

        Args:
            store: Key-value store used for persistence
            clock: Callable returning the current local time
            alert_evaluator: Optional evaluator, defaults to built-in rules
            achievement_tracker: Optional tracker, defaults to built-in kinds
        """
        self.store = store
        self.clock = clock
        self.alert_evaluator = alert_evaluator or AlertEvaluator()
        self.achievement_tracker = achievement_tracker or AchievementTracker()

        self.transactions: list[Transaction] = []
        self.balance: float = 0.0
        self.alert_rules: list[AlertRule] = default_alert_rules()
        self.achievements: list[Achievement] = default_achievements()
        self.pulses: list[PulseEvent] = []
        # Rules that fired on the most recent add_transaction call
        self.last_fired: list[AlertRule] = []

        self.totals = PeriodTotals()
        self.buckets: list[DailyBucket] = []
        self.patterns: list[SpendingPattern] = []

    @classmethod
    def load(
        cls,
        store: KeyValueStore,
        clock: Callable[[], datetime] = datetime.now,
        **kwargs,
    ) -> "Ledger":
        """Restore a ledger from ``store``.

        Missing or malformed entries fall back to an empty transaction list
        and the default rule and achievement sets. The balance is always
        recomputed from the transactions; a stored value that disagrees is
        logged and discarded.
        """
        ledger = cls(store, clock=clock, **kwargs)

        transactions = ledger._read(TRANSACTIONS_KEY, codec.decode_transactions)
        if transactions is not None:
            ledger.transactions = _unique_by_id(transactions)

        ledger.balance = compute_balance(ledger.transactions)
        if ledger._contains(BALANCE_KEY):
            stored_balance = ledger._read_double(BALANCE_KEY)
            if abs(stored_balance - ledger.balance) > BALANCE_TOLERANCE:
                logger.warning(
                    "Stored balance %.2f disagrees with transactions (%.2f), using transactions",
                    stored_balance,
                    ledger.balance,
                )

        rules = ledger._read(ALERT_RULES_KEY, codec.decode_alert_rules)
        if rules is not None:
            ledger.alert_rules = rules

        achievements = ledger._read(ACHIEVEMENTS_KEY, codec.decode_achievements)
        if achievements is not None:
            ledger.achievements = achievements

        ledger._recompute()
        ledger._update_achievements()
        ledger._persist()
        return ledger

    # Mutations

    def add_transaction(self, txn: Transaction) -> Optional[PulseEvent]:
        """Add a transaction and run the full recomputation pipeline.

        Args:
            txn: Transaction to add

        Returns:
            The pulse announcing the transaction, or None if a transaction
            with the same id is already in the ledger
        """
        self.last_fired = []
        self.sweep_pulses()
        if self.get_transaction(txn.id) is not None:
            logger.debug("Ignoring duplicate transaction %s", txn.id)
            return None

        now = self.clock()
        self.transactions.append(txn)
        self.balance += txn.signed_amount

        pulse = create_pulse(txn, now)
        self.pulses.append(pulse)

        self._recompute(now)
        self._evaluate_alerts(txn, now)
        self._update_achievements(now)
        self._persist()
        logger.debug("Added transaction %s (%s %.2f)", txn.id, txn.type.value, txn.amount)
        return pulse

    def delete_transaction(self, txn: Transaction | str) -> bool:
        """Remove a transaction by id. Alert rules are not evaluated.

        Args:
            txn: Transaction or transaction id

        Returns:
            True if a transaction was removed, False for an unknown id
        """
        txn_id = txn if isinstance(txn, str) else txn.id
        removed = [t for t in self.transactions if t.id == txn_id]
        if not removed:
            return False

        self.transactions = [t for t in self.transactions if t.id != txn_id]
        for existing in removed:
            self.balance -= existing.signed_amount

        now = self.clock()
        self._recompute(now)
        self._update_achievements(now)
        self._persist()
        logger.debug("Deleted transaction %s", txn_id)
        return True

    def set_rule_enabled(self, rule_id: str, enabled: bool) -> Optional[AlertRule]:
        """Enable or disable an alert rule.

        Returns:
            The updated rule, or None if no rule has that id
        """
        for index, rule in enumerate(self.alert_rules):
            if rule.id == rule_id:
                updated = replace(rule, is_enabled=enabled)
                self.alert_rules[index] = updated
                self._persist()
                return updated
        return None

    def toggle_rule(self, rule_id: str) -> Optional[AlertRule]:
        """Flip an alert rule's enabled flag."""
        rule = self.get_rule(rule_id)
        if rule is None:
            return None
        return self.set_rule_enabled(rule_id, not rule.is_enabled)

    def clear_all(self) -> None:
        """Drop all transactions and reset rules and achievements to defaults."""
        self.transactions = []
        self.balance = 0.0
        self.pulses = []
        self.alert_rules = default_alert_rules()
        self.achievements = default_achievements()

        for key in STORE_KEYS:
            try:
                self.store.remove(key)
            except StorageError as e:
                logger.warning("Could not remove '%s' from store: %s", key, e)

        self._recompute()
        self._update_achievements()
        logger.info("Cleared all ledger data")

    # Queries

    def get_transactions(self, for_date: date | datetime) -> list[Transaction]:
        """Transactions on the given calendar day, newest first."""
        return transactions_for_date(self.transactions, for_date)

    def get_transaction(self, txn_id: str) -> Optional[Transaction]:
        for txn in self.transactions:
            if txn.id == txn_id:
                return txn
        return None

    def get_rule(self, rule_id: str) -> Optional[AlertRule]:
        for rule in self.alert_rules:
            if rule.id == rule_id:
                return rule
        return None

    def active_pulses(self, now: Optional[datetime] = None) -> list[PulseEvent]:
        """Pulses that have not yet expired."""
        return live_pulses(self.pulses, now or self.clock())

    def sweep_pulses(self, now: Optional[datetime] = None) -> int:
        """Remove expired pulses. Returns how many were removed."""
        live = self.active_pulses(now)
        removed = len(self.pulses) - len(live)
        self.pulses = live
        return removed

    def snapshot(self) -> LedgerSnapshot:
        """Current computed values for the presentation layer."""
        return LedgerSnapshot(
            balance=self.balance,
            totals=self.totals,
            buckets=tuple(self.buckets),
            patterns=tuple(self.patterns),
            alert_rules=tuple(self.alert_rules),
            achievements=tuple(self.achievements),
            pulses=tuple(self.active_pulses()),
        )

    # Pipeline

    def _recompute(self, now: Optional[datetime] = None) -> None:
        now = now or self.clock()
        self.totals = period_totals(self.transactions, now)
        self.buckets = group_by_day(self.transactions)
        self.patterns = detect_patterns(self.transactions)

    def _evaluate_alerts(self, txn: Transaction, now: datetime) -> list[AlertRule]:
        ctx = AlertContext(
            transactions=self.transactions,
            patterns=self.patterns,
            totals=self.totals,
            now=now,
        )
        self.alert_rules, self.last_fired = self.alert_evaluator.evaluate(
            self.alert_rules, txn, ctx
        )
        return self.last_fired

    def _update_achievements(self, now: Optional[datetime] = None) -> None:
        ctx = MeasureContext(
            transactions=tuple(self.transactions),
            balance=self.balance,
            now=now or self.clock(),
        )
        self.achievements = self.achievement_tracker.update(self.achievements, ctx)

    def _persist(self) -> None:
        """Write the snapshot to the store. Failures are logged and ignored."""
        blobs = {
            TRANSACTIONS_KEY: codec.encode_transactions(self.transactions),
            ALERT_RULES_KEY: codec.encode_alert_rules(self.alert_rules),
            ACHIEVEMENTS_KEY: codec.encode_achievements(self.achievements),
        }
        for key, blob in blobs.items():
            try:
                self.store.set(key, blob)
            except StorageError as e:
                logger.warning("Could not persist '%s': %s", key, e)
        try:
            self.store.set_double(BALANCE_KEY, self.balance)
        except StorageError as e:
            logger.warning("Could not persist '%s': %s", BALANCE_KEY, e)

    def _contains(self, key: str) -> bool:
        try:
            return self.store.contains(key)
        except StorageError as e:
            logger.warning("Could not read '%s': %s", key, e)
            return False

    def _read_double(self, key: str) -> float:
        try:
            return self.store.get_double(key)
        except StorageError as e:
            logger.warning("Could not read '%s': %s", key, e)
            return 0.0

    def _read(self, key, decode):
        try:
            blob = self.store.get(key)
        except StorageError as e:
            logger.warning("Could not read '%s': %s", key, e)
            return None
        if blob is None:
            return None
        try:
            return decode(blob)
        except DecodeError as e:
            logger.warning("Discarding stored '%s', falling back to defaults: %s", key, e)
            return None


def _unique_by_id(transactions: list[Transaction]) -> list[Transaction]:
    """Drop stored transactions whose id was already seen, keeping the first."""
    seen: set[str] = set()
    unique = []
    for txn in transactions:
        if txn.id in seen:
            logger.warning("Dropping stored transaction with duplicate id %s", txn.id)
            continue
        seen.add(txn.id)
        unique.append(txn)
    return unique
