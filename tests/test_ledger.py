"""Tests for the Ledger controller."""

import json
import pytest
from datetime import timedelta
from typing import Optional

from cashpulse.domain.entities import (
    AchievementKind,
    AlertCondition,
    Frequency,
    PeriodTotals,
    TransactionCategory,
    TransactionType,
)
from cashpulse.domain.ledger import (
    ACHIEVEMENTS_KEY,
    ALERT_RULES_KEY,
    BALANCE_KEY,
    TRANSACTIONS_KEY,
    Ledger,
)
from cashpulse.domain.pulse import EXPENSE_COLOR, INCOME_COLOR
from cashpulse.storage.base import KeyValueStore, StorageError

from conftest import NOW


def by_kind(achievements, kind):
    return next(a for a in achievements if a.kind == kind)


def rule_for(ledger, condition):
    return next(r for r in ledger.alert_rules if r.condition == condition)


def trigger_counts(ledger):
    return {r.id: r.trigger_count for r in ledger.alert_rules}


class FailingStore(KeyValueStore):
    """Store whose every write fails."""

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def get(self, key: str) -> Optional[bytes]:
        return None

    def set(self, key: str, value: bytes) -> None:
        raise StorageError("disk full")

    def remove(self, key: str) -> None:
        raise StorageError("disk full")

    def contains(self, key: str) -> bool:
        return False

    def get_double(self, key: str) -> float:
        return 0.0

    def set_double(self, key: str, value: float) -> None:
        raise StorageError("disk full")


class TestScenarios:
    """End-to-end ledger scenarios."""

    def test_empty_ledger(self, ledger):
        ledger = Ledger.load(ledger.store, clock=ledger.clock)
        assert ledger.balance == 0.0
        assert ledger.totals == PeriodTotals()
        assert ledger.buckets == []
        assert ledger.patterns == []
        first = by_kind(ledger.achievements, AchievementKind.FIRST_TRANSACTION)
        assert first.progress == 0.0
        assert not first.is_unlocked

    def test_single_salary(self, ledger, make_txn):
        ledger.add_transaction(
            make_txn(amount=1500.0, type=TransactionType.INCOME, category=TransactionCategory.SALARY)
        )

        assert ledger.balance == 1500.0
        thousandaire = by_kind(ledger.achievements, AchievementKind.THOUSAND_BALANCE)
        assert thousandaire.progress == 1.0
        assert thousandaire.is_unlocked
        assert rule_for(ledger, AlertCondition.LARGE_TRANSACTION).trigger_count == 1
        assert rule_for(ledger, AlertCondition.UNUSUAL_SPENDING).trigger_count == 0
        assert rule_for(ledger, AlertCondition.INCOME_DROP).trigger_count == 0
        assert rule_for(ledger, AlertCondition.BUDGET_EXCEEDED).trigger_count == 0

    def test_daily_food_pattern(self, ledger, make_txn):
        transactions = [
            make_txn(amount=20.0, timestamp=NOW - timedelta(minutes=21 - i)) for i in range(21)
        ]
        for txn in transactions:
            ledger.add_transaction(txn)

        assert len(ledger.patterns) == 1
        pattern = ledger.patterns[0]
        assert pattern.category == TransactionCategory.FOOD
        assert pattern.average_amount == pytest.approx(20.0)
        assert pattern.frequency == Frequency.DAILY
        assert pattern.last_occurrence == transactions[-1].timestamp

    def test_perfect_week(self, ledger, make_txn):
        for days_ago in range(6, -1, -1):
            ledger.add_transaction(make_txn(timestamp=NOW - timedelta(days=days_ago)))

        perfect = by_kind(ledger.achievements, AchievementKind.PERFECT_WEEK)
        assert perfect.progress == 1.0
        assert perfect.is_unlocked

    def test_delete_only_transaction(self, ledger, make_txn):
        txn = make_txn(amount=1200.0)
        ledger.add_transaction(txn)
        counts_before = trigger_counts(ledger)

        assert ledger.delete_transaction(txn)

        assert ledger.balance == 0.0
        assert ledger.buckets == []
        assert ledger.patterns == []
        assert trigger_counts(ledger) == counts_before


class TestBalance:
    """Tests for the balance invariant."""

    def test_incremental_balance_matches_recomputation(self, ledger, make_txn):
        transactions = [
            make_txn(amount=1000.0, type=TransactionType.INCOME),
            make_txn(amount=125.5),
            make_txn(amount=74.5, category=TransactionCategory.BILLS),
            make_txn(amount=300.0, type=TransactionType.INCOME, category=TransactionCategory.GIFT),
        ]
        for txn in transactions:
            ledger.add_transaction(txn)
        ledger.delete_transaction(transactions[1].id)

        income = sum(t.amount for t in ledger.transactions if t.type == TransactionType.INCOME)
        expense = sum(t.amount for t in ledger.transactions if t.type == TransactionType.EXPENSE)
        assert ledger.balance == pytest.approx(income - expense)
        assert ledger.balance == pytest.approx(1225.5)

    def test_delete_unknown_id_is_noop(self, ledger, make_txn):
        ledger.add_transaction(make_txn(amount=40.0))
        assert not ledger.delete_transaction("does-not-exist")
        assert ledger.balance == -40.0
        assert len(ledger.transactions) == 1

    def test_duplicate_id_is_ignored(self, ledger, make_txn):
        txn = make_txn(amount=40.0)
        assert ledger.add_transaction(txn) is not None
        assert ledger.add_transaction(txn) is None
        assert len(ledger.transactions) == 1
        assert ledger.balance == -40.0


class TestAlerts:
    """Tests for alert evaluation through the ledger."""

    def test_counters_increase_at_most_one_per_add(self, ledger, make_txn):
        for amount in (2000.0, 5000.0, 30.0):
            before = trigger_counts(ledger)
            ledger.add_transaction(make_txn(amount=amount))
            after = trigger_counts(ledger)
            for rule_id, count in after.items():
                assert count - before[rule_id] in (0, 1)

    def test_budget_exceeded_sees_new_transaction(self, ledger, make_txn):
        ledger.add_transaction(make_txn(amount=10.0))
        assert rule_for(ledger, AlertCondition.BUDGET_EXCEEDED).trigger_count == 1
        assert ledger.last_fired[-1].condition == AlertCondition.BUDGET_EXCEEDED

    def test_unusual_spending_against_category_average(self, ledger, make_txn):
        for _ in range(3):
            ledger.add_transaction(make_txn(amount=20.0))
        assert rule_for(ledger, AlertCondition.UNUSUAL_SPENDING).trigger_count == 0

        # Average including the new transaction is 35, deviation ~1.29
        ledger.add_transaction(make_txn(amount=80.0))
        assert rule_for(ledger, AlertCondition.UNUSUAL_SPENDING).trigger_count == 1

    def test_income_drop(self, ledger, make_txn):
        ledger.add_transaction(
            make_txn(amount=1000.0, type=TransactionType.INCOME, timestamp=NOW - timedelta(days=10))
        )
        before = rule_for(ledger, AlertCondition.INCOME_DROP).trigger_count

        ledger.add_transaction(make_txn(amount=100.0, type=TransactionType.INCOME))
        assert rule_for(ledger, AlertCondition.INCOME_DROP).trigger_count == before + 1

    def test_no_income_drop_when_income_holds(self, ledger, make_txn):
        ledger.add_transaction(
            make_txn(amount=1000.0, type=TransactionType.INCOME, timestamp=NOW - timedelta(days=10))
        )
        before = rule_for(ledger, AlertCondition.INCOME_DROP).trigger_count

        ledger.add_transaction(make_txn(amount=900.0, type=TransactionType.INCOME))
        assert rule_for(ledger, AlertCondition.INCOME_DROP).trigger_count == before

    def test_disabled_rule_not_counted(self, ledger, make_txn):
        rule = rule_for(ledger, AlertCondition.LARGE_TRANSACTION)
        ledger.set_rule_enabled(rule.id, False)
        ledger.add_transaction(make_txn(amount=5000.0))
        assert rule_for(ledger, AlertCondition.LARGE_TRANSACTION).trigger_count == 0

    def test_toggle_rule(self, ledger):
        rule = rule_for(ledger, AlertCondition.INCOME_DROP)
        assert ledger.toggle_rule(rule.id).is_enabled is False
        assert ledger.toggle_rule(rule.id).is_enabled is True

    def test_toggle_unknown_rule(self, ledger):
        assert ledger.toggle_rule("missing") is None
        assert ledger.set_rule_enabled("missing", False) is None


class TestAchievements:
    """Tests for achievement updates through the ledger."""

    def test_unlock_survives_delete(self, ledger, make_txn):
        txn = make_txn()
        ledger.add_transaction(txn)
        ledger.delete_transaction(txn)

        first = by_kind(ledger.achievements, AchievementKind.FIRST_TRANSACTION)
        assert first.is_unlocked
        assert first.progress == 0.0


class TestPulses:
    """Tests for pulse events."""

    def test_pulse_for_expense(self, ledger, make_txn):
        pulse = ledger.add_transaction(make_txn(amount=250.0))
        assert pulse.color == EXPENSE_COLOR
        assert pulse.intensity == pytest.approx(0.25)
        assert pulse.created_at == NOW
        assert pulse.expires_at == NOW + timedelta(seconds=3)

    def test_pulse_for_income_saturates(self, ledger, make_txn):
        pulse = ledger.add_transaction(make_txn(amount=4000.0, type=TransactionType.INCOME))
        assert pulse.color == INCOME_COLOR
        assert pulse.intensity == 1.0

    def test_pulses_expire(self, ledger, make_txn, clock):
        ledger.add_transaction(make_txn())
        clock.advance(seconds=1)
        ledger.add_transaction(make_txn())
        assert len(ledger.active_pulses()) == 2

        clock.advance(seconds=2)
        assert len(ledger.active_pulses()) == 1
        assert ledger.sweep_pulses() == 1
        assert len(ledger.pulses) == 1

        clock.advance(seconds=5)
        assert ledger.snapshot().pulses == ()

    def test_add_sweeps_expired_pulses(self, ledger, make_txn, clock):
        ledger.add_transaction(make_txn())
        clock.advance(seconds=10)
        ledger.add_transaction(make_txn())

        assert len(ledger.pulses) == 1
        assert ledger.pulses[0].created_at == clock()


class TestQueries:
    """Tests for read-only queries."""

    def test_get_transactions_for_date(self, ledger, make_txn):
        morning = make_txn(timestamp=NOW.replace(hour=8))
        evening = make_txn(timestamp=NOW.replace(hour=19))
        ledger.add_transaction(morning)
        ledger.add_transaction(evening)
        ledger.add_transaction(make_txn(timestamp=NOW - timedelta(days=1)))

        assert ledger.get_transactions(NOW.date()) == [evening, morning]

    def test_snapshot(self, ledger, make_txn):
        ledger.add_transaction(make_txn(amount=12.0))
        snapshot = ledger.snapshot()
        assert snapshot.balance == -12.0
        assert snapshot.totals.today_expense == 12.0
        assert len(snapshot.buckets) == 1
        assert len(snapshot.alert_rules) == 4
        assert len(snapshot.achievements) == 12


class TestPersistence:
    """Tests for loading and saving through the store."""

    def test_round_trip(self, ledger, make_txn, temp_store, clock):
        ledger.add_transaction(make_txn(amount=1500.0, type=TransactionType.INCOME, note="June"))
        ledger.add_transaction(make_txn(amount=20.0, location="Cafe"))
        rule = rule_for(ledger, AlertCondition.INCOME_DROP)
        ledger.set_rule_enabled(rule.id, False)

        restored = Ledger.load(temp_store, clock=clock)

        assert restored.transactions == ledger.transactions
        assert restored.balance == pytest.approx(1480.0)
        assert restored.alert_rules == ledger.alert_rules
        assert restored.achievements == ledger.achievements

    def test_keys_written(self, ledger, make_txn, temp_store):
        ledger.add_transaction(make_txn(amount=5.0))
        for key in (TRANSACTIONS_KEY, ALERT_RULES_KEY, ACHIEVEMENTS_KEY):
            assert temp_store.get(key) is not None
        assert temp_store.get_double(BALANCE_KEY) == -5.0

    def test_malformed_data_falls_back_to_defaults(self, temp_store, clock):
        temp_store.set(TRANSACTIONS_KEY, b"not json")
        temp_store.set(ALERT_RULES_KEY, b'{"unexpected": true}')
        temp_store.set(ACHIEVEMENTS_KEY, b'[{"id": "x"}]')

        ledger = Ledger.load(temp_store, clock=clock)

        assert ledger.transactions == []
        assert len(ledger.alert_rules) == 4
        assert len(ledger.achievements) == 12

    def test_stale_balance_is_recomputed(self, ledger, make_txn, temp_store, clock):
        ledger.add_transaction(make_txn(amount=30.0))
        temp_store.set_double(BALANCE_KEY, 999.0)

        restored = Ledger.load(temp_store, clock=clock)
        assert restored.balance == -30.0

    def test_failed_writes_are_ignored(self, clock, make_txn):
        ledger = Ledger(FailingStore(), clock=clock)
        ledger.add_transaction(make_txn(amount=10.0))
        ledger.clear_all()
        assert ledger.balance == 0.0

    def test_clear_all(self, ledger, make_txn, temp_store, clock):
        ledger.add_transaction(make_txn(amount=5000.0))
        ledger.clear_all()

        assert ledger.transactions == []
        assert ledger.balance == 0.0
        assert ledger.pulses == []
        assert all(r.trigger_count == 0 for r in ledger.alert_rules)
        assert not any(a.is_unlocked for a in ledger.achievements)
        for key in (TRANSACTIONS_KEY, BALANCE_KEY, ALERT_RULES_KEY, ACHIEVEMENTS_KEY):
            assert not temp_store.contains(key)

        assert Ledger.load(temp_store, clock=clock).transactions == []

    def test_missing_timestamp_falls_back_to_empty(self, temp_store, clock):
        record = {"id": "a1", "amount": 5.0, "type": "Expense", "category": "Food", "timestamp": None}
        temp_store.set(TRANSACTIONS_KEY, json.dumps([record]).encode("utf-8"))

        ledger = Ledger.load(temp_store, clock=clock)

        assert ledger.transactions == []
        assert ledger.balance == 0.0

    def test_timestamp_with_offset_falls_back_to_empty(self, temp_store, clock):
        record = {
            "id": "a1",
            "amount": 5.0,
            "type": "Expense",
            "category": "Food",
            "timestamp": "2024-06-15T10:00:00+00:00",
        }
        temp_store.set(TRANSACTIONS_KEY, json.dumps([record]).encode("utf-8"))

        ledger = Ledger.load(temp_store, clock=clock)

        assert ledger.transactions == []
        assert ledger.totals == PeriodTotals()

    def test_duplicate_stored_ids_keep_first(self, temp_store, clock):
        first = {
            "id": "a1",
            "amount": 5.0,
            "type": "Expense",
            "category": "Food",
            "timestamp": "2024-06-15T10:00:00.000000",
        }
        second = dict(first, amount=7.0)
        temp_store.set(TRANSACTIONS_KEY, json.dumps([first, second]).encode("utf-8"))

        ledger = Ledger.load(temp_store, clock=clock)

        assert [t.id for t in ledger.transactions] == ["a1"]
        assert ledger.balance == -5.0
        assert ledger.delete_transaction("a1")
        assert ledger.balance == 0.0
