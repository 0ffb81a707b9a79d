"""Shared pytest fixtures for cashpulse tests."""

import tempfile
import os
from datetime import datetime, timedelta
import pytest

from cashpulse.domain.entities import Transaction, TransactionCategory, TransactionType
from cashpulse.domain.ledger import Ledger
from cashpulse.storage.factories import create_sqlite_store

# Saturday, mid-month, midday: leaves room on both sides of every window
NOW = datetime(2024, 6, 15, 12, 0, 0)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def temp_store():
    """Create a temporary SQLite store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()

    yield store

    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    """A clock frozen at NOW."""
    return FrozenClock(NOW)


@pytest.fixture
def ledger(temp_store, clock):
    """Create an empty Ledger backed by the temporary store."""
    return Ledger(temp_store, clock=clock)


@pytest.fixture
def make_txn():
    """Factory for transactions with sensible defaults."""

    def _make(
        amount: float = 10.0,
        type: TransactionType = TransactionType.EXPENSE,
        category: TransactionCategory | None = None,
        timestamp: datetime = NOW,
        **kwargs,
    ) -> Transaction:
        if category is None:
            category = (
                TransactionCategory.SALARY
                if type == TransactionType.INCOME
                else TransactionCategory.FOOD
            )
        return Transaction(
            amount=amount, type=type, category=category, timestamp=timestamp, **kwargs
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
