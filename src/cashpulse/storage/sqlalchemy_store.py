"""SQLAlchemy key-value store implementation."""

from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cashpulse.storage.base import KeyValueStore, StorageError
from cashpulse.storage.models import Entry, create_session_factory


class SQLAlchemyStore(KeyValueStore):
    """SQLAlchemy-based implementation of KeyValueStore."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def _get_entry(self, key: str) -> Optional[Entry]:
        session = self._get_session()
        try:
            return session.get(Entry, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read key '{key}': {e}") from e

    def _commit(self, key: str) -> None:
        session = self._get_session()
        try:
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not write key '{key}': {e}") from e

    def connect(self) -> None:
        """Connect to the store."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def get(self, key: str) -> Optional[bytes]:
        """Get the blob stored under key, or None."""
        entry = self._get_entry(key)
        if entry is None:
            return None
        return entry.blob

    def set(self, key: str, value: bytes) -> None:
        """Store a blob under key, replacing any previous value."""
        entry = self._get_entry(key)
        if entry is None:
            self._get_session().add(Entry(key=key, blob=value))
        else:
            entry.blob = value
            entry.number = None
        self._commit(key)

    def remove(self, key: str) -> None:
        """Remove key. Removing a missing key is a no-op."""
        entry = self._get_entry(key)
        if entry is None:
            return
        self._get_session().delete(entry)
        self._commit(key)

    def contains(self, key: str) -> bool:
        """Check whether key holds a value."""
        return self._get_entry(key) is not None

    def get_double(self, key: str) -> float:
        """Get the number stored under key, 0.0 if absent."""
        entry = self._get_entry(key)
        if entry is None or entry.number is None:
            return 0.0
        return float(entry.number)

    def set_double(self, key: str, value: float) -> None:
        """Store a number under key."""
        entry = self._get_entry(key)
        if entry is None:
            self._get_session().add(Entry(key=key, number=float(value)))
        else:
            entry.number = float(value)
            entry.blob = None
        self._commit(key)
