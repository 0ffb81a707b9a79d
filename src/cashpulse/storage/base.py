"""Abstract key-value store interface."""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """A read or write against the backing store failed."""


class KeyValueStore(ABC):
    """Opaque blob store keyed by string."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Get the blob stored under key, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store a blob under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing a missing key is a no-op."""
        pass

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Check whether key holds a value."""
        pass

    @abstractmethod
    def get_double(self, key: str) -> float:
        """Get the number stored under key, 0.0 if absent."""
        pass

    @abstractmethod
    def set_double(self, key: str, value: float) -> None:
        """Store a number under key."""
        pass
