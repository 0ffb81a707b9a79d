"""Storage layer for cashpulse application."""

from cashpulse.storage.base import KeyValueStore, StorageError
from cashpulse.storage.factories import create_sqlite_store

__all__ = ["KeyValueStore", "StorageError", "create_sqlite_store"]
