"""
Storage Services Package

Provides the abstract key/value store interface and its implementations.
The ledger only ever sees the interface, so backends are swappable.
"""

from splitledger.services.storage.interface import (
    KeyValueStore,
    MalformedPersistedData,
    PersistenceError,
    StorageError,
)
from splitledger.services.storage.file_store import FileKeyValueStore
from splitledger.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "MalformedPersistedData",
    "PersistenceError",
    "StorageError",
    # Implementations
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
]
