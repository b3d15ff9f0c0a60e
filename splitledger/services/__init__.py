"""Services package."""

from splitledger.services.persistence import PersistenceGateway
from splitledger.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    MalformedPersistedData,
    PersistenceError,
    StorageError,
)

__all__ = [
    # Persistence
    "PersistenceGateway",
    # Storage services
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "MalformedPersistedData",
    "PersistenceError",
    "StorageError",
]
