"""
Abstract Key/Value Store Interface

The ledger treats its storage medium as an opaque key/value byte store
with synchronous get/set. Defining that as an interface allows us to:
1. Use an in-memory store for testing
2. Keep the snapshot on disk for the real application
3. Swap in a browser-style local storage or a database later
4. Keep the ledger decoupled from where bytes end up

The interface is intentionally tiny - one snapshot, one key.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the storage medium.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored bytes, or None if the key was never written

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """
        Write (replace) the value stored under a key.

        Args:
            key: The storage key
            value: The bytes to store

        Raises:
            PersistenceError: If the store cannot be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """The store could not be read or written."""
    pass


class MalformedPersistedData(StorageError):
    """
    The stored value is not a usable entry list.

    Raised for undecodable bytes, invalid JSON, schema mismatches,
    duplicate entry ids and empty arrays.
    """
    pass
