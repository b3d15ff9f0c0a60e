"""
Persistence Gateway

Serializes the ledger's entry list to a key/value store and back.

Persisted layout (one key, "entries" by default):

    [{"id": 0, "price": 2.5, "userIds": [0, 1]}, ...]

UTF-8 JSON, prices as numbers with two-decimal semantics. The gateway
knows nothing about the current pointer or participants; it only moves
entry snapshots across the storage boundary.
"""

from typing import Optional

from pydantic import TypeAdapter

from splitledger.log import get_logger
from splitledger.models.entry import Entry
from splitledger.services.storage.interface import (
    KeyValueStore,
    MalformedPersistedData,
    PersistenceError,
)


_ENTRY_LIST = TypeAdapter(list[Entry])


class PersistenceGateway:
    """
    Loads and saves entry snapshots under a single storage key.

    Both operations are synchronous. Store failures surface as
    PersistenceError; unusable stored data as MalformedPersistedData.
    """

    def __init__(self, store: KeyValueStore, key: str = "entries"):
        self._store = store
        self._key = key
        self._logger = get_logger(__name__)

    @property
    def key(self) -> str:
        return self._key

    def encode(self, entries: list[Entry]) -> bytes:
        """Serialize entries to the persisted JSON layout."""
        return _ENTRY_LIST.dump_json(entries, by_alias=True)

    def decode(self, raw: bytes) -> list[Entry]:
        """
        Parse a persisted snapshot.

        Raises:
            MalformedPersistedData: If the bytes are not a non-empty
                array of entries with unique ids
        """
        try:
            entries = _ENTRY_LIST.validate_json(raw)
        except ValueError as e:
            raise MalformedPersistedData(f"Stored entries are not valid: {e}") from e

        if not entries:
            raise MalformedPersistedData("Stored entry list is empty")

        ids = [entry.id for entry in entries]
        if len(set(ids)) != len(ids):
            raise MalformedPersistedData("Stored entries contain duplicate ids")

        return entries

    def load(self) -> Optional[list[Entry]]:
        """
        Load the persisted entry list.

        Returns:
            The entries in stored order, or None if nothing was ever saved

        Raises:
            PersistenceError: If the store cannot be read
            MalformedPersistedData: If the stored value is unusable
        """
        try:
            raw = self._store.get(self._key)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to read {self._key!r}: {e}") from e

        if raw is None:
            self._logger.debug("snapshot_absent", key=self._key)
            return None

        entries = self.decode(raw)
        self._logger.debug("snapshot_loaded", key=self._key, entry_count=len(entries))
        return entries

    def save(self, entries: list[Entry]) -> None:
        """
        Persist the full entry list, replacing the previous snapshot.

        Raises:
            PersistenceError: If the store cannot be written
        """
        payload = self.encode(entries)
        try:
            self._store.set(self._key, payload)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to write {self._key!r}: {e}") from e

        self._logger.debug("snapshot_saved", key=self._key, entry_count=len(entries))
