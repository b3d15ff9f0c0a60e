"""
Ledger Session

Ties the components together for whatever front end drives the ledger:

    UI event -> Ledger operation -> snapshot persisted -> shares recomputed

The session is the ledger's caller. It owns the one decision the ledger
leaves to its caller: when the last entry is deleted, a fresh blank
draft is bootstrapped so there is always something to edit.
"""

from typing import Any, Iterable, Optional

from splitledger.config import Settings, get_settings
from splitledger.ledger import Ledger, ShareCalculator, format_price_input
from splitledger.log import configure_logging, get_logger
from splitledger.models import Entry, Participant, ShareSummary
from splitledger.services import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    PersistenceGateway,
)


class LedgerSession:
    """
    UI-facing wrapper around one ledger.

    Every action returns the up-to-date ShareSummary, which is what the
    screen shows after each change.
    """

    def __init__(
        self,
        ledger: Ledger,
        participants: list[Participant],
        calculator: Optional[ShareCalculator] = None,
    ):
        self._ledger = ledger
        self._participants = list(participants)
        self._calculator = calculator or ShareCalculator(self._participants)
        self._logger = get_logger(__name__)

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def participants(self) -> list[Participant]:
        return list(self._participants)

    @property
    def current(self) -> Optional[Entry]:
        return self._ledger.current

    @property
    def can_commit(self) -> bool:
        """Whether create/duplicate/deposit buttons are enabled."""
        return self._ledger.is_valid()

    @property
    def can_delete(self) -> bool:
        """The delete button is disabled while only one entry is left."""
        return len(self._ledger) > 1

    def summary(self) -> ShareSummary:
        return self._calculator.summarize(self._ledger.entries)

    def price_display(self) -> str:
        """Text for the price field of the current entry."""
        current = self._ledger.current
        return format_price_input(current.price if current else 0)

    def edit_price(self, display: str) -> ShareSummary:
        self._ledger.set_price_input(display)
        return self.summary()

    def set_price(self, value: Any) -> ShareSummary:
        self._ledger.set_price(value)
        return self.summary()

    def toggle_participant(self, participant_id: int) -> ShareSummary:
        self._ledger.toggle_participant(participant_id)
        return self.summary()

    def set_participants(self, participant_ids: Iterable[int]) -> ShareSummary:
        self._ledger.set_participants(participant_ids)
        return self.summary()

    def select(self, entry_id: int) -> ShareSummary:
        self._ledger.select(entry_id)
        return self.summary()

    def create(self) -> ShareSummary:
        self._ledger.create()
        return self.summary()

    def duplicate(self) -> ShareSummary:
        self._ledger.duplicate()
        return self.summary()

    def add_deposit(self) -> ShareSummary:
        self._ledger.add_deposit()
        return self.summary()

    def delete(self) -> ShareSummary:
        """
        Delete the current entry, re-bootstrapping if the ledger empties.

        The re-bootstrap also happens when saving the deletion fails, so
        there is always a current entry to edit.
        """
        try:
            self._ledger.delete()
        finally:
            if self._ledger.is_empty:
                self._logger.info("ledger_emptied")
                self._ledger.bootstrap()
        return self.summary()


def create_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """Build the key/value store selected in the storage settings."""
    storage = (settings or get_settings()).storage
    if storage.backend == "memory":
        return InMemoryKeyValueStore()
    return FileKeyValueStore(storage.data_dir)


def create_ledger_session(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
) -> LedgerSession:
    """
    Factory function to create a ready-to-use session.

    Args:
        settings: Configuration; the cached settings if None.
        store: Storage medium; built from the storage settings if None.

    Returns:
        A session over the loaded (or freshly bootstrapped) ledger

    Raises:
        PersistenceError: If the store cannot be read
    """
    settings = settings or get_settings()
    configure_logging(settings.app)

    ledger_settings = settings.ledger
    participants = ledger_settings.participants
    gateway = PersistenceGateway(
        store if store is not None else create_store(settings),
        key=ledger_settings.storage_key,
    )
    ledger = Ledger.load(
        gateway,
        participants=participants,
        deposit_amount=ledger_settings.deposit_amount,
    )
    return LedgerSession(ledger, participants)
