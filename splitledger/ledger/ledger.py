"""
The Ledger

An ordered list of entries plus a pointer to the entry being edited.

Insertion order is display order, newest last. The pointer is kept as
an entry id and resolved by lookup, so `current` is always the object
stored in the list and edits to it change the stored entry.

Every mutating operation ends by persisting the full snapshot through
the gateway (when one is attached). If persisting fails the in-memory
change stays in place and PersistenceError is raised to the caller.
"""

from decimal import Decimal
from typing import Any, Iterable, Iterator, Optional, Sequence

from splitledger.ledger.ids import IdAllocator
from splitledger.ledger.price_input import parse_price_input
from splitledger.log import get_logger
from splitledger.models.entry import ZERO, Entry, Participant, to_cents
from splitledger.services.persistence import PersistenceGateway
from splitledger.services.storage.interface import (
    MalformedPersistedData,
    PersistenceError,
)


DEFAULT_DEPOSIT_AMOUNT = Decimal("0.25")


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class NotFoundError(LedgerError):
    """
    An entry id is not part of the ledger.

    Signals that the caller's view and the ledger have drifted apart.
    """
    pass


class UnknownParticipantError(LedgerError):
    """A participant id outside the configured group."""
    pass


class Ledger:
    """
    Entry list, current pointer and the operations the UI offers.

    create/duplicate/add_deposit are guarded: they do nothing unless the
    current entry is valid (non-zero price, at least one participant).
    """

    def __init__(
        self,
        entries: Optional[Iterable[Entry]] = None,
        gateway: Optional[PersistenceGateway] = None,
        participants: Optional[Sequence[Participant]] = None,
        deposit_amount: Decimal = DEFAULT_DEPOSIT_AMOUNT,
        current_id: Optional[int] = None,
    ):
        """
        Initialize a ledger.

        Args:
            entries: Existing entries in display order. If None, the
                     ledger starts with one blank draft.
            gateway: Where snapshots are persisted. If None, nothing is.
            participants: The fixed group. If None, any participant id
                          is accepted by the draft editing operations.
            deposit_amount: Price of the entry add_deposit() appends.
            current_id: Entry to point at; defaults to the newest one.
        """
        self._entries: list[Entry] = list(entries) if entries is not None else []
        self._gateway = gateway
        self._participants = list(participants) if participants is not None else None
        self._deposit_amount = to_cents(deposit_amount)
        self._ids = IdAllocator.seeded_from(self._entries)
        self._logger = get_logger(__name__)

        if entries is None:
            self._entries.append(Entry(id=self._ids.next()))

        if current_id is not None:
            self._index_of(current_id)
            self._current_id = current_id
        else:
            self._current_id = self._entries[-1].id if self._entries else None

    @classmethod
    def load(
        cls,
        gateway: PersistenceGateway,
        participants: Optional[Sequence[Participant]] = None,
        deposit_amount: Decimal = DEFAULT_DEPOSIT_AMOUNT,
    ) -> "Ledger":
        """
        Restore a ledger from its persisted snapshot.

        Missing or malformed data yields a fresh ledger with one blank
        draft. Nothing is written until the first mutation.

        Raises:
            PersistenceError: If the store itself cannot be read
        """
        logger = get_logger(__name__)
        try:
            entries = gateway.load()
        except MalformedPersistedData as e:
            logger.warning("snapshot_malformed", key=gateway.key, error=str(e))
            entries = None

        if entries is None:
            logger.info("ledger_bootstrapped", key=gateway.key)
        else:
            logger.info("ledger_loaded", key=gateway.key, entry_count=len(entries))

        return cls(
            entries=entries,
            gateway=gateway,
            participants=participants,
            deposit_amount=deposit_amount,
        )

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def entries(self) -> list[Entry]:
        """The entries in display order (a new list holding the stored objects)."""
        return list(self._entries)

    @property
    def current(self) -> Optional[Entry]:
        """The entry being edited; None only when the ledger is empty."""
        if self._current_id is None:
            return None
        for entry in self._entries:
            if entry.id == self._current_id:
                return entry
        return None

    @property
    def current_id(self) -> Optional[int]:
        return self._current_id

    @property
    def next_id(self) -> int:
        return self._ids.peek()

    @property
    def deposit_amount(self) -> Decimal:
        return self._deposit_amount

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def get(self, entry_id: int) -> Entry:
        """
        Look up an entry by id.

        Raises:
            NotFoundError: If no entry has that id
        """
        return self._entries[self._index_of(entry_id)]

    def snapshot(self) -> list[Entry]:
        """Deep copies of all entries, safe to hold on to."""
        return [entry.model_copy(deep=True) for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"Ledger(entries={len(self._entries)}, current_id={self._current_id})"

    def _index_of(self, entry_id: int) -> int:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        raise NotFoundError(f"Entry not found: {entry_id}")

    def _require_current(self) -> Entry:
        current = self.current
        if current is None:
            raise NotFoundError(f"Current entry not found: {self._current_id}")
        return current

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def is_valid(self) -> bool:
        """True iff the current entry has a non-zero price and participants."""
        current = self.current
        return current is not None and current.is_valid

    def select(self, entry_id: int) -> Entry:
        """
        Make the entry with `entry_id` current.

        Raises:
            NotFoundError: If no entry has that id
        """
        entry = self.get(entry_id)
        self._current_id = entry.id
        self._logger.debug("entry_selected", entry_id=entry.id)
        return entry

    def _commit_draft(self) -> Entry:
        """
        Append a copy of the current entry, make it current and clear it.

        The entry that was current keeps its values; the appended one
        becomes the next blank draft.
        """
        current = self._require_current()
        entry = Entry(
            id=self._ids.next(),
            price=current.price,
            participant_ids=list(current.participant_ids),
        )
        self._entries.append(entry)
        self._current_id = entry.id

        entry.price = ZERO
        entry.participant_ids = []

        self._logger.info(
            "entry_created",
            entry_id=entry.id,
            committed_id=current.id,
            price=str(current.price),
            participant_ids=list(current.participant_ids),
        )
        return entry

    def create(self) -> Optional[Entry]:
        """
        Commit the current entry and start a new blank draft.

        Does nothing (returns None) unless is_valid().

        Returns:
            The new current entry
        """
        if not self.is_valid():
            return None
        entry = self._commit_draft()
        self._persist()
        return entry

    def duplicate(self) -> Optional[Entry]:
        """
        Append a copy of the current entry and make the copy current.

        Unlike create(), the copy keeps the price and participants.
        Does nothing (returns None) unless is_valid().
        """
        if not self.is_valid():
            return None
        current = self._require_current()
        entry = Entry(
            id=self._ids.next(),
            price=current.price,
            participant_ids=list(current.participant_ids),
        )
        self._entries.append(entry)
        self._current_id = entry.id
        self._logger.info("entry_duplicated", entry_id=entry.id, source_id=current.id)
        self._persist()
        return entry

    def add_deposit(self) -> Optional[Entry]:
        """
        Commit the current entry followed by a deposit (Pfand) entry.

        The deposit entry costs `deposit_amount` and is shared by the same
        participants as the current entry. Afterwards a blank draft is
        current. Does nothing (returns None) unless is_valid().

        Returns:
            The new blank draft
        """
        if not self.is_valid():
            return None
        participant_ids = list(self._require_current().participant_ids)

        deposit = self._commit_draft()
        deposit.price = self._deposit_amount
        deposit.participant_ids = participant_ids
        draft = self._commit_draft()

        self._logger.info(
            "deposit_added",
            entry_id=deposit.id,
            price=str(self._deposit_amount),
            participant_ids=participant_ids,
        )
        self._persist()
        return draft

    def delete(self) -> Entry:
        """
        Remove the current entry.

        The entry that moves into the freed position becomes current, or
        the one before it when the last entry was removed. Removing the
        only entry leaves the ledger empty; call bootstrap() to continue.

        Returns:
            The removed entry

        Raises:
            NotFoundError: If the current entry is not in the ledger
        """
        if self._current_id is None:
            raise NotFoundError("Ledger is empty; there is no current entry to delete")
        index = self._index_of(self._current_id)
        removed = self._entries.pop(index)

        if index < len(self._entries):
            self._current_id = self._entries[index].id
        elif self._entries:
            self._current_id = self._entries[index - 1].id
        else:
            self._current_id = None

        self._logger.info(
            "entry_deleted",
            entry_id=removed.id,
            current_id=self._current_id,
            remaining=len(self._entries),
        )
        self._persist()
        return removed

    def bootstrap(self) -> Entry:
        """
        Start an emptied ledger again with one blank draft.

        Raises:
            LedgerError: If the ledger still has entries
        """
        if self._entries:
            raise LedgerError("Only an empty ledger can be bootstrapped")
        entry = Entry(id=self._ids.next())
        self._entries.append(entry)
        self._current_id = entry.id
        self._logger.info("ledger_bootstrapped", entry_id=entry.id)
        self._persist()
        return entry

    # =========================================================================
    # DRAFT EDITING
    # =========================================================================

    def set_price(self, value: Any) -> Entry:
        """Set the current entry's price (rounded to the cent)."""
        current = self._require_current()
        current.price = value
        self._logger.debug("price_changed", entry_id=current.id, price=str(current.price))
        self._persist()
        return current

    def set_price_input(self, display: str) -> Entry:
        """Set the current entry's price from the edited price field text."""
        return self.set_price(parse_price_input(display))

    def set_participants(self, participant_ids: Iterable[int]) -> Entry:
        """
        Replace the current entry's participants.

        Raises:
            UnknownParticipantError: If an id is not in the configured group
        """
        current = self._require_current()
        participant_ids = list(participant_ids)
        for pid in participant_ids:
            self._check_participant(pid)
        current.participant_ids = participant_ids
        self._logger.debug(
            "participants_changed",
            entry_id=current.id,
            participant_ids=current.participant_ids,
        )
        self._persist()
        return current

    def toggle_participant(self, participant_id: int) -> Entry:
        """Add the participant to the current entry, or remove them if present."""
        current = self._require_current()
        self._check_participant(participant_id)
        if participant_id in current.participant_ids:
            updated = [pid for pid in current.participant_ids if pid != participant_id]
        else:
            updated = current.participant_ids + [participant_id]
        return self.set_participants(updated)

    def _check_participant(self, participant_id: int) -> None:
        if self._participants is None:
            return
        if not any(p.id == participant_id for p in self._participants):
            raise UnknownParticipantError(f"Unknown participant: {participant_id}")

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _persist(self) -> None:
        if self._gateway is None:
            return
        try:
            self._gateway.save(self._entries)
        except PersistenceError as e:
            self._logger.error(
                "snapshot_save_failed",
                key=self._gateway.key,
                error=str(e),
                entry_count=len(self._entries),
            )
            raise
