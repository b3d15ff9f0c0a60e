"""Monotonic entry id allocation."""

from typing import Iterable

from splitledger.models.entry import Entry


class IdAllocator:
    """
    Issues unique, strictly increasing entry ids.

    Each ledger owns its own allocator. Ids are never handed out twice,
    even after the entry that carried one is deleted.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"Id counter cannot start below zero: {start}")
        self._next = start

    @classmethod
    def seeded_from(cls, entries: Iterable[Entry]) -> "IdAllocator":
        """Start above every existing id (or at 0 for no entries)."""
        return cls(max((entry.id for entry in entries), default=-1) + 1)

    def next(self) -> int:
        """Return the counter value, then advance it."""
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        """The id the next call to next() will return."""
        return self._next

    def __repr__(self) -> str:
        return f"IdAllocator(next={self._next})"
