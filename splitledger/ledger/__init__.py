"""Ledger core: entries, ids, price input and cost splitting."""

from splitledger.ledger.ids import IdAllocator
from splitledger.ledger.ledger import (
    DEFAULT_DEPOSIT_AMOUNT,
    Ledger,
    LedgerError,
    NotFoundError,
    UnknownParticipantError,
)
from splitledger.ledger.price_input import (
    format_price_input,
    parse_price_input,
    pop_digit,
    push_digit,
)
from splitledger.ledger.shares import ShareCalculator, split_price

__all__ = [
    "DEFAULT_DEPOSIT_AMOUNT",
    "IdAllocator",
    "Ledger",
    "LedgerError",
    "NotFoundError",
    "ShareCalculator",
    "UnknownParticipantError",
    "format_price_input",
    "parse_price_input",
    "pop_digit",
    "push_digit",
    "split_price",
]
