"""
Data Models Package

This package contains all Pydantic models used by the ledger.
Everything that is stored or displayed conforms to these schemas.
"""

from splitledger.models.entry import (
    CENT,
    ZERO,
    Entry,
    Participant,
    quantize_cents,
    to_cents,
)
from splitledger.models.summary import ShareSummary

__all__ = [
    "CENT",
    "ZERO",
    "Entry",
    "Participant",
    "ShareSummary",
    "quantize_cents",
    "to_cents",
]
