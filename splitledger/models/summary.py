"""
Share summary model.

The numbers shown next to the entry list: what everything cost, what each
participant owes, and how far the rounded shares drift from the total.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class ShareSummary(BaseModel):
    """
    Result of splitting a ledger's entries among its participants.

    `residual` is the rounding drift between the assigned cost and the
    sum of the shares. It is reported as-is and never redistributed.
    """

    total: Decimal = Field(..., description="Sum of all entry prices")
    shares: dict[int, Decimal] = Field(
        default_factory=dict,
        description="Participant id -> accumulated share"
    )
    participant_names: dict[int, str] = Field(
        default_factory=dict,
        description="Participant id -> display name"
    )
    share_total: Decimal = Field(..., description="Sum of all shares")
    unassigned: Decimal = Field(
        ...,
        description="Cost of entries that have no participants"
    )
    residual: Decimal = Field(
        ...,
        description="total - unassigned - share_total"
    )

    @property
    def named_shares(self) -> dict[str, Decimal]:
        """Shares keyed by participant name (configured participants only)."""
        return {
            name: self.shares.get(pid, Decimal("0.00"))
            for pid, name in self.participant_names.items()
        }

    @property
    def is_reconciled(self) -> bool:
        return self.residual == 0
