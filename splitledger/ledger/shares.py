"""
Share Calculation

Derives each participant's accumulated cost from the entry list.

Every entry is split evenly among its participants and each portion is
rounded to the cent on its own (halves away from zero). Rounding per
entry means the shares do not always add up to the total:

    10.00 split three ways -> 3.33 + 3.33 + 3.33 = 9.99

That drift is reported as `residual` and left alone. Entries without
participants count towards the total but towards nobody's share.

Everything here is a pure function of the entries passed in.
"""

from decimal import Decimal, localcontext
from typing import Iterable, Optional, Sequence

from splitledger.models.entry import ZERO, Entry, Participant, quantize_cents
from splitledger.models.summary import ShareSummary


def split_price(price: Decimal, participant_count: int) -> Decimal:
    """One participant's portion of `price`, rounded to the cent."""
    if participant_count <= 0:
        raise ValueError("Cannot split a price among zero participants")
    with localcontext() as ctx:
        # enough digits below the cent that the division is not rounded first
        ctx.prec = max(ctx.prec, price.adjusted() + 12)
        return quantize_cents(price / participant_count)


class ShareCalculator:
    """
    Splits ledger entries among a fixed participant set.

    Configured participants always appear in the result, starting at 0.00.
    """

    def __init__(self, participants: Optional[Sequence[Participant]] = None):
        self._participants = list(participants or [])

    @property
    def participants(self) -> list[Participant]:
        return list(self._participants)

    def total(self, entries: Iterable[Entry]) -> Decimal:
        """Signed sum of all entry prices."""
        return sum((entry.price for entry in entries), ZERO)

    def shares(self, entries: Iterable[Entry]) -> dict[int, Decimal]:
        """
        Accumulated share per participant id.

        Ids referenced by entries but missing from the configured set
        are reported too, after the configured ones.
        """
        result = {participant.id: ZERO for participant in self._participants}
        for entry in entries:
            if not entry.is_assigned:
                continue
            increment = split_price(entry.price, len(entry.participant_ids))
            for pid in entry.participant_ids:
                result[pid] = result.get(pid, ZERO) + increment
        return result

    def share_total(self, entries: Iterable[Entry]) -> Decimal:
        """Sum of all shares; may differ from total() by the rounding residual."""
        return sum(self.shares(entries).values(), ZERO)

    def unassigned(self, entries: Iterable[Entry]) -> Decimal:
        """Cost carried by entries that have no participants."""
        return sum((entry.price for entry in entries if not entry.is_assigned), ZERO)

    def summarize(self, entries: Iterable[Entry]) -> ShareSummary:
        """Compute every figure shown next to the entry list in one pass."""
        entries = list(entries)
        total = self.total(entries)
        shares = self.shares(entries)
        share_total = sum(shares.values(), ZERO)
        unassigned = self.unassigned(entries)
        return ShareSummary(
            total=total,
            shares=shares,
            participant_names={p.id: p.name for p in self._participants},
            share_total=share_total,
            unassigned=unassigned,
            residual=total - unassigned - share_total,
        )
