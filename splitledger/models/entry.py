"""
Core Data Models for the Shared Expense Ledger

These models define the schemas for everything the ledger stores.
They are designed to:
1. Keep every amount an exact multiple of one cent
2. Be serializable to the persisted JSON layout
3. Stay mutable where the ledger edits entries in place

Amounts are Decimal quantized to two places. Floats only appear at the
JSON boundary, where the persisted layout stores prices as numbers.
"""

from decimal import MAX_EMAX, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_cents(amount: Decimal) -> Decimal:
    """
    Round to the cent, halves away from zero, at any magnitude.

    The default context keeps 28 digits; quantizing a longer amount
    there raises InvalidOperation, so precision is widened to fit.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        ctx.Emax = MAX_EMAX
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> Decimal:
    """
    Coerce a number to a two-decimal Decimal.

    Floats go through str() first so 0.1 becomes Decimal("0.1") and not
    its binary expansion. Halves round away from zero.
    """
    if isinstance(value, float):
        value = str(value)
    amount = quantize_cents(Decimal(value))
    # Decimal keeps the sign of zero; "-0.00" is not a useful amount
    return amount if amount else ZERO


class Participant(BaseModel):
    """
    One member of the fixed group among whom costs are split.

    Participants come from configuration and never change at runtime.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(..., ge=0, description="Stable participant id")
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )


class Entry(BaseModel):
    """
    One recorded expense: an amount plus the participants who share it.

    The ledger edits the current entry in place, so assignments are
    validated (price re-quantized, participant ids de-duplicated).
    """
    model_config = ConfigDict(
        validate_assignment=True,
        populate_by_name=True,
    )

    id: int = Field(
        ...,
        ge=0,
        description="Unique for the ledger's lifetime, never reused"
    )
    price: Decimal = Field(
        default=ZERO,
        description="Signed amount, exact multiple of one cent"
    )
    participant_ids: list[int] = Field(
        default_factory=list,
        alias="userIds",
        description="Participants sharing this entry, in selection order"
    )

    @field_validator('price', mode='before')
    @classmethod
    def quantize_price(cls, v: Any) -> Decimal:
        """Store every price as an exact number of cents."""
        if isinstance(v, bool):
            raise ValueError("Price must be a number")
        try:
            return to_cents(v)
        except (InvalidOperation, TypeError):
            raise ValueError(f"Price is not a finite amount: {v!r}")

    @field_validator('participant_ids')
    @classmethod
    def drop_duplicate_participants(cls, v: list[int]) -> list[int]:
        """Duplicates carry no meaning; keep the first occurrence."""
        return list(dict.fromkeys(v))

    @field_serializer('price', when_used='json')
    def serialize_price(self, price: Decimal) -> float:
        return float(price)

    @property
    def is_valid(self) -> bool:
        """An entry can be committed once it has a price and participants."""
        return self.price != 0 and len(self.participant_ids) > 0

    @property
    def is_assigned(self) -> bool:
        return bool(self.participant_ids)
