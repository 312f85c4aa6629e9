"""Stock movement ledger entities."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class MovementType(str, Enum):
    """Types of stock movements."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"
    TRANSFER = "transfer"
    CONVERSION = "conversion"
    ADJUSTMENT = "adjustment"


# Types stored as signed legs: the sign of the quantity carries the direction
SIGNED_TYPES = frozenset(
    {MovementType.TRANSFER, MovementType.CONVERSION, MovementType.ADJUSTMENT}
)


class StockMovement(BaseModel):
    """
    A single ledger row.

    Accepts snake_case or camelCase field names. Sign convention:
    inflow/outflow rows hold positive magnitudes; transfer and conversion
    legs are stored as a negative origin row and a positive destination row.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    product_id: str
    branch_id: str
    type: MovementType
    quantity: float
    price_at_transaction: float = 0.0
    date: datetime
    remission_number: str | None = None
    index_in_transaction: int = 0
    comment: str | None = None

    # Denormalized display fields
    product_name: str | None = None
    branch_name: str | None = None
    provider_id: str | None = None
    provider_name: str | None = None
    created_at: datetime | None = None

    @field_validator("price_at_transaction", mode="before")
    @classmethod
    def default_price(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("index_in_transaction", mode="before")
    @classmethod
    def default_index(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("date", "created_at")
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @property
    def pair_key(self) -> tuple[str, str]:
        """(product_id, branch_id) key used to partition the ledger."""
        return (self.product_id.strip(), self.branch_id.strip())

    @property
    def line_total(self) -> float:
        return abs(self.quantity) * self.price_at_transaction


class Direction(str, Enum):
    """Effect of a movement on its (product, branch) stock."""

    ADDITION = "addition"
    SUBTRACTION = "subtraction"


@dataclass(frozen=True)
class ClassifiedMovement:
    """A movement tagged once with its direction and unsigned magnitude."""

    movement: StockMovement
    direction: Direction
    quantity: float  # always >= 0

    @property
    def is_addition(self) -> bool:
        return self.direction is Direction.ADDITION

    @property
    def signed_quantity(self) -> float:
        return self.quantity if self.is_addition else -self.quantity

    @property
    def date(self) -> datetime:
        return self.movement.date
