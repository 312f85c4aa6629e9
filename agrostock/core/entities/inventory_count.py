"""Inventory count (physical stock take) entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field, field_validator

from agrostock.core.entities.movement import as_utc


class CountStatus(str, Enum):
    """Lifecycle of an inventory count."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InventoryCount(BaseModel):
    """
    A physical stock take for one branch.

    Moves from in_progress to completed; once adjustments_applied is set
    the count is terminal and its adjustments must never be re-posted.
    """

    id: str | None = None
    date: datetime
    branch_id: str
    branch_name: str | None = None
    responsible: str | None = None
    status: CountStatus = CountStatus.IN_PROGRESS
    notes: str | None = None
    adjustments_applied: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("date", "created_at", "updated_at")
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @property
    def is_editable(self) -> bool:
        return self.status == CountStatus.IN_PROGRESS

    @property
    def can_apply(self) -> bool:
        return self.status == CountStatus.COMPLETED and not self.adjustments_applied


class InventoryCountItem(BaseModel):
    """One product line of a count. Theoretical and difference are derived."""

    id: str | None = None
    count_id: str | None = None
    product_id: str
    product_name: str | None = None
    initial_quantity: float = 0.0
    inflow_quantity: float = 0.0
    outflow_quantity: float = 0.0
    physical_quantity: float = 0.0

    @computed_field
    @property
    def theoretical_quantity(self) -> float:
        return self.initial_quantity + self.inflow_quantity - self.outflow_quantity

    @computed_field
    @property
    def difference(self) -> float:
        return self.physical_quantity - self.theoretical_quantity


class ProductTheoreticalStock(BaseModel):
    """Theoretical stock breakdown for one product at a branch."""

    product_id: str
    product_name: str | None = None
    initial: float = 0.0
    inflows: float = 0.0
    outflows: float = 0.0
    last_count_date: datetime

    @computed_field
    @property
    def theoretical(self) -> float:
        return self.initial + self.inflows - self.outflows


class CountWithItems(BaseModel):
    """A count together with its product lines."""

    count: InventoryCount
    items: list[InventoryCountItem] = Field(default_factory=list)
