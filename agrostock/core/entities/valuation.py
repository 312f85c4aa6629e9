"""FIFO valuation result entities."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class CostLayer(BaseModel):
    """Remaining quantity of one addition and its unit cost."""

    quantity: float
    unit_cost: float
    date: datetime
    movement_id: str | None = None

    @property
    def value(self) -> float:
        return self.quantity * self.unit_cost


class StockWarning(BaseModel):
    """A subtraction that ran past the available cost layers."""

    code: str = "STOCK_OVERSOLD"
    movement_id: str | None = None
    date: datetime
    deficit: float  # unlayered quantity removed
    unit_price: float  # price used to debit the deficit value


class InventoryPosition(BaseModel):
    """Derived stock position for one (product, branch) pair."""

    product_id: str
    branch_id: str
    product_name: str | None = None
    branch_name: str | None = None
    quantity: float = 0.0
    total_value: float = 0.0
    consumed_value: float = 0.0
    cost_layers: list[CostLayer] = Field(default_factory=list)
    warnings: list[StockWarning] = Field(default_factory=list)

    @computed_field
    @property
    def average_cost(self) -> float:
        if self.quantity > 0:
            return self.total_value / self.quantity
        return 0.0

    @property
    def is_oversold(self) -> bool:
        return self.quantity < 0

    @property
    def layer_count(self) -> int:
        return len(self.cost_layers)


class ProductSummary(BaseModel):
    """Per-product totals across every branch."""

    product_id: str
    product_name: str
    total_quantity: float = 0.0
    total_value: float = 0.0
    branches: list[InventoryPosition] = Field(default_factory=list)

    @computed_field
    @property
    def average_cost(self) -> float:
        if self.total_quantity > 0:
            return self.total_value / self.total_quantity
        return 0.0
