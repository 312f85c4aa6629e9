"""
FIFO valuation engine.

Turns the movement history of a (product, branch) pair into its current
quantity, remaining cost layers and value. Pure computation: no I/O and
no state kept between calls.
"""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from agrostock.core.entities.catalog import Branch, Product, sort_by_name
from agrostock.core.entities.movement import ClassifiedMovement, StockMovement
from agrostock.core.entities.valuation import (
    CostLayer,
    InventoryPosition,
    ProductSummary,
    StockWarning,
)
from agrostock.core.services.classification import (
    RejectedMovement,
    classify_all,
    ingest_movements,
)

# Residual quantity below which a layer counts as fully consumed
QUANTITY_EPSILON = 1e-9


@dataclass
class ValuationReport:
    """Positions for every product x branch pair of the catalog."""

    positions: list[InventoryPosition] = field(default_factory=list)
    skipped: int = 0  # movements whose pair is not in the catalog
    rejected: list[RejectedMovement] = field(default_factory=list)

    @property
    def oversold(self) -> list[InventoryPosition]:
        return [p for p in self.positions if p.is_oversold]

    def get(self, product_id: str, branch_id: str) -> InventoryPosition | None:
        for position in self.positions:
            if position.product_id == product_id and position.branch_id == branch_id:
                return position
        return None


def _processing_order(cm: ClassifiedMovement) -> tuple:
    # Additions before subtractions on the same timestamp
    return (cm.date, 0 if cm.is_addition else 1)


def _run_fifo(
    classified: list[ClassifiedMovement],
    product_id: str,
    branch_id: str,
) -> InventoryPosition:
    layers: deque[CostLayer] = deque()
    quantity = 0.0
    total_value = 0.0
    consumed_value = 0.0
    warnings: list[StockWarning] = []

    for cm in sorted(classified, key=_processing_order):
        movement = cm.movement
        price = movement.price_at_transaction

        if cm.is_addition:
            if cm.quantity == 0:
                continue
            layers.append(
                CostLayer(
                    quantity=cm.quantity,
                    unit_cost=price,
                    date=movement.date,
                    movement_id=movement.id,
                )
            )
            quantity += cm.quantity
            total_value += cm.quantity * price
            continue

        remaining = cm.quantity
        while remaining > QUANTITY_EPSILON and layers:
            layer = layers[0]
            if layer.quantity <= remaining + QUANTITY_EPSILON:
                layers.popleft()
                taken = layer.quantity
            else:
                layer.quantity -= remaining
                taken = remaining
            remaining -= taken
            quantity -= taken
            total_value -= taken * layer.unit_cost
            consumed_value += taken * layer.unit_cost

        if remaining > QUANTITY_EPSILON:
            # Oversold: stock goes negative, deficit valued at this movement's price
            deficit_value = remaining * price
            quantity -= remaining
            total_value -= deficit_value
            consumed_value += deficit_value
            warnings.append(
                StockWarning(
                    movement_id=movement.id,
                    date=movement.date,
                    deficit=remaining,
                    unit_price=price,
                )
            )

    return InventoryPosition(
        product_id=product_id,
        branch_id=branch_id,
        quantity=quantity,
        total_value=total_value,
        consumed_value=consumed_value,
        cost_layers=list(layers),
        warnings=warnings,
    )


def compute_inventory_position(
    movements: Iterable[StockMovement | ClassifiedMovement],
    product_id: str | None = None,
    branch_id: str | None = None,
) -> InventoryPosition:
    """
    Compute the FIFO position of one (product, branch) pair.

    Movements are processed by date, additions before subtractions on a
    tie. Additions append a cost layer; subtractions consume layers oldest
    first. A subtraction that exhausts every layer drives the quantity
    negative, debits the deficit at its own price and records a
    StockWarning.

    Args:
        movements: Movements of the pair, in any order. May be the full
            ledger when product_id and branch_id are given.
        product_id: Keep only movements of this product.
        branch_id: Keep only movements of this branch.

    Returns:
        InventoryPosition with the remaining cost layers.
    """
    classified = classify_all(movements)
    if product_id is not None:
        classified = [
            cm for cm in classified if cm.movement.pair_key[0] == product_id
        ]
    if branch_id is not None:
        classified = [
            cm for cm in classified if cm.movement.pair_key[1] == branch_id
        ]

    if classified:
        first = classified[0].movement
        product_id = product_id if product_id is not None else first.product_id
        branch_id = branch_id if branch_id is not None else first.branch_id

    return _run_fifo(classified, product_id or "", branch_id or "")


def compute_all_positions(
    products: list[Product],
    branches: list[Branch],
    movements: Iterable[StockMovement | dict[str, Any]],
) -> ValuationReport:
    """
    Value every product in every branch, including pairs with no movements.

    Raw records go through ingest_movements(); rejected records are
    reported, never aggregated.
    """
    ingestion = ingest_movements(movements)

    buckets: dict[tuple[str, str], list[ClassifiedMovement]] = {
        (product.id, branch.id): [] for product in products for branch in branches
    }
    skipped = 0
    for cm in ingestion.movements:
        bucket = buckets.get(cm.movement.pair_key)
        if bucket is None:
            skipped += 1
            continue
        bucket.append(cm)

    report = ValuationReport(skipped=skipped, rejected=ingestion.rejected)
    for product in products:
        for branch in branches:
            position = _run_fifo(buckets[(product.id, branch.id)], product.id, branch.id)
            position.product_name = product.name
            position.branch_name = branch.name
            report.positions.append(position)
    return report


def summarize_by_product(
    positions: list[InventoryPosition],
    products: list[Product],
) -> list[ProductSummary]:
    """Total quantity and value of each product across branches, by name."""
    by_product: dict[str, list[InventoryPosition]] = {}
    for position in positions:
        by_product.setdefault(position.product_id, []).append(position)

    summaries: list[ProductSummary] = []
    for product in sort_by_name(products):
        branch_positions = by_product.get(product.id, [])
        summaries.append(
            ProductSummary(
                product_id=product.id,
                product_name=product.name,
                total_quantity=sum(p.quantity for p in branch_positions),
                total_value=sum(p.total_value for p in branch_positions),
                branches=branch_positions,
            )
        )
    return summaries


def average_costs(positions: Iterable[InventoryPosition]) -> dict[str, float]:
    """Map product_id to its average cost, for pricing adjustment rows."""
    return {position.product_id: position.average_cost for position in positions}
