"""
Inventory count reconciliation.

State machine: in_progress -> completed -> adjustments applied (terminal).
Items are edited only while in progress; applying a completed count
emits one adjustment movement per item whose physical quantity differs
from its theoretical quantity.
"""

from collections.abc import Mapping
from datetime import datetime

from agrostock.core.entities.inventory_count import (
    CountStatus,
    InventoryCount,
    InventoryCountItem,
    ProductTheoreticalStock,
)
from agrostock.core.entities.movement import MovementType, StockMovement
from agrostock.core.exceptions import InvalidStateError, ValidationError

ADJUSTMENT_PREFIX = "AJUSTE-CORTE"
OVERAGE_COMMENT = "Ajuste por corte de inventario (Sobrante)"
SHORTAGE_COMMENT = "Ajuste por corte de inventario (Faltante)"


def adjustment_remission_number(count_id: str) -> str:
    """Remission shared by every adjustment row of a count."""
    return f"{ADJUSTMENT_PREFIX}-{count_id[:8]}"


def is_adjustment_remission(remission_number: str | None) -> bool:
    return bool(remission_number) and remission_number.startswith(ADJUSTMENT_PREFIX)


def _sort_items(items: list[InventoryCountItem]) -> list[InventoryCountItem]:
    return sorted(items, key=lambda i: (i.product_name or "").casefold())


def build_count_items(
    theoretical: list[ProductTheoreticalStock],
    count_id: str | None = None,
    equalize: bool = False,
) -> list[InventoryCountItem]:
    """
    Snapshot theoretical stock into fresh count items.

    Physical quantities start at 0, or at the theoretical quantity when
    equalize is set.
    """
    items = [
        InventoryCountItem(
            count_id=count_id,
            product_id=stock.product_id,
            product_name=stock.product_name,
            initial_quantity=stock.initial,
            inflow_quantity=stock.inflows,
            outflow_quantity=stock.outflows,
            physical_quantity=stock.theoretical if equalize else 0.0,
        )
        for stock in theoretical
    ]
    return _sort_items(items)


def recalculate_items(
    items: list[InventoryCountItem],
    theoretical: list[ProductTheoreticalStock],
) -> list[InventoryCountItem]:
    """
    Refresh the theoretical breakdown of existing items.

    Physical quantities already entered are preserved. Items whose product
    has no fresh figures are left unchanged.
    """
    fresh = {stock.product_id: stock for stock in theoretical}
    updated: list[InventoryCountItem] = []
    for item in items:
        stock = fresh.get(item.product_id)
        if stock is None:
            updated.append(item)
            continue
        updated.append(
            item.model_copy(
                update={
                    "initial_quantity": stock.initial,
                    "inflow_quantity": stock.inflows,
                    "outflow_quantity": stock.outflows,
                }
            )
        )
    return _sort_items(updated)


def equalize_items(items: list[InventoryCountItem]) -> list[InventoryCountItem]:
    """Overwrite every physical quantity with its theoretical quantity."""
    return [
        item.model_copy(update={"physical_quantity": item.theoretical_quantity})
        for item in items
    ]


def set_physical_quantities(
    items: list[InventoryCountItem],
    quantities: Mapping[str, float],
) -> list[InventoryCountItem]:
    """
    Set physical quantities keyed by product_id.

    Raises:
        ValidationError: If a product is not part of the count or a
            quantity is negative.
    """
    known = {item.product_id for item in items}
    for product_id, quantity in quantities.items():
        if product_id not in known:
            raise ValidationError("product_id", "product is not part of this count", product_id)
        if quantity < 0:
            raise ValidationError("physical_quantity", "must be non-negative", quantity)

    return [
        item.model_copy(update={"physical_quantity": float(quantities[item.product_id])})
        if item.product_id in quantities
        else item
        for item in items
    ]


def ensure_editable(count: InventoryCount) -> None:
    """Raise unless the count is still in progress."""
    if not count.is_editable:
        raise InvalidStateError(
            count.id or "",
            count.status.value,
            "only counts in progress can be edited",
        )


def complete_count(count: InventoryCount) -> InventoryCount:
    """Freeze physical quantities: in_progress -> completed."""
    ensure_editable(count)
    return count.model_copy(update={"status": CountStatus.COMPLETED})


def ensure_can_apply(count: InventoryCount) -> None:
    """Raise unless the count is completed and not yet applied."""
    if count.adjustments_applied:
        raise InvalidStateError(
            count.id or "",
            count.status.value,
            "adjustments were already applied",
        )
    if count.status != CountStatus.COMPLETED:
        raise InvalidStateError(
            count.id or "",
            count.status.value,
            "count must be completed before applying adjustments",
        )


def plan_adjustments(
    count: InventoryCount,
    items: list[InventoryCountItem],
    applied_at: datetime,
    unit_costs: Mapping[str, float] | None = None,
) -> list[StockMovement]:
    """
    Build the adjustment movements for a completed count.

    Overages become inflow rows and shortages outflow rows, all sharing
    the count's adjustment remission and dated at applied_at. Indices run
    densely across the batch, inflows first.

    Args:
        count: The count being applied; must have an id.
        items: Its items.
        applied_at: Timestamp for every emitted row.
        unit_costs: Optional product_id -> average cost used as row price.

    Returns:
        Movements to insert; empty when nothing differs.
    """
    if not count.id:
        raise ValidationError("count_id", "count has no id")

    remission = adjustment_remission_number(count.id)
    costs = unit_costs or {}

    overages: list[tuple[InventoryCountItem, float]] = []
    shortages: list[tuple[InventoryCountItem, float]] = []
    for item in items:
        delta = item.physical_quantity - item.theoretical_quantity
        if delta > 0:
            overages.append((item, delta))
        elif delta < 0:
            shortages.append((item, -delta))

    movements: list[StockMovement] = []
    batches = (
        (overages, MovementType.INFLOW, OVERAGE_COMMENT),
        (shortages, MovementType.OUTFLOW, SHORTAGE_COMMENT),
    )
    for batch, movement_type, comment in batches:
        for item, magnitude in batch:
            movements.append(
                StockMovement(
                    product_id=item.product_id,
                    branch_id=count.branch_id,
                    type=movement_type,
                    quantity=magnitude,
                    price_at_transaction=costs.get(item.product_id, 0.0),
                    date=applied_at,
                    remission_number=remission,
                    index_in_transaction=len(movements),
                    comment=comment,
                    product_name=item.product_name,
                    branch_name=count.branch_name,
                )
            )
    return movements
