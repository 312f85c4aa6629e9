"""Core domain entities."""

from agrostock.core.entities.catalog import Branch, Product, sort_by_name
from agrostock.core.entities.inventory_count import (
    CountStatus,
    CountWithItems,
    InventoryCount,
    InventoryCountItem,
    ProductTheoreticalStock,
)
from agrostock.core.entities.invoice import (
    PayableInvoice,
    PaymentStatus,
    invoice_total,
)
from agrostock.core.entities.movement import (
    SIGNED_TYPES,
    ClassifiedMovement,
    Direction,
    MovementType,
    StockMovement,
    as_utc,
)
from agrostock.core.entities.valuation import (
    CostLayer,
    InventoryPosition,
    ProductSummary,
    StockWarning,
)

__all__ = [
    # Catalog
    "Branch",
    "Product",
    "sort_by_name",
    # Movements
    "ClassifiedMovement",
    "Direction",
    "MovementType",
    "SIGNED_TYPES",
    "StockMovement",
    "as_utc",
    # Valuation
    "CostLayer",
    "InventoryPosition",
    "ProductSummary",
    "StockWarning",
    # Counts
    "CountStatus",
    "CountWithItems",
    "InventoryCount",
    "InventoryCountItem",
    "ProductTheoreticalStock",
    # Invoices
    "PayableInvoice",
    "PaymentStatus",
    "invoice_total",
]
