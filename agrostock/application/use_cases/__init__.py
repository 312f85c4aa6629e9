"""Application use cases."""

from agrostock.application.use_cases.apply_count_adjustments import (
    ApplyAdjustmentsResult,
    ApplyCountAdjustmentsUseCase,
)
from agrostock.application.use_cases.import_inventory import (
    ImportInventoryResult,
    ImportInventoryUseCase,
)
from agrostock.application.use_cases.inventory_counts import (
    CreateInventoryCountUseCase,
    DeleteInventoryCountUseCase,
    GetInventoryCountUseCase,
    ListInventoryCountsUseCase,
)
from agrostock.application.use_cases.manage_movements import (
    DeleteMovementResult,
    DeleteMovementUseCase,
    DeleteRemissionUseCase,
    ListStockLogUseCase,
    StockLogPage,
    StockLogQuery,
    UpdateMovementResult,
    UpdateMovementUseCase,
)
from agrostock.application.use_cases.record_movements import (
    RecordMovementsResult,
    RecordMovementsUseCase,
)
from agrostock.application.use_cases.update_inventory_count import (
    CompleteCountUseCase,
    EqualizeCountUseCase,
    RecalculateCountUseCase,
    UpdatePhysicalQuantitiesUseCase,
)
from agrostock.application.use_cases.value_inventory import (
    BranchTheoreticalStockUseCase,
    InventoryValuationResult,
    ValueInventoryUseCase,
)

__all__ = [
    # Ledger
    "RecordMovementsUseCase",
    "RecordMovementsResult",
    "UpdateMovementUseCase",
    "UpdateMovementResult",
    "DeleteMovementUseCase",
    "DeleteMovementResult",
    "DeleteRemissionUseCase",
    "ListStockLogUseCase",
    "StockLogQuery",
    "StockLogPage",
    "ImportInventoryUseCase",
    "ImportInventoryResult",
    # Valuation
    "ValueInventoryUseCase",
    "InventoryValuationResult",
    "BranchTheoreticalStockUseCase",
    # Inventory counts
    "CreateInventoryCountUseCase",
    "GetInventoryCountUseCase",
    "ListInventoryCountsUseCase",
    "DeleteInventoryCountUseCase",
    "UpdatePhysicalQuantitiesUseCase",
    "RecalculateCountUseCase",
    "EqualizeCountUseCase",
    "CompleteCountUseCase",
    "ApplyCountAdjustmentsUseCase",
    "ApplyAdjustmentsResult",
]
