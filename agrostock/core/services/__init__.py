"""
Core business logic services.

Layer-pure services that depend only on:
- agrostock/core/entities/*
- agrostock/core/exceptions.py

NO infrastructure imports. Valuation and reconciliation are pure
functions over already-fetched movements.
"""

from agrostock.core.services.classification import (
    IngestionResult,
    RejectedMovement,
    classify,
    classify_all,
    ingest_movements,
    is_initial_marker,
)
from agrostock.core.services.fifo_valuation import (
    ValuationReport,
    average_costs,
    compute_all_positions,
    compute_inventory_position,
    summarize_by_product,
)
from agrostock.core.services.inventory_import import (
    ImportLayer,
    ImportPlan,
    ImportRow,
    SkippedRow,
    plan_import,
)
from agrostock.core.services.movement_builder import (
    ClientType,
    MovementLine,
    build_conversion,
    build_inflow,
    build_outflow,
    build_transfer,
    place_at_index,
)
from agrostock.core.services.reconciliation import (
    adjustment_remission_number,
    build_count_items,
    complete_count,
    ensure_can_apply,
    ensure_editable,
    equalize_items,
    plan_adjustments,
    recalculate_items,
    set_physical_quantities,
)
from agrostock.core.services.remission_grouping import (
    RemissionGroup,
    filter_groups,
    group_by_remission,
)
from agrostock.core.services.theoretical_stock import (
    TheoreticalStock,
    compute_branch_theoretical,
    compute_theoretical_stock,
    find_baseline_count,
)

__all__ = [
    # Classification
    "IngestionResult",
    "RejectedMovement",
    "classify",
    "classify_all",
    "ingest_movements",
    "is_initial_marker",
    # FIFO Valuation
    "ValuationReport",
    "average_costs",
    "compute_all_positions",
    "compute_inventory_position",
    "summarize_by_product",
    # Theoretical Stock
    "TheoreticalStock",
    "compute_branch_theoretical",
    "compute_theoretical_stock",
    "find_baseline_count",
    # Reconciliation
    "adjustment_remission_number",
    "build_count_items",
    "complete_count",
    "ensure_can_apply",
    "ensure_editable",
    "equalize_items",
    "plan_adjustments",
    "recalculate_items",
    "set_physical_quantities",
    # Ledger
    "ClientType",
    "MovementLine",
    "RemissionGroup",
    "build_conversion",
    "build_inflow",
    "build_outflow",
    "build_transfer",
    "filter_groups",
    "group_by_remission",
    "place_at_index",
    # Import
    "ImportLayer",
    "ImportPlan",
    "ImportRow",
    "SkippedRow",
    "plan_import",
]
