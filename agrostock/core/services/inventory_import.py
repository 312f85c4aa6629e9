"""
Bulk inventory import.

Turns already-parsed spreadsheet rows into initial-balance inflow
movements, one remission per branch. Rows are resolved to products and
branches by exact, case-insensitive name.
"""

from dataclasses import dataclass, field
from datetime import datetime

from agrostock.config import get_logger
from agrostock.core.entities.catalog import Branch, Product
from agrostock.core.entities.movement import MovementType, StockMovement

logger = get_logger(__name__)

IMPORT_PREFIX = "IMPORT"
IMPORT_PROVIDER = "Inventario Inicial"


@dataclass
class ImportLayer:
    """One FIFO layer declared for an imported row."""

    quantity: float
    unit_cost: float


@dataclass
class ImportRow:
    """A parsed spreadsheet row."""

    product_name: str
    branch_name: str
    quantity: float
    unit_cost: float | None = None
    total_value: float | None = None
    layers: list[ImportLayer] = field(default_factory=list)

    @property
    def unit_price(self) -> float:
        if self.unit_cost is not None:
            return self.unit_cost
        if self.total_value and self.quantity > 0:
            return self.total_value / self.quantity
        return 0.0


@dataclass
class SkippedRow:
    row: ImportRow
    reason: str


@dataclass
class ImportPlan:
    """Movements to insert, grouped by remission, plus skipped rows."""

    movements: list[StockMovement] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)
    remissions: list[str] = field(default_factory=list)
    imported_rows: int = 0


def _match_key(name: str | None) -> str:
    return (name or "").strip().casefold()


def import_remission_number(imported_at: datetime, number: int) -> str:
    return f"{IMPORT_PREFIX}-{imported_at.date().isoformat()}-{number}"


def import_comment(imported_at: datetime) -> str:
    # Must keep the initial-balance marker so rows fold into "initial"
    return f"Inventario inicial - Importación masiva {imported_at.date().isoformat()}"


def plan_import(
    rows: list[ImportRow],
    products: list[Product],
    branches: list[Branch],
    imported_at: datetime,
    first_number: int = 1,
) -> ImportPlan:
    """
    Resolve rows and build the import movements.

    Rows with a zero or negative quantity, a missing name, or a name that
    does not resolve are skipped and reported. A row with explicit layers
    becomes one inflow row per layer; otherwise a single row priced at
    unit_cost, or total_value / quantity.

    Args:
        rows: Parsed rows.
        products: Catalog products.
        branches: Catalog branches.
        imported_at: Date of every emitted row.
        first_number: Sequence number of the first remission.

    Returns:
        ImportPlan.
    """
    products_by_name = {_match_key(p.name): p for p in products}
    branches_by_name = {_match_key(b.name): b for b in branches}

    plan = ImportPlan()
    by_branch: dict[str, list[tuple[ImportRow, Product]]] = {}
    branch_lookup: dict[str, Branch] = {}

    for row in rows:
        if not _match_key(row.product_name) or not _match_key(row.branch_name):
            plan.skipped.append(SkippedRow(row, "missing name"))
            continue
        if row.quantity == 0:
            plan.skipped.append(SkippedRow(row, "quantity is 0"))
            continue
        if row.quantity < 0:
            plan.skipped.append(SkippedRow(row, "negative quantity"))
            continue

        product = products_by_name.get(_match_key(row.product_name))
        if product is None:
            plan.skipped.append(SkippedRow(row, "product not found"))
            continue
        branch = branches_by_name.get(_match_key(row.branch_name))
        if branch is None:
            plan.skipped.append(SkippedRow(row, "branch not found"))
            continue

        by_branch.setdefault(branch.id, []).append((row, product))
        branch_lookup[branch.id] = branch

    comment = import_comment(imported_at)
    for offset, (branch_id, branch_rows) in enumerate(by_branch.items()):
        branch = branch_lookup[branch_id]
        remission = import_remission_number(imported_at, first_number + offset)
        plan.remissions.append(remission)

        index = 0
        for row, product in branch_rows:
            layers = [layer for layer in row.layers if layer.quantity > 0]
            if not layers:
                layers = [ImportLayer(quantity=row.quantity, unit_cost=row.unit_price)]
            for layer in layers:
                plan.movements.append(
                    StockMovement(
                        product_id=product.id,
                        product_name=product.name,
                        branch_id=branch.id,
                        branch_name=branch.name,
                        type=MovementType.INFLOW,
                        quantity=layer.quantity,
                        price_at_transaction=layer.unit_cost,
                        date=imported_at,
                        remission_number=remission,
                        index_in_transaction=index,
                        provider_name=IMPORT_PROVIDER,
                        comment=comment,
                    )
                )
                index += 1
            plan.imported_rows += 1

    if plan.skipped:
        logger.warning(
            "import_rows_skipped",
            skipped=len(plan.skipped),
            reasons=sorted({s.reason for s in plan.skipped}),
        )
    return plan
