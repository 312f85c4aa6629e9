"""Import Inventory Use Case: bulk initial stock from parsed spreadsheet rows."""

from dataclasses import dataclass, field

from agrostock.application.dto.requests import ImportInventoryRequest
from agrostock.application.use_cases.record_movements import resolve_date
from agrostock.config import get_logger
from agrostock.core.entities.movement import StockMovement
from agrostock.core.interfaces.catalog_store import ICatalogStore
from agrostock.core.interfaces.ledger_store import ILedgerStore
from agrostock.core.services.inventory_import import (
    IMPORT_PREFIX,
    ImportLayer,
    ImportRow,
    SkippedRow,
    plan_import,
)

logger = get_logger(__name__)


@dataclass
class ImportInventoryResult:
    """Result of an inventory import."""

    movements: list[StockMovement] = field(default_factory=list)
    remissions: list[str] = field(default_factory=list)
    imported_rows: int = 0
    skipped: list[SkippedRow] = field(default_factory=list)


class ImportInventoryUseCase:
    """Resolve rows by name and insert one inflow remission per branch."""

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        catalog_store: ICatalogStore | None = None,
    ):
        self._ledger_store = ledger_store
        self._catalog_store = catalog_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from agrostock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_catalog_store(self) -> ICatalogStore:
        if self._catalog_store is None:
            from agrostock.infrastructure.storage.sqlite import get_catalog_store

            self._catalog_store = await get_catalog_store()
        return self._catalog_store

    async def execute(self, request: ImportInventoryRequest) -> ImportInventoryResult:
        """Execute import inventory use case."""
        imported_at = resolve_date(request.date)
        logger.info("inventory_import_started", rows=len(request.rows))

        catalog = await self._get_catalog_store()
        products = await catalog.list_products()
        branches = await catalog.list_branches()

        ledger = await self._get_ledger_store()
        prefix = f"{IMPORT_PREFIX}-{imported_at.date().isoformat()}-"
        existing = await ledger.list_remission_numbers(prefix)

        rows = [
            ImportRow(
                product_name=row.product_name,
                branch_name=row.branch_name,
                quantity=row.quantity,
                unit_cost=row.unit_cost,
                total_value=row.total_value,
                layers=[
                    ImportLayer(layer.quantity, layer.unit_cost) for layer in row.layers
                ],
            )
            for row in request.rows
        ]
        plan = plan_import(
            rows, products, branches, imported_at, first_number=len(existing) + 1
        )

        movements: list[StockMovement] = []
        for remission in plan.remissions:
            group = [m for m in plan.movements if m.remission_number == remission]
            movements.extend(await ledger.add_movements(group))

        logger.info(
            "inventory_import_complete",
            imported=plan.imported_rows,
            skipped=len(plan.skipped),
            remissions=plan.remissions,
        )
        return ImportInventoryResult(
            movements=movements,
            remissions=plan.remissions,
            imported_rows=plan.imported_rows,
            skipped=plan.skipped,
        )
