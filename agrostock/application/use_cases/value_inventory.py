"""Inventory valuation and theoretical stock queries."""

from dataclasses import dataclass, field

from agrostock.config import get_logger
from agrostock.core.entities.inventory_count import ProductTheoreticalStock
from agrostock.core.entities.valuation import ProductSummary
from agrostock.core.exceptions import BranchNotFoundError
from agrostock.core.interfaces.catalog_store import ICatalogStore
from agrostock.core.interfaces.count_store import ICountStore
from agrostock.core.interfaces.ledger_store import ILedgerStore
from agrostock.core.services.classification import ingest_movements
from agrostock.core.services.fifo_valuation import (
    ValuationReport,
    compute_all_positions,
    summarize_by_product,
)
from agrostock.core.services.theoretical_stock import compute_branch_theoretical

logger = get_logger(__name__)


@dataclass
class InventoryValuationResult:
    """Positions for every product x branch pair plus per-product totals."""

    report: ValuationReport
    summaries: list[ProductSummary] = field(default_factory=list)

    @property
    def total_value(self) -> float:
        return sum(p.total_value for p in self.report.positions)


class ValueInventoryUseCase:
    """FIFO valuation of the whole ledger, or of one branch."""

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

    async def execute(self, branch_id: str | None = None) -> InventoryValuationResult:
        """Execute inventory valuation use case."""
        catalog = await self._get_catalog_store()
        products = await catalog.list_products()
        branches = await catalog.list_branches()
        if branch_id is not None:
            branches = [b for b in branches if b.id == branch_id]
            if not branches:
                raise BranchNotFoundError(branch_id)

        ledger = await self._get_ledger_store()
        movements = await ledger.list_all_movements()

        report = compute_all_positions(products, branches, movements)

        if report.skipped and branch_id is None:
            logger.warning("movements_skipped", count=report.skipped)
        for position in report.oversold:
            logger.warning(
                "stock_oversold",
                product_id=position.product_id,
                branch_id=position.branch_id,
                quantity=position.quantity,
                total_value=round(position.total_value, 2),
            )

        summaries = summarize_by_product(report.positions, products)
        logger.info(
            "inventory_valued",
            positions=len(report.positions),
            rejected=len(report.rejected),
            oversold=len(report.oversold),
        )
        return InventoryValuationResult(report=report, summaries=summaries)


class BranchTheoreticalStockUseCase:
    """Theoretical stock of every product in a branch."""

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        catalog_store: ICatalogStore | None = None,
        count_store: ICountStore | None = None,
    ):
        self._ledger_store = ledger_store
        self._catalog_store = catalog_store
        self._count_store = count_store

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

    async def _get_count_store(self) -> ICountStore:
        if self._count_store is None:
            from agrostock.infrastructure.storage.sqlite import get_count_store

            self._count_store = await get_count_store()
        return self._count_store

    async def execute(
        self, branch_id: str, exclude_count_id: str | None = None
    ) -> list[ProductTheoreticalStock]:
        """Execute theoretical stock use case."""
        catalog = await self._get_catalog_store()
        if await catalog.get_branch(branch_id) is None:
            raise BranchNotFoundError(branch_id)
        products = await catalog.list_products()

        ledger = await self._get_ledger_store()
        ingestion = ingest_movements(await ledger.list_all_movements())

        count_store = await self._get_count_store()
        applied = await count_store.list_applied_counts(branch_id)

        return compute_branch_theoretical(
            products, branch_id, ingestion.movements, applied, exclude_count_id
        )
