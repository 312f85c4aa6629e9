"""Inventory count lifecycle: create, read, list and delete."""

from agrostock.application.dto.requests import CreateInventoryCountRequest
from agrostock.application.use_cases.record_movements import resolve_date
from agrostock.config import get_logger
from agrostock.core.entities.inventory_count import (
    CountWithItems,
    InventoryCount,
    ProductTheoreticalStock,
)
from agrostock.core.exceptions import BranchNotFoundError, CountNotFoundError
from agrostock.core.interfaces.catalog_store import ICatalogStore
from agrostock.core.interfaces.count_store import ICountStore
from agrostock.core.interfaces.ledger_store import ILedgerStore
from agrostock.core.services.classification import ingest_movements
from agrostock.core.services.reconciliation import (
    adjustment_remission_number,
    build_count_items,
)
from agrostock.core.services.theoretical_stock import compute_branch_theoretical

logger = get_logger(__name__)


class CountUseCase:
    """Store wiring and lookups shared by the inventory count use cases."""

    def __init__(
        self,
        count_store: ICountStore | None = None,
        ledger_store: ILedgerStore | None = None,
        catalog_store: ICatalogStore | None = None,
    ):
        self._count_store = count_store
        self._ledger_store = ledger_store
        self._catalog_store = catalog_store

    async def _get_count_store(self) -> ICountStore:
        if self._count_store is None:
            from agrostock.infrastructure.storage.sqlite import get_count_store

            self._count_store = await get_count_store()
        return self._count_store

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

    async def _load_count(self, count_id: str) -> InventoryCount:
        store = await self._get_count_store()
        count = await store.get_count(count_id)
        if count is None:
            raise CountNotFoundError(count_id)
        return count

    async def _branch_theoretical(
        self, branch_id: str, exclude_count_id: str | None = None
    ) -> list[ProductTheoreticalStock]:
        catalog = await self._get_catalog_store()
        products = await catalog.list_products()
        ledger = await self._get_ledger_store()
        ingestion = ingest_movements(await ledger.list_all_movements())
        store = await self._get_count_store()
        applied = await store.list_applied_counts(branch_id)
        return compute_branch_theoretical(
            products, branch_id, ingestion.movements, applied, exclude_count_id
        )


class CreateInventoryCountUseCase(CountUseCase):
    """Start a count with a theoretical snapshot of every product in the branch."""

    async def execute(self, request: CreateInventoryCountRequest) -> CountWithItems:
        """Execute create inventory count use case."""
        catalog = await self._get_catalog_store()
        branch = await catalog.get_branch(request.branch_id)
        if branch is None:
            raise BranchNotFoundError(request.branch_id)

        theoretical = await self._branch_theoretical(branch.id)
        items = build_count_items(theoretical, equalize=request.equalize)

        count = InventoryCount(
            date=resolve_date(request.date),
            branch_id=branch.id,
            branch_name=branch.name,
            responsible=request.responsible,
            notes=request.notes,
        )
        store = await self._get_count_store()
        count = await store.create_count(count, items)
        items = await store.get_items(count.id)  # type: ignore[arg-type]

        logger.info(
            "count_created",
            count_id=count.id,
            branch_id=branch.id,
            items=len(items),
            equalized=request.equalize,
        )
        return CountWithItems(count=count, items=items)


class GetInventoryCountUseCase(CountUseCase):
    """Fetch a count with its items."""

    async def execute(self, count_id: str) -> CountWithItems:
        count = await self._load_count(count_id)
        store = await self._get_count_store()
        items = await store.get_items(count_id)
        return CountWithItems(count=count, items=items)


class ListInventoryCountsUseCase(CountUseCase):
    """List counts, newest first."""

    async def execute(
        self, branch_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[InventoryCount]:
        store = await self._get_count_store()
        return await store.list_counts(branch_id=branch_id, limit=limit, offset=offset)


class DeleteInventoryCountUseCase(CountUseCase):
    """
    Delete a count and its items.

    Adjustment movements already posted by an applied count stay in the
    ledger; the divergence is logged.
    """

    async def execute(self, count_id: str) -> bool:
        """Execute delete inventory count use case."""
        count = await self._load_count(count_id)

        if count.adjustments_applied:
            logger.warning(
                "count_deleted_with_posted_adjustments",
                count_id=count_id,
                branch_id=count.branch_id,
                remission_number=adjustment_remission_number(count_id),
            )

        store = await self._get_count_store()
        deleted = await store.delete_count(count_id)
        logger.info("count_deleted", count_id=count_id, status=count.status.value)
        return deleted
