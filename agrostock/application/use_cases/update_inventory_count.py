"""Inventory count editing: physical quantities, recalculation, equalize, complete."""

from agrostock.application.dto.requests import (
    EqualizeCountRequest,
    UpdatePhysicalQuantitiesRequest,
)
from agrostock.application.use_cases.inventory_counts import CountUseCase
from agrostock.config import get_logger
from agrostock.core.entities.inventory_count import CountWithItems
from agrostock.core.exceptions import ValidationError
from agrostock.core.services.reconciliation import (
    complete_count,
    ensure_editable,
    equalize_items,
    recalculate_items,
    set_physical_quantities,
)

logger = get_logger(__name__)


class UpdatePhysicalQuantitiesUseCase(CountUseCase):
    """Enter physical quantities while the count is in progress."""

    async def execute(self, request: UpdatePhysicalQuantitiesRequest) -> CountWithItems:
        """Execute update physical quantities use case."""
        count = await self._load_count(request.count_id)
        ensure_editable(count)

        store = await self._get_count_store()
        items = await store.get_items(request.count_id)
        items = set_physical_quantities(items, request.quantities)
        items = await store.save_items(request.count_id, items)

        header = {}
        if request.notes is not None:
            header["notes"] = request.notes
        if request.responsible is not None:
            header["responsible"] = request.responsible
        if header:
            count = await store.update_count(count.model_copy(update=header))

        logger.info(
            "count_quantities_updated",
            count_id=count.id,
            updated=len(request.quantities),
        )
        return CountWithItems(count=count, items=items)


class RecalculateCountUseCase(CountUseCase):
    """Refresh theoretical figures from the ledger, keeping physical quantities."""

    async def execute(self, count_id: str) -> CountWithItems:
        """Execute recalculate count use case."""
        count = await self._load_count(count_id)
        ensure_editable(count)

        theoretical = await self._branch_theoretical(count.branch_id, exclude_count_id=count_id)

        store = await self._get_count_store()
        items = await store.get_items(count_id)
        items = await store.save_items(count_id, recalculate_items(items, theoretical))

        logger.info("count_recalculated", count_id=count_id, items=len(items))
        return CountWithItems(count=count, items=items)


class EqualizeCountUseCase(CountUseCase):
    """Set every physical quantity to its theoretical quantity."""

    async def execute(self, request: EqualizeCountRequest) -> CountWithItems:
        """Execute equalize count use case."""
        if not request.confirm:
            raise ValidationError(
                "confirm",
                "equalizing overwrites entered physical quantities and must be confirmed",
                request.confirm,
            )

        count = await self._load_count(request.count_id)
        ensure_editable(count)

        store = await self._get_count_store()
        items = await store.get_items(request.count_id)
        items = await store.save_items(request.count_id, equalize_items(items))

        logger.info("count_equalized", count_id=count.id, items=len(items))
        return CountWithItems(count=count, items=items)


class CompleteCountUseCase(CountUseCase):
    """Freeze physical quantities: in_progress -> completed."""

    async def execute(self, count_id: str) -> CountWithItems:
        """Execute complete count use case."""
        count = await self._load_count(count_id)
        count = complete_count(count)

        store = await self._get_count_store()
        count = await store.update_count(count)
        items = await store.get_items(count_id)

        logger.info(
            "count_completed",
            count_id=count_id,
            differences=sum(1 for i in items if i.difference != 0),
        )
        return CountWithItems(count=count, items=items)
