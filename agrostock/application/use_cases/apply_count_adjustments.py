"""Apply Count Adjustments Use Case: post a completed count's differences."""

import asyncio
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime

from agrostock.application.use_cases.inventory_counts import CountUseCase
from agrostock.config import get_logger, get_settings
from agrostock.core.entities.inventory_count import InventoryCount
from agrostock.core.entities.movement import ClassifiedMovement, StockMovement
from agrostock.core.exceptions import InvalidStateError
from agrostock.core.services.classification import ingest_movements
from agrostock.core.services.fifo_valuation import (
    average_costs,
    compute_inventory_position,
)
from agrostock.core.services.reconciliation import (
    adjustment_remission_number,
    ensure_can_apply,
    plan_adjustments,
)

logger = get_logger(__name__)

# One in-flight apply per count id; an entry lives while someone holds or awaits it
_apply_locks: dict[str, asyncio.Lock] = {}
_apply_users: Counter[str] = Counter()


def reset_apply_locks() -> None:
    """Drop every per-count lock (for testing)."""
    _apply_locks.clear()
    _apply_users.clear()


def _release_slot(count_id: str) -> None:
    _apply_users[count_id] -= 1
    if _apply_users[count_id] <= 0:
        del _apply_users[count_id]
        _apply_locks.pop(count_id, None)


@dataclass
class ApplyAdjustmentsResult:
    """Result of applying a count."""

    count: InventoryCount
    movements: list[StockMovement]
    remission_number: str


class ApplyCountAdjustmentsUseCase(CountUseCase):
    """
    Emit one adjustment movement per item whose physical quantity differs
    from the theoretical one, then mark the count applied.

    Serialized per count id; the store's conditional update makes a
    concurrent or repeated apply fail without inserting rows.
    """

    async def execute(self, count_id: str) -> ApplyAdjustmentsResult:
        """Execute apply adjustments use case."""
        lock = _apply_locks.setdefault(count_id, asyncio.Lock())
        _apply_users[count_id] += 1
        try:
            timeout = get_settings().count.lock_timeout
            try:
                await asyncio.wait_for(lock.acquire(), timeout=timeout)
            except TimeoutError as e:
                raise InvalidStateError(
                    count_id, "locked", "another apply is in progress"
                ) from e

            try:
                return await self._apply(count_id)
            finally:
                lock.release()
        finally:
            _release_slot(count_id)

    async def _apply(self, count_id: str) -> ApplyAdjustmentsResult:
        count = await self._load_count(count_id)
        ensure_can_apply(count)

        store = await self._get_count_store()
        items = await store.get_items(count_id)
        unit_costs = await self._average_costs(count.branch_id, [i.product_id for i in items])

        movements = plan_adjustments(count, items, datetime.now(UTC), unit_costs)

        applied = await store.apply_count_adjustments(count_id, movements)
        if not applied:
            # Lost a race with another writer
            current = await self._load_count(count_id)
            raise InvalidStateError(
                count_id,
                current.status.value,
                "adjustments were already applied",
            )

        count = count.model_copy(update={"adjustments_applied": True})
        remission = adjustment_remission_number(count_id)
        logger.info(
            "count_adjustments_applied",
            count_id=count_id,
            remission_number=remission,
            movements=len(movements),
        )
        return ApplyAdjustmentsResult(
            count=count, movements=movements, remission_number=remission
        )

    async def _average_costs(
        self, branch_id: str, product_ids: list[str]
    ) -> dict[str, float]:
        """Current FIFO average cost of each product in the branch."""
        ledger = await self._get_ledger_store()
        ingestion = ingest_movements(await ledger.list_all_movements())

        wanted = set(product_ids)
        by_product: dict[str, list[ClassifiedMovement]] = defaultdict(list)
        for cm in ingestion.movements:
            product_id, movement_branch = cm.movement.pair_key
            if movement_branch == branch_id and product_id in wanted:
                by_product[product_id].append(cm)

        return average_costs(
            compute_inventory_position(by_product[product_id], product_id, branch_id)
            for product_id in wanted
        )
