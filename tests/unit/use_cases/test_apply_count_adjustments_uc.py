"""Unit tests for ApplyCountAdjustmentsUseCase."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from agrostock.application.use_cases import apply_count_adjustments as apply_module
from agrostock.application.use_cases.apply_count_adjustments import (
    ApplyCountAdjustmentsUseCase,
)
from agrostock.core.entities import CountStatus, InventoryCount, InventoryCountItem, MovementType
from agrostock.core.exceptions import CountNotFoundError, InvalidStateError, LedgerTooLargeError

COUNT_ID = "a1b2c3d4-aaaa-4bbb-8ccc-000000000001"


class FakeCountStore:
    """Count store with the conditional-update semantics of the real one."""

    def __init__(self, count: InventoryCount, items: list[InventoryCountItem]):
        self.count = count
        self.items = items
        self.posted: list = []

    async def get_count(self, count_id):
        return self.count if count_id == self.count.id else None

    async def get_items(self, count_id):
        return list(self.items)

    async def apply_count_adjustments(self, count_id, movements):
        if self.count.adjustments_applied or self.count.status != CountStatus.COMPLETED:
            return False
        await asyncio.sleep(0)
        self.count = self.count.model_copy(update={"adjustments_applied": True})
        self.posted.extend(movements)
        return True


@pytest.fixture
def count_store() -> FakeCountStore:
    count = InventoryCount(
        id=COUNT_ID,
        date=datetime(2024, 1, 31, tzinfo=UTC),
        branch_id="B1",
        branch_name="Sede Principal",
        status=CountStatus.COMPLETED,
    )
    items = [
        InventoryCountItem(count_id=COUNT_ID, product_id="P1", product_name="Urea", initial_quantity=10, physical_quantity=7),
        InventoryCountItem(count_id=COUNT_ID, product_id="P2", product_name="Cal", initial_quantity=10, physical_quantity=15),
        InventoryCountItem(count_id=COUNT_ID, product_id="P3", product_name="Zinc", initial_quantity=2, physical_quantity=2),
    ]
    return FakeCountStore(count, items)


@pytest.fixture
def use_case(count_store, mock_ledger_store, mock_catalog_store, make_movement):
    mock_ledger_store.list_all_movements.return_value = [
        make_movement("inflow", 5, 1, price=10, product_id="P1"),
        make_movement("inflow", 5, 2, price=20, product_id="P1"),
        make_movement("inflow", 5, 2, price=99, product_id="P1", branch_id="B2"),
    ]
    return ApplyCountAdjustmentsUseCase(
        count_store=count_store,
        ledger_store=mock_ledger_store,
        catalog_store=mock_catalog_store,
    )


class TestApplyCountAdjustmentsUseCase:
    async def test_emits_one_row_per_difference(self, use_case, count_store):
        result = await use_case.execute(COUNT_ID)

        assert result.remission_number == "AJUSTE-CORTE-a1b2c3d4"
        assert result.count.adjustments_applied is True
        assert [(m.product_id, m.type, m.quantity) for m in result.movements] == [
            ("P2", MovementType.INFLOW, 5),
            ("P1", MovementType.OUTFLOW, 3),
        ]
        assert count_store.posted == result.movements

    async def test_prices_at_branch_average_cost(self, use_case):
        result = await use_case.execute(COUNT_ID)
        prices = {m.product_id: m.price_at_transaction for m in result.movements}
        assert prices["P1"] == pytest.approx(15)
        assert prices["P2"] == 0

    async def test_second_apply_fails_without_duplicates(self, use_case, count_store):
        await use_case.execute(COUNT_ID)

        with pytest.raises(InvalidStateError, match="already applied"):
            await use_case.execute(COUNT_ID)
        assert len(count_store.posted) == 2

    async def test_concurrent_applies_post_once(self, use_case, count_store):
        results = await asyncio.gather(
            use_case.execute(COUNT_ID),
            use_case.execute(COUNT_ID),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, InvalidStateError)]
        assert len(failures) == 1
        assert len(count_store.posted) == 2

    async def test_requires_completed_count(self, use_case, count_store):
        count_store.count = count_store.count.model_copy(update={"status": CountStatus.IN_PROGRESS})
        with pytest.raises(InvalidStateError, match="completed"):
            await use_case.execute(COUNT_ID)
        assert count_store.posted == []

    async def test_lost_race_in_store(self, mock_ledger_store, mock_catalog_store, count_store):
        store = AsyncMock()
        store.get_count = AsyncMock(return_value=count_store.count)
        store.get_items = AsyncMock(return_value=count_store.items)
        store.apply_count_adjustments = AsyncMock(return_value=False)
        use_case = ApplyCountAdjustmentsUseCase(
            count_store=store, ledger_store=mock_ledger_store, catalog_store=mock_catalog_store
        )
        with pytest.raises(InvalidStateError):
            await use_case.execute(COUNT_ID)

    async def test_oversized_ledger_posts_nothing(self, use_case, count_store, mock_ledger_store):
        mock_ledger_store.list_all_movements.side_effect = LedgerTooLargeError(2)

        with pytest.raises(LedgerTooLargeError):
            await use_case.execute(COUNT_ID)

        assert count_store.posted == []
        assert count_store.count.adjustments_applied is False

    async def test_missing_count(self, use_case):
        with pytest.raises(CountNotFoundError):
            await use_case.execute("missing")

    async def test_lock_timeout(self, use_case):
        settings = MagicMock()
        settings.count.lock_timeout = 0.01
        lock = apply_module._apply_locks.setdefault(COUNT_ID, asyncio.Lock())
        await lock.acquire()
        try:
            with patch.object(apply_module, "get_settings", return_value=settings):
                with pytest.raises(InvalidStateError, match="in progress"):
                    await use_case.execute(COUNT_ID)
        finally:
            lock.release()

    async def test_lock_registry_is_emptied(self, use_case, count_store):
        await asyncio.gather(
            use_case.execute(COUNT_ID),
            use_case.execute(COUNT_ID),
            return_exceptions=True,
        )
        with pytest.raises(CountNotFoundError):
            await use_case.execute("missing")

        assert apply_module._apply_locks == {}
        assert not apply_module._apply_users
