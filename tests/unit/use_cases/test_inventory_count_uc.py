"""Unit tests for the inventory count use cases."""

import math
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from agrostock.application.dto.requests import (
    CreateInventoryCountRequest,
    EqualizeCountRequest,
    UpdatePhysicalQuantitiesRequest,
)
from agrostock.application.use_cases.inventory_counts import (
    CreateInventoryCountUseCase,
    DeleteInventoryCountUseCase,
    GetInventoryCountUseCase,
    ListInventoryCountsUseCase,
)
from agrostock.application.use_cases.update_inventory_count import (
    CompleteCountUseCase,
    EqualizeCountUseCase,
    RecalculateCountUseCase,
    UpdatePhysicalQuantitiesUseCase,
)
from agrostock.core.entities import CountStatus, InventoryCount, InventoryCountItem
from agrostock.core.exceptions import (
    BranchNotFoundError,
    CountNotFoundError,
    InvalidStateError,
    LedgerTooLargeError,
    ValidationError,
)


@pytest.fixture
def draft_count() -> InventoryCount:
    return InventoryCount(
        id="count-0001",
        date=datetime(2024, 1, 31, tzinfo=UTC),
        branch_id="B1",
        branch_name="Sede Principal",
    )


@pytest.fixture
def count_items() -> list[InventoryCountItem]:
    return [
        InventoryCountItem(
            count_id="count-0001", product_id="P2", product_name="Cal Dolomita",
            initial_quantity=4, physical_quantity=0,
        ),
        InventoryCountItem(
            count_id="count-0001", product_id="P1", product_name="Urea 46%",
            initial_quantity=10, physical_quantity=7,
        ),
    ]


@pytest.fixture
def mock_count_store(draft_count, count_items):
    store = AsyncMock()
    store.get_count = AsyncMock(return_value=draft_count)
    store.get_items = AsyncMock(return_value=count_items)
    store.save_items = AsyncMock(side_effect=lambda count_id, items: items)
    store.update_count = AsyncMock(side_effect=lambda count: count)
    store.create_count = AsyncMock(
        side_effect=lambda count, items: count.model_copy(update={"id": "count-0002"})
    )
    store.list_applied_counts = AsyncMock(return_value=[])
    store.list_counts = AsyncMock(return_value=[draft_count])
    store.delete_count = AsyncMock(return_value=True)
    return store


@pytest.fixture
def wired(mock_count_store, mock_ledger_store, mock_catalog_store):
    return {
        "count_store": mock_count_store,
        "ledger_store": mock_ledger_store,
        "catalog_store": mock_catalog_store,
    }


class TestCreateInventoryCountUseCase:
    async def test_snapshots_theoretical_stock(self, wired, mock_count_store, mock_ledger_store, make_movement):
        mock_ledger_store.list_all_movements.return_value = [
            make_movement("inflow", 8, 2, product_id="P1"),
            make_movement("outflow", 3, 4, product_id="P1"),
            make_movement("inflow", 99, 4, product_id="P1", branch_id="B2"),
        ]
        use_case = CreateInventoryCountUseCase(**wired)

        await use_case.execute(
            CreateInventoryCountRequest(branch_id="B1", date="2024-01-31", responsible="Ana")
        )

        count, items = mock_count_store.create_count.await_args.args
        assert count.branch_name == "Sede Principal"
        assert count.status == CountStatus.IN_PROGRESS
        assert count.responsible == "Ana"
        by_product = {i.product_id: i for i in items}
        assert by_product["P1"].theoretical_quantity == 5
        assert by_product["P1"].physical_quantity == 0
        assert by_product["P2"].theoretical_quantity == 0
        mock_count_store.list_applied_counts.assert_awaited_once_with("B1")

    async def test_equalize_on_create(self, wired, mock_count_store, mock_ledger_store, make_movement):
        mock_ledger_store.list_all_movements.return_value = [make_movement("inflow", 8, 2)]
        await CreateInventoryCountUseCase(**wired).execute(
            CreateInventoryCountRequest(branch_id="B1", equalize=True)
        )
        _, items = mock_count_store.create_count.await_args.args
        assert all(i.difference == 0 for i in items)

    async def test_snapshot_skips_malformed_rows(self, wired, mock_count_store, mock_ledger_store, make_movement):
        mock_ledger_store.list_all_movements.return_value = [
            make_movement("inflow", 8, 2),
            make_movement("inflow", math.nan, 3),
        ]
        await CreateInventoryCountUseCase(**wired).execute(
            CreateInventoryCountRequest(branch_id="B1")
        )
        _, items = mock_count_store.create_count.await_args.args
        assert {i.product_id: i.theoretical_quantity for i in items}["P1"] == 8

    async def test_oversized_ledger_creates_nothing(self, wired, mock_count_store, mock_ledger_store):
        mock_ledger_store.list_all_movements.side_effect = LedgerTooLargeError(2)
        with pytest.raises(LedgerTooLargeError):
            await CreateInventoryCountUseCase(**wired).execute(
                CreateInventoryCountRequest(branch_id="B1")
            )
        mock_count_store.create_count.assert_not_awaited()

    async def test_unknown_branch(self, wired):
        with pytest.raises(BranchNotFoundError):
            await CreateInventoryCountUseCase(**wired).execute(
                CreateInventoryCountRequest(branch_id="B9")
            )


class TestReadUseCases:
    async def test_get_with_items(self, wired, count_items):
        result = await GetInventoryCountUseCase(**wired).execute("count-0001")
        assert result.count.id == "count-0001"
        assert result.items == count_items

    async def test_get_missing(self, wired, mock_count_store):
        mock_count_store.get_count.return_value = None
        with pytest.raises(CountNotFoundError):
            await GetInventoryCountUseCase(**wired).execute("nope")

    async def test_list(self, wired, mock_count_store):
        counts = await ListInventoryCountsUseCase(**wired).execute(branch_id="B1")
        assert len(counts) == 1
        mock_count_store.list_counts.assert_awaited_once_with(branch_id="B1", limit=100, offset=0)


class TestEditUseCases:
    async def test_update_physical_quantities(self, wired, mock_count_store):
        result = await UpdatePhysicalQuantitiesUseCase(**wired).execute(
            UpdatePhysicalQuantitiesRequest(count_id="count-0001", quantities={"P2": 6}, notes="bodega 2")
        )
        by_product = {i.product_id: i for i in result.items}
        assert by_product["P2"].physical_quantity == 6
        assert by_product["P2"].difference == 2
        assert result.count.notes == "bodega 2"
        mock_count_store.save_items.assert_awaited_once()

    async def test_update_unknown_product(self, wired):
        with pytest.raises(ValidationError):
            await UpdatePhysicalQuantitiesUseCase(**wired).execute(
                UpdatePhysicalQuantitiesRequest(count_id="count-0001", quantities={"P9": 1})
            )

    async def test_completed_count_rejects_edits(self, wired, mock_count_store, draft_count):
        mock_count_store.get_count.return_value = draft_count.model_copy(
            update={"status": CountStatus.COMPLETED}
        )
        with pytest.raises(InvalidStateError):
            await UpdatePhysicalQuantitiesUseCase(**wired).execute(
                UpdatePhysicalQuantitiesRequest(count_id="count-0001", quantities={"P1": 1})
            )
        mock_count_store.save_items.assert_not_awaited()

    async def test_recalculate_keeps_physical(self, wired, mock_ledger_store, make_movement):
        mock_ledger_store.list_all_movements.return_value = [
            make_movement("inflow", 10, 2, product_id="P1", comment="Inventario inicial"),
            make_movement("inflow", 5, 20, product_id="P1"),
        ]
        result = await RecalculateCountUseCase(**wired).execute("count-0001")

        urea = next(i for i in result.items if i.product_id == "P1")
        assert urea.initial_quantity == 10
        assert urea.inflow_quantity == 5
        assert urea.physical_quantity == 7

    async def test_equalize_requires_confirmation(self, wired, mock_count_store):
        with pytest.raises(ValidationError):
            await EqualizeCountUseCase(**wired).execute(EqualizeCountRequest(count_id="count-0001"))
        mock_count_store.save_items.assert_not_awaited()

    async def test_equalize(self, wired):
        result = await EqualizeCountUseCase(**wired).execute(
            EqualizeCountRequest(count_id="count-0001", confirm=True)
        )
        assert all(i.difference == 0 for i in result.items)

    async def test_complete(self, wired, mock_count_store):
        result = await CompleteCountUseCase(**wired).execute("count-0001")
        assert result.count.status == CountStatus.COMPLETED
        saved = mock_count_store.update_count.await_args.args[0]
        assert saved.status == CountStatus.COMPLETED

    async def test_complete_twice(self, wired, mock_count_store, draft_count):
        mock_count_store.get_count.return_value = draft_count.model_copy(
            update={"status": CountStatus.COMPLETED}
        )
        with pytest.raises(InvalidStateError):
            await CompleteCountUseCase(**wired).execute("count-0001")


class TestDeleteInventoryCountUseCase:
    async def test_delete(self, wired, mock_count_store):
        assert await DeleteInventoryCountUseCase(**wired).execute("count-0001") is True
        mock_count_store.delete_count.assert_awaited_once_with("count-0001")

    async def test_delete_applied_count_keeps_ledger(self, wired, mock_count_store, mock_ledger_store, draft_count):
        mock_count_store.get_count.return_value = draft_count.model_copy(
            update={"status": CountStatus.COMPLETED, "adjustments_applied": True}
        )
        assert await DeleteInventoryCountUseCase(**wired).execute("count-0001") is True
        mock_ledger_store.delete_remission.assert_not_awaited()

    async def test_delete_missing(self, wired, mock_count_store):
        mock_count_store.get_count.return_value = None
        with pytest.raises(CountNotFoundError):
            await DeleteInventoryCountUseCase(**wired).execute("nope")
