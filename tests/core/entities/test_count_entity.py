"""Unit tests for inventory count, valuation and invoice entities."""

from datetime import UTC, datetime

from agrostock.core.entities import (
    CostLayer,
    CountStatus,
    InventoryCount,
    InventoryCountItem,
    InventoryPosition,
    ProductTheoreticalStock,
    invoice_total,
)


class TestInventoryCountItem:
    """Derived quantities are always consistent."""

    def test_theoretical_and_difference(self):
        item = InventoryCountItem(
            product_id="P1",
            initial_quantity=10,
            inflow_quantity=5,
            outflow_quantity=3,
            physical_quantity=11,
        )
        assert item.theoretical_quantity == 12
        assert item.difference == -1

    def test_derived_fields_follow_edits(self):
        item = InventoryCountItem(product_id="P1", initial_quantity=4)
        updated = item.model_copy(update={"physical_quantity": 6})
        assert updated.difference == 2

    def test_derived_fields_are_serialized(self):
        item = InventoryCountItem(product_id="P1", initial_quantity=2, physical_quantity=2)
        data = item.model_dump()
        assert data["theoretical_quantity"] == 2
        assert data["difference"] == 0


class TestInventoryCount:
    def test_lifecycle_flags(self):
        count = InventoryCount(date=datetime(2024, 1, 10), branch_id="B1")
        assert count.status == CountStatus.IN_PROGRESS
        assert count.is_editable
        assert not count.can_apply

        completed = count.model_copy(update={"status": CountStatus.COMPLETED})
        assert not completed.is_editable
        assert completed.can_apply

        applied = completed.model_copy(update={"adjustments_applied": True})
        assert not applied.can_apply

    def test_naive_date_is_utc(self):
        count = InventoryCount(date=datetime(2024, 1, 10), branch_id="B1")
        assert count.date.tzinfo == UTC


class TestInventoryPosition:
    def test_average_cost(self):
        position = InventoryPosition(
            product_id="P1",
            branch_id="B1",
            quantity=12,
            total_value=78,
            cost_layers=[
                CostLayer(quantity=6, unit_cost=5, date=datetime(2024, 1, 1, tzinfo=UTC)),
                CostLayer(quantity=6, unit_cost=8, date=datetime(2024, 1, 3, tzinfo=UTC)),
            ],
        )
        assert position.average_cost == 6.5
        assert position.layer_count == 2
        assert not position.is_oversold

    def test_average_cost_without_stock(self):
        position = InventoryPosition(product_id="P1", branch_id="B1", quantity=-3, total_value=-36)
        assert position.average_cost == 0
        assert position.is_oversold


def test_product_theoretical_stock():
    stock = ProductTheoreticalStock(
        product_id="P1",
        initial=10,
        inflows=4,
        outflows=1,
        last_count_date=datetime(2024, 1, 10, tzinfo=UTC),
    )
    assert stock.theoretical == 13


def test_invoice_total():
    assert invoice_total(1000, 190, 25) == 1165
    assert invoice_total(100) == 100
