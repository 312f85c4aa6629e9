"""Tests for the FIFO valuation engine."""

import pytest

from agrostock.core.entities import Branch, Product
from agrostock.core.services.fifo_valuation import (
    average_costs,
    compute_all_positions,
    compute_inventory_position,
    summarize_by_product,
)


class TestComputeInventoryPosition:
    """FIFO behaviour for one (product, branch) pair."""

    def test_consumes_oldest_layer_first(self, make_movement):
        position = compute_inventory_position(
            [
                make_movement("inflow", 5, 1, price=10),
                make_movement("inflow", 5, 2, price=20),
                make_movement("outflow", 7, 3),
            ]
        )
        assert position.quantity == pytest.approx(3)
        assert position.consumed_value == pytest.approx(5 * 10 + 2 * 20)
        assert len(position.cost_layers) == 1
        assert position.cost_layers[0].quantity == pytest.approx(3)
        assert position.cost_layers[0].unit_cost == 20
        assert position.total_value == pytest.approx(60)

    def test_overdraw_goes_negative_at_movement_price(self, make_movement):
        position = compute_inventory_position(
            [
                make_movement("inflow", 5, 1, price=10),
                make_movement("outflow", 8, 2, price=12, id="out-1"),
            ]
        )
        assert position.quantity == pytest.approx(-3)
        assert position.total_value == pytest.approx(-36)
        assert position.cost_layers == []
        assert position.is_oversold

        assert len(position.warnings) == 1
        warning = position.warnings[0]
        assert warning.code == "STOCK_OVERSOLD"
        assert warning.movement_id == "out-1"
        assert warning.deficit == pytest.approx(3)
        assert warning.unit_price == 12

    def test_end_to_end_scenario(self, make_movement):
        position = compute_inventory_position(
            [
                make_movement("inflow", 10, 1, price=5),
                make_movement("outflow", 4, 2),
                make_movement("inflow", 6, 3, price=8),
            ],
            product_id="P1",
            branch_id="B1",
        )
        assert position.quantity == pytest.approx(12)
        assert [(layer.quantity, layer.unit_cost) for layer in position.cost_layers] == [(6, 5), (6, 8)]
        assert position.total_value == pytest.approx(78)
        assert position.average_cost == pytest.approx(6.5)

    def test_input_order_does_not_matter(self, make_movement):
        movements = [
            make_movement("inflow", 10, 1, price=5),
            make_movement("outflow", 4, 2),
            make_movement("inflow", 6, 3, price=8),
        ]
        forward = compute_inventory_position(movements)
        backward = compute_inventory_position(list(reversed(movements)))
        assert forward.model_dump() == backward.model_dump()

    def test_same_day_addition_processed_first(self, make_movement):
        position = compute_inventory_position(
            [
                make_movement("outflow", 3, 1),
                make_movement("inflow", 3, 1, price=4),
            ]
        )
        assert position.quantity == 0
        assert position.warnings == []

    def test_is_deterministic(self, make_movement):
        movements = [
            make_movement("inflow", 2.5, 1, price=3),
            make_movement("transfer", -1, 2),
            make_movement("conversion", 4, 3, price=7),
        ]
        first = compute_inventory_position(movements)
        second = compute_inventory_position(movements)
        assert first.model_dump() == second.model_dump()

    def test_signed_types(self, make_movement):
        position = compute_inventory_position(
            [
                make_movement("transfer", 5, 1, price=2),
                make_movement("conversion", -2, 2),
                make_movement("adjustment", 1, 3, price=2),
                make_movement("adjustment", 0, 4),
            ]
        )
        assert position.quantity == pytest.approx(4)
        assert position.total_value == pytest.approx(8)

    def test_filters_other_pairs(self, make_movement):
        position = compute_inventory_position(
            [
                make_movement("inflow", 5, 1, price=1),
                make_movement("inflow", 7, 1, price=1, product_id="P2"),
                make_movement("inflow", 9, 1, price=1, branch_id="B2"),
            ],
            product_id="P1",
            branch_id="B1",
        )
        assert position.quantity == 5

    def test_no_movements(self):
        position = compute_inventory_position([], product_id="P1", branch_id="B1")
        assert position.quantity == 0
        assert position.total_value == 0
        assert position.cost_layers == []
        assert position.average_cost == 0

    def test_zero_quantity_inflow_adds_no_layer(self, make_movement):
        position = compute_inventory_position([make_movement("inflow", 0, 1, price=5)])
        assert position.cost_layers == []

    def test_fractional_quantities_exhaust_layer(self, make_movement):
        position = compute_inventory_position(
            [
                make_movement("inflow", 0.1, 1, price=10),
                make_movement("inflow", 0.2, 1, price=10),
                make_movement("outflow", 0.3, 2),
            ]
        )
        assert position.cost_layers == []
        assert position.warnings == []
        assert position.quantity == pytest.approx(0)


class TestComputeAllPositions:
    def test_includes_zero_movement_pairs(self, make_movement, sample_products, sample_branches):
        report = compute_all_positions(
            sample_products,
            sample_branches,
            [make_movement("inflow", 5, 1, price=10)],
        )
        assert len(report.positions) == 4
        assert report.get("P1", "B1").quantity == 5
        assert report.get("P1", "B1").product_name == "Abono Triple 15"
        assert report.get("P1", "B1").branch_name == "Sede Principal"
        assert report.get("P2", "B2").quantity == 0

    def test_unknown_pairs_are_skipped(self, make_movement, sample_products, sample_branches):
        report = compute_all_positions(
            sample_products,
            sample_branches,
            [make_movement("inflow", 5, 1, product_id="GONE")],
        )
        assert report.skipped == 1
        assert all(p.quantity == 0 for p in report.positions)

    def test_rejected_records_are_reported(self, sample_products, sample_branches):
        report = compute_all_positions(
            sample_products,
            sample_branches,
            [
                {
                    "product_id": "P1",
                    "branch_id": "B1",
                    "type": "inflow",
                    "quantity": "lots",
                    "date": "2024-01-01",
                }
            ],
        )
        assert len(report.rejected) == 1
        assert report.get("P1", "B1").quantity == 0

    def test_oversold(self, make_movement, sample_products, sample_branches):
        report = compute_all_positions(
            sample_products,
            sample_branches,
            [make_movement("outflow", 2, 1, price=3, product_id="P2", branch_id="B2")],
        )
        assert [(p.product_id, p.branch_id) for p in report.oversold] == [("P2", "B2")]


class TestSummaries:
    def test_summarize_by_product_sorted_by_name(self, make_movement):
        products = [Product(id="P2", name="zinc"), Product(id="P1", name="Abono")]
        branches = [Branch(id="B1", name="A"), Branch(id="B2", name="B")]
        report = compute_all_positions(
            products,
            branches,
            [
                make_movement("inflow", 2, 1, price=10),
                make_movement("inflow", 2, 1, price=20, branch_id="B2"),
            ],
        )
        summaries = summarize_by_product(report.positions, products)
        assert [s.product_name for s in summaries] == ["Abono", "zinc"]
        assert summaries[0].total_quantity == 4
        assert summaries[0].total_value == 60
        assert summaries[0].average_cost == 15
        assert len(summaries[0].branches) == 2

    def test_average_costs(self, make_movement):
        position = compute_inventory_position(
            [make_movement("inflow", 4, 1, price=2.5)], product_id="P1", branch_id="B1"
        )
        assert average_costs([position]) == {"P1": 2.5}
