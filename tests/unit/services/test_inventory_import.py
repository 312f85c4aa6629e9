"""Tests for bulk inventory import planning."""

from datetime import UTC, datetime

import pytest

from agrostock.core.entities import Branch, MovementType, Product
from agrostock.core.services.classification import is_initial_marker
from agrostock.core.services.fifo_valuation import compute_inventory_position
from agrostock.core.services.inventory_import import (
    IMPORT_PROVIDER,
    ImportLayer,
    ImportRow,
    plan_import,
)

IMPORTED_AT = datetime(2024, 6, 1, 15, 0, tzinfo=UTC)


@pytest.fixture
def products() -> list[Product]:
    return [Product(id="P1", name="Urea 46%"), Product(id="P2", name="Cal Dolomita")]


@pytest.fixture
def branches() -> list[Branch]:
    return [Branch(id="B1", name="Sede Principal"), Branch(id="B2", name="Sede Norte")]


class TestPlanImport:
    def test_one_remission_per_branch(self, products, branches):
        plan = plan_import(
            [
                ImportRow("urea 46%", "Sede Principal", 10, unit_cost=5),
                ImportRow("Cal Dolomita", "sede norte", 4, total_value=100),
                ImportRow("  CAL DOLOMITA ", "Sede Principal", 2, unit_cost=20),
            ],
            products,
            branches,
            IMPORTED_AT,
        )
        assert plan.remissions == ["IMPORT-2024-06-01-1", "IMPORT-2024-06-01-2"]
        assert plan.imported_rows == 3
        assert plan.skipped == []

        principal = [m for m in plan.movements if m.remission_number == "IMPORT-2024-06-01-1"]
        assert [m.index_in_transaction for m in principal] == [0, 1]
        assert {m.branch_id for m in principal} == {"B1"}

        norte = [m for m in plan.movements if m.branch_id == "B2"][0]
        assert norte.price_at_transaction == 25

        assert all(m.type == MovementType.INFLOW for m in plan.movements)
        assert all(m.provider_name == IMPORT_PROVIDER for m in plan.movements)
        assert all(is_initial_marker(m.comment) for m in plan.movements)
        assert all(m.date == IMPORTED_AT for m in plan.movements)

    def test_first_number_continues_sequence(self, products, branches):
        plan = plan_import(
            [ImportRow("Urea 46%", "Sede Principal", 1)], products, branches, IMPORTED_AT, first_number=3
        )
        assert plan.remissions == ["IMPORT-2024-06-01-3"]

    @pytest.mark.parametrize(
        ("row", "reason"),
        [
            (ImportRow("Urea 46%", "Sede Principal", 0), "quantity is 0"),
            (ImportRow("Urea 46%", "Sede Principal", -2), "negative quantity"),
            (ImportRow("Abono X", "Sede Principal", 1), "product not found"),
            (ImportRow("Urea 46%", "Sede Sur", 1), "branch not found"),
            (ImportRow("", "Sede Principal", 1), "missing name"),
        ],
    )
    def test_skipped_rows(self, products, branches, row, reason):
        plan = plan_import([row], products, branches, IMPORTED_AT)
        assert plan.movements == []
        assert plan.remissions == []
        assert [s.reason for s in plan.skipped] == [reason]

    def test_explicit_layers_keep_fifo_order(self, products, branches):
        plan = plan_import(
            [
                ImportRow(
                    "Urea 46%", "Sede Principal", 8,
                    layers=[ImportLayer(5, 10), ImportLayer(3, 12)],
                )
            ],
            products,
            branches,
            IMPORTED_AT,
        )
        assert [(m.quantity, m.price_at_transaction) for m in plan.movements] == [(5, 10), (3, 12)]
        assert plan.imported_rows == 1

        position = compute_inventory_position(plan.movements)
        assert [layer.unit_cost for layer in position.cost_layers] == [10, 12]
        assert position.total_value == 86


def test_unit_price_fallbacks():
    assert ImportRow("a", "b", 4, unit_cost=3).unit_price == 3
    assert ImportRow("a", "b", 4, total_value=10).unit_price == 2.5
    assert ImportRow("a", "b", 4).unit_price == 0.0
