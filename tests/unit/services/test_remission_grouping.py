"""Tests for stock-log grouping."""

from datetime import UTC, datetime

from agrostock.core.entities import MovementType
from agrostock.core.services.remission_grouping import filter_groups, group_by_remission


class TestGroupByRemission:
    def test_groups_by_remission_newest_first(self, make_movement):
        groups = group_by_remission(
            [
                make_movement("inflow", 1, 1, id="a", remission_number="R-1"),
                make_movement("inflow", 2, 1, id="b", remission_number="R-1", index_in_transaction=1),
                make_movement("outflow", 1, 5, id="c", remission_number="R-2"),
            ]
        )
        assert [g.remission_number for g in groups] == ["R-2", "R-1"]
        assert groups[1].total_products == 2
        assert groups[1].total_quantity == 3

    def test_rows_without_remission_are_single(self, make_movement):
        groups = group_by_remission(
            [make_movement("inflow", 1, 1, id="a"), make_movement("inflow", 1, 2, id="b")]
        )
        assert [g.key for g in groups] == ["single-b", "single-a"]
        assert all(g.is_single for g in groups)

    def test_items_ordered_by_index(self, make_movement):
        groups = group_by_remission(
            [
                make_movement("transfer", 3, 1, id="dest", remission_number="T-1", index_in_transaction=1),
                make_movement("transfer", -3, 1, id="orig", remission_number="T-1", index_in_transaction=0),
            ]
        )
        assert [m.id for m in groups[0].items] == ["orig", "dest"]

    def test_paired_type_wins(self, make_movement):
        groups = group_by_remission(
            [
                make_movement("inflow", 1, 1, remission_number="X-1"),
                make_movement("conversion", 2, 1, remission_number="X-1", index_in_transaction=1),
            ]
        )
        assert groups[0].type == MovementType.CONVERSION

    def test_adjustment_remission_is_tagged(self, make_movement):
        groups = group_by_remission(
            [
                make_movement("inflow", 1, 1, remission_number="AJUSTE-CORTE-12345678"),
                make_movement("outflow", 1, 1, remission_number="AJUSTE-CORTE-12345678"),
            ]
        )
        assert groups[0].type == MovementType.ADJUSTMENT


class TestFilterGroups:
    def _groups(self, make_movement):
        return group_by_remission(
            [
                make_movement(
                    "inflow", 1, 1, remission_number="FAC-100",
                    product_name="Urea", branch_name="Norte", provider_name="Agroinsumos SAS",
                ),
                make_movement(
                    "outflow", 1, 10, remission_number="VTA-7",
                    product_name="Cal Dolomita", branch_name="Sur",
                ),
            ]
        )

    def test_search_is_case_insensitive(self, make_movement):
        groups = filter_groups(self._groups(make_movement), search="agroINSUMOS")
        assert [g.remission_number for g in groups] == ["FAC-100"]

    def test_type_filter(self, make_movement):
        groups = filter_groups(self._groups(make_movement), types=[MovementType.OUTFLOW])
        assert [g.remission_number for g in groups] == ["VTA-7"]

    def test_date_range(self, make_movement):
        groups = filter_groups(
            self._groups(make_movement),
            date_from=datetime(2024, 1, 5, tzinfo=UTC),
            date_to=datetime(2024, 1, 31, tzinfo=UTC),
        )
        assert [g.remission_number for g in groups] == ["VTA-7"]

    def test_naive_date_bounds_read_as_utc(self, make_movement):
        groups = filter_groups(
            self._groups(make_movement),
            date_from=datetime(2024, 1, 1, 12, 30),
            date_to=datetime(2024, 1, 10, 12, 0),
        )
        assert [g.remission_number for g in groups] == ["VTA-7"]

    def test_branch_filter(self, make_movement):
        groups = filter_groups(self._groups(make_movement), branch_name="Norte")
        assert [g.remission_number for g in groups] == ["FAC-100"]

    def test_empty_filters_match_all(self, make_movement):
        assert len(filter_groups(self._groups(make_movement))) == 2
