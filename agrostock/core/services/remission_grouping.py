"""
Stock-log grouping.

Folds ledger rows into remission groups for display: one group per
remission number, and a single-row group for rows without one.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from agrostock.core.entities.movement import MovementType, StockMovement, as_utc
from agrostock.core.services.reconciliation import is_adjustment_remission

# Group types that override the type of the first row
_PAIRED_TYPES = (MovementType.TRANSFER, MovementType.CONVERSION)


@dataclass
class RemissionGroup:
    """Movements sharing one remission number."""

    key: str
    remission_number: str | None
    type: MovementType
    date: datetime
    branch_name: str | None = None
    provider_name: str | None = None
    comment: str | None = None
    items: list[StockMovement] = field(default_factory=list)

    @property
    def total_products(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> float:
        return sum(item.quantity for item in self.items)

    @property
    def is_single(self) -> bool:
        return self.remission_number is None

    def matches(self, term: str) -> bool:
        """Case-insensitive search over product, branch, remission, provider and comment."""
        needle = term.lower()
        for item in self.items:
            fields = (
                item.product_name,
                item.branch_name,
                item.remission_number,
                item.provider_name,
                item.comment,
            )
            if any(value and needle in value.lower() for value in fields):
                return True
        return False


def _item_order(movement: StockMovement) -> tuple:
    created = movement.created_at or movement.date
    return (movement.index_in_transaction, created)


def group_by_remission(movements: Iterable[StockMovement]) -> list[RemissionGroup]:
    """
    Group ledger rows by remission, newest group first.

    A group containing a transfer or conversion row takes that type; a
    count-adjustment remission is tagged as adjustment even though its
    rows are stored as inflow/outflow.
    """
    groups: dict[str, RemissionGroup] = {}

    for movement in movements:
        key = movement.remission_number or f"single-{movement.id}"
        group = groups.get(key)
        if group is None:
            group = RemissionGroup(
                key=key,
                remission_number=movement.remission_number or None,
                type=movement.type,
                date=movement.date,
                branch_name=movement.branch_name,
                provider_name=movement.provider_name,
                comment=movement.comment,
            )
            groups[key] = group

        group.items.append(movement)
        if movement.type in _PAIRED_TYPES:
            group.type = movement.type
        if is_adjustment_remission(movement.remission_number):
            group.type = MovementType.ADJUSTMENT

    for group in groups.values():
        group.items.sort(key=_item_order)

    return sorted(groups.values(), key=lambda g: g.date, reverse=True)


def filter_groups(
    groups: list[RemissionGroup],
    search: str | None = None,
    types: Iterable[MovementType] | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    branch_name: str | None = None,
) -> list[RemissionGroup]:
    """Apply the stock-log filters. Empty filters match everything."""
    date_from = as_utc(date_from) if date_from else None
    date_to = as_utc(date_to) if date_to else None
    wanted_types = set(types or ())
    result = []
    for group in groups:
        if search and not group.matches(search):
            continue
        if wanted_types and group.type not in wanted_types:
            continue
        if date_from and group.date < date_from:
            continue
        if date_to and group.date > date_to:
            continue
        if branch_name and group.branch_name != branch_name:
            continue
        result.append(group)
    return result
