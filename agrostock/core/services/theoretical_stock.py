"""
Theoretical stock calculator.

Decomposes the stock of a product at a branch into the balance carried
from the last applied inventory count (initial), and the additions and
subtractions recorded since then.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from agrostock.core.entities.catalog import Product, sort_by_name
from agrostock.core.entities.inventory_count import (
    InventoryCount,
    ProductTheoreticalStock,
)
from agrostock.core.entities.movement import ClassifiedMovement, StockMovement
from agrostock.core.services.classification import classify_all, is_initial_marker

# lastCountDate when a branch has never applied a count
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass
class TheoreticalStock:
    """Stock decomposition for one (product, branch) pair."""

    initial: float = 0.0
    inflows: float = 0.0
    outflows: float = 0.0
    last_count_date: datetime = EPOCH
    baseline_count_id: str | None = None

    @property
    def theoretical(self) -> float:
        return self.initial + self.inflows - self.outflows


def find_baseline_count(
    counts: Iterable[InventoryCount],
    branch_id: str | None,
    exclude_count_id: str | None = None,
) -> InventoryCount | None:
    """
    Find the most recent applied count of a branch.

    Args:
        counts: Candidate counts; unapplied ones are ignored.
        branch_id: Branch to match, or None when counts are pre-filtered.
        exclude_count_id: Count being recalculated, never its own baseline.
    """
    candidates = [
        c
        for c in counts
        if c.adjustments_applied
        and (branch_id is None or c.branch_id == branch_id)
        and (exclude_count_id is None or c.id != exclude_count_id)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda c: c.date)


def _accumulate(
    classified: Iterable[ClassifiedMovement],
    baseline: InventoryCount | None,
) -> TheoreticalStock:
    stock = TheoreticalStock()
    if baseline is not None:
        stock.last_count_date = baseline.date
        stock.baseline_count_id = baseline.id

    for cm in classified:
        before_baseline = cm.date <= stock.last_count_date
        bootstrap = baseline is None and is_initial_marker(cm.movement.comment)

        if before_baseline or bootstrap:
            stock.initial += cm.signed_quantity
        elif cm.is_addition:
            stock.inflows += cm.quantity
        else:
            stock.outflows += cm.quantity

    return stock


def compute_theoretical_stock(
    movements: Iterable[StockMovement | ClassifiedMovement],
    applied_counts: Iterable[InventoryCount],
    exclude_count_id: str | None = None,
    branch_id: str | None = None,
) -> TheoreticalStock:
    """
    Compute initial, inflows, outflows and theoretical for one pair.

    Movements dated on or before the baseline count fold into initial.
    Before any count has been applied, movements whose comment marks an
    initial balance fold into initial as well. Everything else counts as
    an inflow or an outflow.

    Args:
        movements: Movements of one (product, branch) pair.
        applied_counts: Counts of the branch; only applied ones matter.
        exclude_count_id: Count being recalculated.
        branch_id: When given, restricts both movements and counts.

    Returns:
        TheoreticalStock for the pair.
    """
    classified = classify_all(movements)
    if branch_id is not None:
        classified = [cm for cm in classified if cm.movement.pair_key[1] == branch_id]

    baseline = find_baseline_count(applied_counts, branch_id, exclude_count_id)
    return _accumulate(classified, baseline)


def compute_branch_theoretical(
    products: list[Product],
    branch_id: str,
    movements: Iterable[StockMovement | ClassifiedMovement],
    counts: Iterable[InventoryCount],
    exclude_count_id: str | None = None,
) -> list[ProductTheoreticalStock]:
    """Theoretical stock of every product in a branch, sorted by product name."""
    baseline = find_baseline_count(counts, branch_id, exclude_count_id)

    by_product: dict[str, list[ClassifiedMovement]] = {}
    for cm in classify_all(movements):
        product_key, branch_key = cm.movement.pair_key
        if branch_key == branch_id:
            by_product.setdefault(product_key, []).append(cm)

    results: list[ProductTheoreticalStock] = []
    for product in sort_by_name(products):
        stock = _accumulate(by_product.get(product.id, []), baseline)
        results.append(
            ProductTheoreticalStock(
                product_id=product.id,
                product_name=product.name,
                initial=stock.initial,
                inflows=stock.inflows,
                outflows=stock.outflows,
                last_count_date=stock.last_count_date,
            )
        )
    return results
