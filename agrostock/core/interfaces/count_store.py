"""Abstract interface for inventory count storage."""

from abc import ABC, abstractmethod

from agrostock.core.entities.inventory_count import InventoryCount, InventoryCountItem
from agrostock.core.entities.movement import StockMovement


class ICountStore(ABC):
    """Interface for inventory counts, their items, and adjustment posting."""

    @abstractmethod
    async def create_count(
        self, count: InventoryCount, items: list[InventoryCountItem]
    ) -> InventoryCount:
        """Create a count and its items in one transaction."""
        pass

    @abstractmethod
    async def get_count(self, count_id: str) -> InventoryCount | None:
        """Get count by ID."""
        pass

    @abstractmethod
    async def list_counts(
        self, branch_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[InventoryCount]:
        """List counts, newest date first."""
        pass

    @abstractmethod
    async def list_applied_counts(self, branch_id: str) -> list[InventoryCount]:
        """List counts of a branch whose adjustments have been applied."""
        pass

    @abstractmethod
    async def get_items(self, count_id: str) -> list[InventoryCountItem]:
        """Get the items of a count ordered by product name."""
        pass

    @abstractmethod
    async def update_count(self, count: InventoryCount) -> InventoryCount:
        """Update count header fields (status, notes, responsible)."""
        pass

    @abstractmethod
    async def save_items(
        self, count_id: str, items: list[InventoryCountItem]
    ) -> list[InventoryCountItem]:
        """Persist quantity fields of existing items."""
        pass

    @abstractmethod
    async def delete_count(self, count_id: str) -> bool:
        """Delete a count and its items. Never touches the ledger."""
        pass

    @abstractmethod
    async def apply_count_adjustments(
        self, count_id: str, movements: list[StockMovement]
    ) -> bool:
        """
        Atomically flag the count as applied and insert its adjustment rows.

        Returns False without writing anything if the count is not completed
        or was already applied.
        """
        pass
