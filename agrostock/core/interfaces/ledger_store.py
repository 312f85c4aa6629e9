"""Abstract interface for stock movement ledger storage."""

from abc import ABC, abstractmethod

from agrostock.core.entities.movement import StockMovement


class ILedgerStore(ABC):
    """Interface for stock movement persistence."""

    @abstractmethod
    async def get_movement(self, movement_id: str) -> StockMovement | None:
        """Get a movement by ID."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        product_id: str | None = None,
        branch_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockMovement]:
        """List movements ordered by date ASC, then index_in_transaction."""
        pass

    @abstractmethod
    async def list_all_movements(self) -> list[StockMovement]:
        """Fetch the whole ledger page by page; raise LedgerTooLargeError past the row cap."""
        pass

    @abstractmethod
    async def get_remission(self, remission_number: str) -> list[StockMovement]:
        """Get every movement sharing a remission number, by index."""
        pass

    @abstractmethod
    async def add_movements(
        self, movements: list[StockMovement]
    ) -> list[StockMovement]:
        """Insert movements in a single transaction."""
        pass

    @abstractmethod
    async def shift_indices(
        self, remission_number: str, from_index: int, by: int = 1
    ) -> int:
        """Shift index_in_transaction of rows at or after from_index. Returns rows moved."""
        pass

    @abstractmethod
    async def update_movement(self, movement: StockMovement) -> StockMovement:
        """Update a movement in place."""
        pass

    @abstractmethod
    async def delete_movement(self, movement_id: str) -> bool:
        """Delete a movement by ID."""
        pass

    @abstractmethod
    async def delete_remission(self, remission_number: str) -> int:
        """Delete every movement of a remission. Returns rows deleted."""
        pass

    @abstractmethod
    async def list_remission_numbers(self, prefix: str) -> list[str]:
        """List distinct remission numbers starting with prefix."""
        pass
