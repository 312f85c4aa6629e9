"""Abstract interface for product and branch catalog storage."""

from abc import ABC, abstractmethod

from agrostock.core.entities.catalog import Branch, Product


class ICatalogStore(ABC):
    """Interface for product and branch persistence."""

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a new product."""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def find_product_by_name(self, name: str) -> Product | None:
        """Find product by exact, case-insensitive name."""
        pass

    @abstractmethod
    async def list_products(self) -> list[Product]:
        """List all products ordered by name."""
        pass

    @abstractmethod
    async def create_branch(self, branch: Branch) -> Branch:
        """Create a new branch."""
        pass

    @abstractmethod
    async def get_branch(self, branch_id: str) -> Branch | None:
        """Get branch by ID."""
        pass

    @abstractmethod
    async def find_branch_by_name(self, name: str) -> Branch | None:
        """Find branch by exact, case-insensitive name."""
        pass

    @abstractmethod
    async def list_branches(self) -> list[Branch]:
        """List all branches ordered by name."""
        pass
