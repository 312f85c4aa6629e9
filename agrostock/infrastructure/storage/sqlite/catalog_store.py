"""SQLite implementation of product and branch storage."""

import aiosqlite

from agrostock.config import get_logger
from agrostock.core.entities.catalog import Branch, Product
from agrostock.core.exceptions import DatabaseError
from agrostock.core.interfaces.catalog_store import ICatalogStore
from agrostock.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from agrostock.infrastructure.storage.sqlite.rows import (
    from_db_timestamp,
    new_id,
    to_db_timestamp,
    utcnow,
)

logger = get_logger(__name__)


class SQLiteCatalogStore(ICatalogStore):
    """SQLite implementation of the product and branch catalog."""

    async def create_product(self, product: Product) -> Product:
        """Create a new product."""
        product = product.model_copy(
            update={"id": product.id or new_id(), "created_at": utcnow()}
        )
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO products (
                        id, name, description, price, purchase_price, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        product.id,
                        product.name,
                        product.description,
                        product.price,
                        product.purchase_price,
                        to_db_timestamp(product.created_at),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("create_product", str(e)) from e

        logger.info("product_created", product_id=product.id, name=product.name)
        return product

    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE id = ?", (product_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    async def find_product_by_name(self, name: str) -> Product | None:
        """Find product by exact, case-insensitive name."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products WHERE name = ? COLLATE NOCASE",
                (name.strip(),),
            )
            row = await cursor.fetchone()
            return self._row_to_product(row) if row else None

    async def list_products(self) -> list[Product]:
        """List all products ordered by name."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM products ORDER BY name COLLATE NOCASE"
            )
            rows = await cursor.fetchall()
            return [self._row_to_product(row) for row in rows]

    async def create_branch(self, branch: Branch) -> Branch:
        """Create a new branch."""
        branch = branch.model_copy(
            update={"id": branch.id or new_id(), "created_at": utcnow()}
        )
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO branches (id, name, location, manager, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        branch.id,
                        branch.name,
                        branch.location,
                        branch.manager,
                        to_db_timestamp(branch.created_at),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("create_branch", str(e)) from e

        logger.info("branch_created", branch_id=branch.id, name=branch.name)
        return branch

    async def get_branch(self, branch_id: str) -> Branch | None:
        """Get branch by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM branches WHERE id = ?", (branch_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_branch(row) if row else None

    async def find_branch_by_name(self, name: str) -> Branch | None:
        """Find branch by exact, case-insensitive name."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM branches WHERE name = ? COLLATE NOCASE",
                (name.strip(),),
            )
            row = await cursor.fetchone()
            return self._row_to_branch(row) if row else None

    async def list_branches(self) -> list[Branch]:
        """List all branches ordered by name."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM branches ORDER BY name COLLATE NOCASE"
            )
            rows = await cursor.fetchall()
            return [self._row_to_branch(row) for row in rows]

    def _row_to_product(self, row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            price=row["price"],
            purchase_price=row["purchase_price"],
            created_at=from_db_timestamp(row["created_at"]),
        )

    def _row_to_branch(self, row: aiosqlite.Row) -> Branch:
        return Branch(
            id=row["id"],
            name=row["name"],
            location=row["location"],
            manager=row["manager"],
            created_at=from_db_timestamp(row["created_at"]),
        )
