"""SQLite implementation of the stock movement ledger."""

import aiosqlite

from agrostock.config import get_logger, get_settings
from agrostock.core.entities.movement import MovementType, StockMovement
from agrostock.core.exceptions import LedgerTooLargeError
from agrostock.core.interfaces.ledger_store import ILedgerStore
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

_ORDER = (
    "ORDER BY date ASC, remission_number ASC, index_in_transaction ASC, "
    "created_at ASC, id ASC"
)

_INSERT = """
INSERT INTO stock_movements (
    id, product_id, branch_id, type, quantity, price_at_transaction,
    date, remission_number, index_in_transaction, comment,
    product_name, branch_name, provider_id, provider_name, created_at
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


def movement_params(movement: StockMovement) -> tuple:
    """Column values for _INSERT, in order."""
    return (
        movement.id,
        movement.product_id,
        movement.branch_id,
        movement.type.value,
        movement.quantity,
        movement.price_at_transaction,
        to_db_timestamp(movement.date),
        movement.remission_number,
        movement.index_in_transaction,
        movement.comment,
        movement.product_name,
        movement.branch_name,
        movement.provider_id,
        movement.provider_name,
        to_db_timestamp(movement.created_at),
    )


async def insert_movements(
    conn: aiosqlite.Connection, movements: list[StockMovement]
) -> list[StockMovement]:
    """Insert rows on an open transaction, assigning ids and created_at."""
    now = utcnow()
    stored = [
        m.model_copy(update={"id": m.id or new_id(), "created_at": m.created_at or now})
        for m in movements
    ]
    await conn.executemany(_INSERT, [movement_params(m) for m in stored])
    return stored


class SQLiteLedgerStore(ILedgerStore):
    """SQLite implementation of stock movement storage."""

    async def get_movement(self, movement_id: str) -> StockMovement | None:
        """Get a movement by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_movements WHERE id = ?", (movement_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_movement(row)

    async def list_movements(
        self,
        product_id: str | None = None,
        branch_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockMovement]:
        """List movements ordered by date, then index_in_transaction."""
        conditions = []
        params: list = []
        if product_id is not None:
            conditions.append("product_id = ?")
            params.append(product_id)
        if branch_id is not None:
            conditions.append("branch_id = ?")
            params.append(branch_id)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM stock_movements {where} {_ORDER} LIMIT ? OFFSET ?",
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def list_all_movements(self) -> list[StockMovement]:
        """
        Fetch the whole ledger in pages of LEDGER_PAGE_SIZE.

        Raises:
            LedgerTooLargeError: If the ledger holds more than
                LEDGER_MAX_ROWS rows. Callers never see a truncated ledger.
        """
        settings = get_settings().ledger
        movements: list[StockMovement] = []
        offset = 0

        while offset < settings.max_rows:
            page_size = min(settings.page_size, settings.max_rows - offset)
            page = await self.list_movements(limit=page_size, offset=offset)
            movements.extend(page)
            offset += len(page)
            if len(page) < page_size:
                logger.debug("ledger_loaded", rows=len(movements))
                return movements

        # Exactly at the cap: one more row means the ledger was cut short
        if await self.list_movements(limit=1, offset=settings.max_rows):
            logger.error("ledger_row_cap_exceeded", max_rows=settings.max_rows)
            raise LedgerTooLargeError(settings.max_rows)

        logger.debug("ledger_loaded", rows=len(movements))
        return movements

    async def get_remission(self, remission_number: str) -> list[StockMovement]:
        """Get every movement sharing a remission number, by index."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_movements
                WHERE remission_number = ?
                ORDER BY index_in_transaction ASC, created_at ASC
                """,
                (remission_number,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def list_remission_numbers(self, prefix: str) -> list[str]:
        """List distinct remission numbers starting with prefix."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT DISTINCT remission_number FROM stock_movements
                WHERE substr(remission_number, 1, ?) = ?
                ORDER BY remission_number
                """,
                (len(prefix), prefix),
            )
            rows = await cursor.fetchall()
            return [row[0] for row in rows]

    async def add_movements(
        self, movements: list[StockMovement]
    ) -> list[StockMovement]:
        """Insert movements in a single transaction."""
        if not movements:
            return []
        async with get_transaction() as conn:
            stored = await insert_movements(conn, movements)
        logger.info(
            "movements_recorded",
            rows=len(stored),
            remission_number=stored[0].remission_number,
        )
        return stored

    async def shift_indices(
        self, remission_number: str, from_index: int, by: int = 1
    ) -> int:
        """Shift index_in_transaction of rows at or after from_index."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE stock_movements
                SET index_in_transaction = index_in_transaction + ?
                WHERE remission_number = ? AND index_in_transaction >= ?
                """,
                (by, remission_number, from_index),
            )
            return cursor.rowcount

    async def update_movement(self, movement: StockMovement) -> StockMovement:
        """Update a movement in place."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE stock_movements SET
                    quantity = ?,
                    price_at_transaction = ?,
                    date = ?,
                    comment = ?,
                    index_in_transaction = ?
                WHERE id = ?
                """,
                (
                    movement.quantity,
                    movement.price_at_transaction,
                    to_db_timestamp(movement.date),
                    movement.comment,
                    movement.index_in_transaction,
                    movement.id,
                ),
            )
        logger.info("movement_row_updated", movement_id=movement.id)
        return movement

    async def delete_movement(self, movement_id: str) -> bool:
        """Delete a movement by ID."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM stock_movements WHERE id = ?", (movement_id,)
            )
            return cursor.rowcount > 0

    async def delete_remission(self, remission_number: str) -> int:
        """Delete every movement of a remission."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM stock_movements WHERE remission_number = ?",
                (remission_number,),
            )
            return cursor.rowcount

    def _row_to_movement(self, row: aiosqlite.Row) -> StockMovement:
        """Convert database row to StockMovement entity."""
        return StockMovement(
            id=row["id"],
            product_id=row["product_id"],
            branch_id=row["branch_id"],
            type=MovementType(row["type"]),
            quantity=row["quantity"],
            price_at_transaction=row["price_at_transaction"],
            date=from_db_timestamp(row["date"]),
            remission_number=row["remission_number"],
            index_in_transaction=row["index_in_transaction"],
            comment=row["comment"],
            product_name=row["product_name"],
            branch_name=row["branch_name"],
            provider_id=row["provider_id"],
            provider_name=row["provider_name"],
            created_at=from_db_timestamp(row["created_at"]),
        )
