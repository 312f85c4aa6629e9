"""SQLite implementation of inventory count storage."""

import aiosqlite

from agrostock.config import get_logger
from agrostock.core.entities.inventory_count import (
    CountStatus,
    InventoryCount,
    InventoryCountItem,
)
from agrostock.core.entities.movement import StockMovement
from agrostock.core.interfaces.count_store import ICountStore
from agrostock.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from agrostock.infrastructure.storage.sqlite.ledger_store import insert_movements
from agrostock.infrastructure.storage.sqlite.rows import (
    from_db_timestamp,
    new_id,
    to_db_timestamp,
    utcnow,
)

logger = get_logger(__name__)


class SQLiteCountStore(ICountStore):
    """SQLite implementation of counts, their items and adjustment posting."""

    async def create_count(
        self, count: InventoryCount, items: list[InventoryCountItem]
    ) -> InventoryCount:
        """Create a count and its items in one transaction."""
        now = utcnow()
        count = count.model_copy(
            update={"id": count.id or new_id(), "created_at": now, "updated_at": now}
        )
        items = [
            item.model_copy(update={"id": item.id or new_id(), "count_id": count.id})
            for item in items
        ]

        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO inventory_counts (
                    id, date, branch_id, branch_name, responsible, status,
                    notes, adjustments_applied, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    count.id,
                    to_db_timestamp(count.date),
                    count.branch_id,
                    count.branch_name,
                    count.responsible,
                    count.status.value,
                    count.notes,
                    int(count.adjustments_applied),
                    to_db_timestamp(count.created_at),
                    to_db_timestamp(count.updated_at),
                ),
            )
            await conn.executemany(
                """
                INSERT INTO inventory_count_items (
                    id, count_id, product_id, product_name, initial_quantity,
                    inflow_quantity, outflow_quantity, physical_quantity
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        item.id,
                        item.count_id,
                        item.product_id,
                        item.product_name,
                        item.initial_quantity,
                        item.inflow_quantity,
                        item.outflow_quantity,
                        item.physical_quantity,
                    )
                    for item in items
                ],
            )

        logger.info("inventory_count_stored", count_id=count.id, items=len(items))
        return count

    async def get_count(self, count_id: str) -> InventoryCount | None:
        """Get count by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM inventory_counts WHERE id = ?", (count_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_count(row) if row else None

    async def list_counts(
        self, branch_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[InventoryCount]:
        """List counts, newest date first."""
        async with get_connection() as conn:
            if branch_id is None:
                cursor = await conn.execute(
                    """
                    SELECT * FROM inventory_counts
                    ORDER BY date DESC LIMIT ? OFFSET ?
                    """,
                    (limit, offset),
                )
            else:
                cursor = await conn.execute(
                    """
                    SELECT * FROM inventory_counts WHERE branch_id = ?
                    ORDER BY date DESC LIMIT ? OFFSET ?
                    """,
                    (branch_id, limit, offset),
                )
            rows = await cursor.fetchall()
            return [self._row_to_count(row) for row in rows]

    async def list_applied_counts(self, branch_id: str) -> list[InventoryCount]:
        """List applied counts of a branch, newest first."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM inventory_counts
                WHERE branch_id = ? AND adjustments_applied = 1
                ORDER BY date DESC
                """,
                (branch_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_count(row) for row in rows]

    async def get_items(self, count_id: str) -> list[InventoryCountItem]:
        """Get the items of a count ordered by product name."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM inventory_count_items WHERE count_id = ?
                ORDER BY product_name COLLATE NOCASE
                """,
                (count_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_item(row) for row in rows]

    async def update_count(self, count: InventoryCount) -> InventoryCount:
        """Update count header fields."""
        count = count.model_copy(update={"updated_at": utcnow()})
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE inventory_counts SET
                    status = ?,
                    responsible = ?,
                    notes = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    count.status.value,
                    count.responsible,
                    count.notes,
                    to_db_timestamp(count.updated_at),
                    count.id,
                ),
            )
        logger.info("inventory_count_updated", count_id=count.id, status=count.status.value)
        return count

    async def save_items(
        self, count_id: str, items: list[InventoryCountItem]
    ) -> list[InventoryCountItem]:
        """Persist quantity fields of existing items."""
        async with get_transaction() as conn:
            await conn.executemany(
                """
                UPDATE inventory_count_items SET
                    initial_quantity = ?,
                    inflow_quantity = ?,
                    outflow_quantity = ?,
                    physical_quantity = ?
                WHERE count_id = ? AND product_id = ?
                """,
                [
                    (
                        item.initial_quantity,
                        item.inflow_quantity,
                        item.outflow_quantity,
                        item.physical_quantity,
                        count_id,
                        item.product_id,
                    )
                    for item in items
                ],
            )
            await conn.execute(
                "UPDATE inventory_counts SET updated_at = ? WHERE id = ?",
                (to_db_timestamp(utcnow()), count_id),
            )
        return items

    async def delete_count(self, count_id: str) -> bool:
        """Delete a count; items go with it, ledger rows stay."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM inventory_counts WHERE id = ?", (count_id,)
            )
            return cursor.rowcount > 0

    async def apply_count_adjustments(
        self, count_id: str, movements: list[StockMovement]
    ) -> bool:
        """Flag the count applied and insert its adjustment rows atomically."""
        async with get_transaction(immediate=True) as conn:
            cursor = await conn.execute(
                """
                UPDATE inventory_counts
                SET adjustments_applied = 1, updated_at = ?
                WHERE id = ? AND adjustments_applied = 0 AND status = ?
                """,
                (to_db_timestamp(utcnow()), count_id, CountStatus.COMPLETED.value),
            )
            if cursor.rowcount == 0:
                return False
            await insert_movements(conn, movements)

        logger.info(
            "count_adjustments_stored",
            count_id=count_id,
            movements=len(movements),
        )
        return True

    def _row_to_count(self, row: aiosqlite.Row) -> InventoryCount:
        return InventoryCount(
            id=row["id"],
            date=from_db_timestamp(row["date"]),
            branch_id=row["branch_id"],
            branch_name=row["branch_name"],
            responsible=row["responsible"],
            status=CountStatus(row["status"]),
            notes=row["notes"],
            adjustments_applied=bool(row["adjustments_applied"]),
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )

    def _row_to_item(self, row: aiosqlite.Row) -> InventoryCountItem:
        return InventoryCountItem(
            id=row["id"],
            count_id=row["count_id"],
            product_id=row["product_id"],
            product_name=row["product_name"],
            initial_quantity=row["initial_quantity"],
            inflow_quantity=row["inflow_quantity"],
            outflow_quantity=row["outflow_quantity"],
            physical_quantity=row["physical_quantity"],
        )
