"""SQLite implementation of payable invoice storage."""

import aiosqlite

from agrostock.config import get_logger
from agrostock.core.entities.invoice import PayableInvoice, PaymentStatus
from agrostock.core.interfaces.invoice_store import IPayableInvoiceStore
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


class SQLitePayableInvoiceStore(IPayableInvoiceStore):
    """SQLite implementation of provider payables."""

    async def get_by_remission(self, remission_number: str) -> PayableInvoice | None:
        """Get the invoice attached to a remission."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM payable_invoices WHERE remission_number = ?",
                (remission_number,),
            )
            row = await cursor.fetchone()
            return self._row_to_invoice(row) if row else None

    async def save_invoice(self, invoice: PayableInvoice) -> PayableInvoice:
        """Insert or update an invoice keyed by remission number."""
        invoice = invoice.model_copy(
            update={
                "id": invoice.id or new_id(),
                "created_at": invoice.created_at or utcnow(),
            }
        )
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO payable_invoices (
                    id, remission_number, provider_id, provider_name, date,
                    due_date, subtotal, iva, retefuente, total_amount,
                    payment_status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (remission_number) DO UPDATE SET
                    subtotal = excluded.subtotal,
                    iva = excluded.iva,
                    retefuente = excluded.retefuente,
                    total_amount = excluded.total_amount,
                    payment_status = excluded.payment_status,
                    due_date = excluded.due_date
                """,
                (
                    invoice.id,
                    invoice.remission_number,
                    invoice.provider_id,
                    invoice.provider_name,
                    to_db_timestamp(invoice.date),
                    to_db_timestamp(invoice.due_date),
                    invoice.subtotal,
                    invoice.iva,
                    invoice.retefuente,
                    invoice.total_amount,
                    invoice.payment_status.value,
                    to_db_timestamp(invoice.created_at),
                ),
            )
        logger.info(
            "payable_invoice_saved",
            remission_number=invoice.remission_number,
            total_amount=invoice.total_amount,
        )
        return invoice

    async def delete_by_remission(self, remission_number: str) -> bool:
        """Delete the invoice attached to a remission."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM payable_invoices WHERE remission_number = ?",
                (remission_number,),
            )
            return cursor.rowcount > 0

    def _row_to_invoice(self, row: aiosqlite.Row) -> PayableInvoice:
        return PayableInvoice(
            id=row["id"],
            remission_number=row["remission_number"],
            provider_id=row["provider_id"],
            provider_name=row["provider_name"],
            date=from_db_timestamp(row["date"]),
            due_date=from_db_timestamp(row["due_date"]),
            subtotal=row["subtotal"],
            iva=row["iva"],
            retefuente=row["retefuente"],
            total_amount=row["total_amount"],
            payment_status=PaymentStatus(row["payment_status"]),
            created_at=from_db_timestamp(row["created_at"]),
        )
