"""Storage infrastructure implementations."""

from agrostock.infrastructure.storage.sqlite import (
    SQLiteCatalogStore,
    SQLiteCountStore,
    SQLiteLedgerStore,
    SQLitePayableInvoiceStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteLedgerStore",
    "SQLiteCatalogStore",
    "SQLiteCountStore",
    "SQLitePayableInvoiceStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
