"""SQLite storage implementations."""

from agrostock.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from agrostock.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from agrostock.infrastructure.storage.sqlite.count_store import SQLiteCountStore
from agrostock.infrastructure.storage.sqlite.invoice_store import (
    SQLitePayableInvoiceStore,
)
from agrostock.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore

# Singleton instances
_ledger_store: SQLiteLedgerStore | None = None
_catalog_store: SQLiteCatalogStore | None = None
_count_store: SQLiteCountStore | None = None
_invoice_store: SQLitePayableInvoiceStore | None = None


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_catalog_store() -> SQLiteCatalogStore:
    """Get singleton catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SQLiteCatalogStore()
    return _catalog_store


async def get_count_store() -> SQLiteCountStore:
    """Get singleton inventory count store instance."""
    global _count_store
    if _count_store is None:
        _count_store = SQLiteCountStore()
    return _count_store


async def get_invoice_store() -> SQLitePayableInvoiceStore:
    """Get singleton payable invoice store instance."""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = SQLitePayableInvoiceStore()
    return _invoice_store


def reset_stores() -> None:
    """Drop singleton stores (for testing)."""
    global _ledger_store, _catalog_store, _count_store, _invoice_store
    _ledger_store = None
    _catalog_store = None
    _count_store = None
    _invoice_store = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteLedgerStore",
    "SQLiteCatalogStore",
    "SQLiteCountStore",
    "SQLitePayableInvoiceStore",
    # Factory functions
    "get_ledger_store",
    "get_catalog_store",
    "get_count_store",
    "get_invoice_store",
    "reset_stores",
]
