"""Core interfaces (ports) for dependency injection."""

from agrostock.core.interfaces.catalog_store import ICatalogStore
from agrostock.core.interfaces.count_store import ICountStore
from agrostock.core.interfaces.invoice_store import IPayableInvoiceStore
from agrostock.core.interfaces.ledger_store import ILedgerStore

__all__ = [
    "ICatalogStore",
    "ICountStore",
    "ILedgerStore",
    "IPayableInvoiceStore",
]
