"""Abstract interface for payable invoice storage."""

from abc import ABC, abstractmethod

from agrostock.core.entities.invoice import PayableInvoice


class IPayableInvoiceStore(ABC):
    """Interface for provider payable invoices."""

    @abstractmethod
    async def get_by_remission(self, remission_number: str) -> PayableInvoice | None:
        """Get the invoice attached to a remission."""
        pass

    @abstractmethod
    async def save_invoice(self, invoice: PayableInvoice) -> PayableInvoice:
        """Insert or update an invoice keyed by remission number."""
        pass

    @abstractmethod
    async def delete_by_remission(self, remission_number: str) -> bool:
        """Delete the invoice attached to a remission."""
        pass
