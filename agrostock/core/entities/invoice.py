"""Payable invoice entities, created from provider inflows."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class PaymentStatus(str, Enum):
    """Payment state of a payable invoice."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class PayableInvoice(BaseModel):
    """Amount owed to a provider for one inflow remission."""

    id: str | None = None
    remission_number: str
    provider_id: str
    provider_name: str | None = None
    date: datetime
    due_date: datetime | None = None
    subtotal: float = 0.0
    iva: float = 0.0
    retefuente: float = 0.0
    total_amount: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime | None = None


def invoice_total(subtotal: float, iva: float = 0.0, retefuente: float = 0.0) -> float:
    """Total owed: subtotal plus VAT minus withholding."""
    return subtotal + (iva or 0.0) - (retefuente or 0.0)
