"""Request DTOs for use cases.

Pydantic v2 models for input validation.
These are the ONLY contracts between callers and use cases.
"""

from pydantic import BaseModel, Field, model_validator

from agrostock.core.entities.movement import MovementType
from agrostock.core.services.movement_builder import ClientType

# --- Ledger ---


class MovementLineRequest(BaseModel):
    """One product line of a manual entry."""

    product_id: str = Field(..., description="Product ID")
    quantity: float = Field(..., gt=0, description="Quantity moved (magnitude)")
    price: float = Field(default=0.0, ge=0, description="Unit price at transaction")


class RecordMovementsRequest(BaseModel):
    """Request to record one manual ledger transaction.

    inflow/outflow/transfer use `lines`; conversion uses `source` and
    `target`. Count adjustments are never recorded manually.
    """

    type: MovementType = Field(..., description="Transaction type")
    remission_number: str = Field(..., min_length=1, description="Remission number")
    date: str | None = Field(
        default=None,
        description="Movement date in ISO format (defaults to now)",
    )
    branch_id: str = Field(..., description="Branch ID (origin for transfers)")
    to_branch_id: str | None = Field(
        default=None, description="Destination branch for transfers"
    )
    lines: list[MovementLineRequest] = Field(default_factory=list)
    source: MovementLineRequest | None = Field(
        default=None, description="Consumed product for conversions"
    )
    target: MovementLineRequest | None = Field(
        default=None, description="Produced product for conversions"
    )
    provider_id: str | None = Field(default=None, description="Provider for inflows")
    provider_name: str | None = Field(default=None, description="Provider name")
    iva: float = Field(default=0.0, ge=0, description="VAT added to the payable")
    retefuente: float = Field(
        default=0.0, ge=0, description="Withholding subtracted from the payable"
    )
    due_date: str | None = Field(default=None, description="Payable due date (ISO)")
    client_type: ClientType | str = Field(
        default=ClientType.COUNTER, description="Customer document for outflows"
    )
    client_reference: str | None = Field(
        default=None, description="Invoice or remission reference for outflows"
    )
    comment: str | None = Field(default=None, description="Free-text comment")
    insert_at_index: int | None = Field(
        default=None,
        ge=0,
        description="Insert into an existing remission at this index",
    )

    @model_validator(mode="after")
    def check_shape(self) -> "RecordMovementsRequest":
        if self.type == MovementType.ADJUSTMENT:
            raise ValueError("adjustments are generated by inventory counts")
        if self.type == MovementType.CONVERSION:
            if self.source is None or self.target is None:
                raise ValueError("conversion requires source and target")
        elif not self.lines:
            raise ValueError("at least one line is required")
        if self.type == MovementType.TRANSFER:
            if not self.to_branch_id:
                raise ValueError("transfer requires to_branch_id")
            if self.to_branch_id == self.branch_id:
                raise ValueError("transfer origin and destination must differ")
        return self


class UpdateMovementRequest(BaseModel):
    """Request to edit one ledger row."""

    movement_id: str = Field(..., description="Movement ID")
    quantity: float | None = Field(
        default=None, gt=0, description="New magnitude; the stored sign is kept"
    )
    price_at_transaction: float | None = Field(default=None, ge=0)
    comment: str | None = Field(default=None)


# --- Inventory counts ---


class CreateInventoryCountRequest(BaseModel):
    """Request to start an inventory count for a branch."""

    branch_id: str = Field(..., description="Branch ID")
    date: str | None = Field(
        default=None,
        description="Count date in ISO format (defaults to now)",
    )
    responsible: str | None = Field(default=None, description="Person counting")
    notes: str | None = Field(default=None)
    equalize: bool = Field(
        default=False,
        description="Start physical quantities at the theoretical quantity",
    )


class UpdatePhysicalQuantitiesRequest(BaseModel):
    """Request to enter physical quantities, keyed by product ID."""

    count_id: str = Field(..., description="Inventory count ID")
    quantities: dict[str, float] = Field(default_factory=dict)
    notes: str | None = Field(default=None)
    responsible: str | None = Field(default=None)


class EqualizeCountRequest(BaseModel):
    """Request to overwrite every physical quantity with the theoretical one."""

    count_id: str = Field(..., description="Inventory count ID")
    confirm: bool = Field(
        default=False,
        description="Must be true: entered physical quantities are discarded",
    )


# --- Import ---


class ImportLayerRequest(BaseModel):
    quantity: float = Field(..., gt=0)
    unit_cost: float = Field(..., ge=0)


class ImportRowRequest(BaseModel):
    """A parsed spreadsheet row of an initial inventory import."""

    product_name: str = Field(default="", description="Product name as typed")
    branch_name: str = Field(default="", description="Branch name as typed")
    quantity: float = Field(default=0.0)
    unit_cost: float | None = Field(default=None, ge=0)
    total_value: float | None = Field(default=None, ge=0)
    layers: list[ImportLayerRequest] = Field(default_factory=list)


class ImportInventoryRequest(BaseModel):
    """Request to import initial stock."""

    rows: list[ImportRowRequest] = Field(default_factory=list)
    date: str | None = Field(
        default=None,
        description="Import date in ISO format (defaults to now)",
    )
