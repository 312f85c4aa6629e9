"""
Movement builders for manual ledger entry.

Produce well-formed ledger rows for each kind of transaction: inflow and
outflow groups, transfers between branches and product conversions.
Paired kinds are stored as a negative origin row and a positive
destination row sharing the remission number.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from agrostock.core.entities.movement import MovementType, StockMovement


@dataclass
class MovementLine:
    """One product line of a manual entry form."""

    product_id: str
    quantity: float
    price: float = 0.0
    product_name: str | None = None

    @property
    def subtotal(self) -> float:
        return self.quantity * self.price


class ClientType(str, Enum):
    """Kind of customer document behind an outflow."""

    COUNTER = "counter"
    ELECTRONIC_INVOICE = "electronic_invoice"
    REMISSION = "remission"


def _join(prefix: str, comment: str | None) -> str:
    return f"{prefix} - {comment or ''}"


def outflow_comment(
    client_type: ClientType | str,
    reference: str | None = None,
    comment: str | None = None,
) -> str:
    """Comment stored on outflow rows, prefixed by the customer document."""
    if client_type == ClientType.COUNTER:
        prefix = "Venta en mostrador"
    elif client_type == ClientType.ELECTRONIC_INVOICE:
        prefix = f"Fact. Elec. N° {reference or ''}"
    elif client_type == ClientType.REMISSION:
        prefix = f"Remisión Ref: {reference or ''}"
    else:
        value = client_type.value if isinstance(client_type, Enum) else client_type
        prefix = f"Cliente: {value}"
    return _join(prefix, comment)


def build_inflow(
    branch_id: str,
    lines: list[MovementLine],
    date: datetime,
    remission_number: str,
    branch_name: str | None = None,
    provider_id: str | None = None,
    provider_name: str | None = None,
    comment: str | None = None,
) -> list[StockMovement]:
    """One inflow row per line, indexed by line position."""
    return [
        StockMovement(
            product_id=line.product_id,
            product_name=line.product_name,
            branch_id=branch_id,
            branch_name=branch_name,
            type=MovementType.INFLOW,
            quantity=abs(line.quantity),
            price_at_transaction=line.price,
            date=date,
            remission_number=remission_number,
            index_in_transaction=i,
            provider_id=provider_id,
            provider_name=provider_name,
            comment=_join(f"Proveedor: {provider_name or ''}", comment),
        )
        for i, line in enumerate(lines)
    ]


def build_outflow(
    branch_id: str,
    lines: list[MovementLine],
    date: datetime,
    remission_number: str,
    client_type: ClientType | str = ClientType.COUNTER,
    reference: str | None = None,
    branch_name: str | None = None,
    comment: str | None = None,
) -> list[StockMovement]:
    """One outflow row per line; quantities stored as positive magnitudes."""
    text = outflow_comment(client_type, reference, comment)
    return [
        StockMovement(
            product_id=line.product_id,
            product_name=line.product_name,
            branch_id=branch_id,
            branch_name=branch_name,
            type=MovementType.OUTFLOW,
            quantity=abs(line.quantity),
            price_at_transaction=line.price,
            date=date,
            remission_number=remission_number,
            index_in_transaction=i,
            comment=text,
        )
        for i, line in enumerate(lines)
    ]


def build_transfer(
    from_branch_id: str,
    to_branch_id: str,
    lines: list[MovementLine],
    date: datetime,
    remission_number: str,
    from_branch_name: str | None = None,
    to_branch_name: str | None = None,
    comment: str | None = None,
) -> list[StockMovement]:
    """Two rows per line: origin negative at 2i, destination positive at 2i+1."""
    movements: list[StockMovement] = []
    for i, line in enumerate(lines):
        quantity = abs(line.quantity)
        movements.append(
            StockMovement(
                product_id=line.product_id,
                product_name=line.product_name,
                branch_id=from_branch_id,
                branch_name=from_branch_name,
                type=MovementType.TRANSFER,
                quantity=-quantity,
                price_at_transaction=line.price,
                date=date,
                remission_number=remission_number,
                index_in_transaction=i * 2,
                comment=_join(f"Traslado hacia {to_branch_name or ''}", comment),
            )
        )
        movements.append(
            StockMovement(
                product_id=line.product_id,
                product_name=line.product_name,
                branch_id=to_branch_id,
                branch_name=to_branch_name,
                type=MovementType.TRANSFER,
                quantity=quantity,
                price_at_transaction=line.price,
                date=date,
                remission_number=remission_number,
                index_in_transaction=i * 2 + 1,
                comment=_join(f"Traslado desde {from_branch_name or ''}", comment),
            )
        )
    return movements


def build_conversion(
    branch_id: str,
    source: MovementLine,
    target: MovementLine,
    date: datetime,
    remission_number: str,
    branch_name: str | None = None,
    comment: str | None = None,
) -> list[StockMovement]:
    """Source product negative at index 0, target product positive at index 1."""
    return [
        StockMovement(
            product_id=source.product_id,
            product_name=source.product_name,
            branch_id=branch_id,
            branch_name=branch_name,
            type=MovementType.CONVERSION,
            quantity=-abs(source.quantity),
            price_at_transaction=source.price,
            date=date,
            remission_number=remission_number,
            index_in_transaction=0,
            comment=_join(
                f"Salida por conversión a {target.product_name or ''}", comment
            ),
        ),
        StockMovement(
            product_id=target.product_id,
            product_name=target.product_name,
            branch_id=branch_id,
            branch_name=branch_name,
            type=MovementType.CONVERSION,
            quantity=abs(target.quantity),
            price_at_transaction=target.price,
            date=date,
            remission_number=remission_number,
            index_in_transaction=1,
            comment=_join(
                f"Entrada por conversión desde {source.product_name or ''}", comment
            ),
        ),
    ]


def place_at_index(
    movements: list[StockMovement], insert_at: int
) -> list[StockMovement]:
    """Re-index new rows to occupy contiguous slots starting at insert_at."""
    return [
        movement.model_copy(update={"index_in_transaction": insert_at + i})
        for i, movement in enumerate(movements)
    ]


def lines_subtotal(lines: list[MovementLine]) -> float:
    return sum(line.subtotal for line in lines)
