"""Edit, delete and browse ledger movements."""

import math
from dataclasses import dataclass, field
from datetime import datetime

from agrostock.application.dto.requests import UpdateMovementRequest
from agrostock.config import get_logger
from agrostock.core.entities.invoice import PayableInvoice, invoice_total
from agrostock.core.entities.movement import MovementType, StockMovement
from agrostock.core.exceptions import MovementNotFoundError, RemissionNotFoundError
from agrostock.core.interfaces.invoice_store import IPayableInvoiceStore
from agrostock.core.interfaces.ledger_store import ILedgerStore
from agrostock.core.services.remission_grouping import (
    RemissionGroup,
    filter_groups,
    group_by_remission,
)

logger = get_logger(__name__)


class _LedgerUseCase:
    """Lazy store wiring shared by the ledger use cases."""

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        invoice_store: IPayableInvoiceStore | None = None,
    ):
        self._ledger_store = ledger_store
        self._invoice_store = invoice_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from agrostock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_invoice_store(self) -> IPayableInvoiceStore:
        if self._invoice_store is None:
            from agrostock.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _siblings(self, movement: StockMovement) -> list[StockMovement]:
        """Other rows sharing the movement's remission."""
        if not movement.remission_number:
            return []
        ledger = await self._get_ledger_store()
        rows = await ledger.get_remission(movement.remission_number)
        return [row for row in rows if row.id != movement.id]


@dataclass
class UpdateMovementResult:
    """Result of editing a movement."""

    movement: StockMovement
    invoice: PayableInvoice | None = None
    paired_warning: bool = False  # other rows of the remission were not touched


class UpdateMovementUseCase(_LedgerUseCase):
    """Edit quantity, price or comment of one row."""

    async def execute(self, request: UpdateMovementRequest) -> UpdateMovementResult:
        """Execute update movement use case."""
        ledger = await self._get_ledger_store()
        movement = await ledger.get_movement(request.movement_id)
        if movement is None:
            raise MovementNotFoundError(request.movement_id)

        changes: dict = {}
        if request.quantity is not None:
            sign = -1.0 if movement.quantity < 0 else 1.0
            changes["quantity"] = math.copysign(request.quantity, sign)
        if request.price_at_transaction is not None:
            changes["price_at_transaction"] = request.price_at_transaction
        if request.comment is not None:
            changes["comment"] = request.comment

        updated = await ledger.update_movement(movement.model_copy(update=changes))
        siblings = await self._siblings(updated)

        invoice = None
        value_changed = "quantity" in changes or "price_at_transaction" in changes
        if (
            value_changed
            and updated.type == MovementType.INFLOW
            and updated.remission_number
        ):
            invoice = await self._recompute_payable(updated, siblings)

        if siblings:
            logger.warning(
                "paired_movement_not_synced",
                movement_id=updated.id,
                remission_number=updated.remission_number,
                siblings=len(siblings),
            )

        logger.info("movement_updated", movement_id=updated.id, fields=sorted(changes))
        return UpdateMovementResult(
            movement=updated,
            invoice=invoice,
            paired_warning=bool(siblings),
        )

    async def _recompute_payable(
        self,
        movement: StockMovement,
        siblings: list[StockMovement],
    ) -> PayableInvoice | None:
        invoice_store = await self._get_invoice_store()
        invoice = await invoice_store.get_by_remission(movement.remission_number)  # type: ignore[arg-type]
        if invoice is None:
            return None

        subtotal = sum(row.line_total for row in [movement, *siblings])
        invoice.subtotal = subtotal
        invoice.total_amount = invoice_total(subtotal, invoice.iva, invoice.retefuente)
        logger.info(
            "payable_recomputed",
            remission_number=invoice.remission_number,
            total_amount=invoice.total_amount,
        )
        return await invoice_store.save_invoice(invoice)


@dataclass
class DeleteMovementResult:
    movement: StockMovement
    paired_warning: bool = False


class DeleteMovementUseCase(_LedgerUseCase):
    """Delete one row of the ledger."""

    async def execute(self, movement_id: str) -> DeleteMovementResult:
        """Execute delete movement use case."""
        ledger = await self._get_ledger_store()
        movement = await ledger.get_movement(movement_id)
        if movement is None:
            raise MovementNotFoundError(movement_id)

        siblings = await self._siblings(movement)
        await ledger.delete_movement(movement_id)

        if siblings:
            logger.warning(
                "paired_movement_not_synced",
                movement_id=movement_id,
                remission_number=movement.remission_number,
                siblings=len(siblings),
            )
        logger.info("movement_deleted", movement_id=movement_id)
        return DeleteMovementResult(movement=movement, paired_warning=bool(siblings))


class DeleteRemissionUseCase(_LedgerUseCase):
    """Delete every row sharing a remission number."""

    async def execute(self, remission_number: str) -> int:
        """Execute delete remission use case. Returns rows deleted."""
        ledger = await self._get_ledger_store()
        deleted = await ledger.delete_remission(remission_number)
        if deleted == 0:
            raise RemissionNotFoundError(remission_number)

        logger.info("remission_deleted", remission_number=remission_number, rows=deleted)
        return deleted


@dataclass
class StockLogQuery:
    """Stock-log filters. Empty filters match everything."""

    search: str | None = None
    types: list[MovementType] = field(default_factory=list)
    date_from: datetime | None = None
    date_to: datetime | None = None
    branch_name: str | None = None
    limit: int = 50
    offset: int = 0


@dataclass
class StockLogPage:
    groups: list[RemissionGroup]
    total: int


class ListStockLogUseCase(_LedgerUseCase):
    """Ledger grouped by remission, newest first, filtered and paginated."""

    async def execute(self, query: StockLogQuery | None = None) -> StockLogPage:
        """Execute stock log use case."""
        query = query or StockLogQuery()
        ledger = await self._get_ledger_store()
        movements = await ledger.list_all_movements()

        groups = filter_groups(
            group_by_remission(movements),
            search=query.search,
            types=query.types,
            date_from=query.date_from,
            date_to=query.date_to,
            branch_name=query.branch_name,
        )
        page = groups[query.offset : query.offset + query.limit]
        return StockLogPage(groups=page, total=len(groups))
