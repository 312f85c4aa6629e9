"""Record Movements Use Case: manual entry of one ledger transaction."""

from dataclasses import dataclass
from datetime import UTC, datetime

from agrostock.application.dto.requests import (
    MovementLineRequest,
    RecordMovementsRequest,
)
from agrostock.config import get_logger
from agrostock.core.entities.catalog import Branch
from agrostock.core.entities.invoice import PayableInvoice, invoice_total
from agrostock.core.entities.movement import MovementType, StockMovement, as_utc
from agrostock.core.exceptions import BranchNotFoundError, ProductNotFoundError
from agrostock.core.interfaces.catalog_store import ICatalogStore
from agrostock.core.interfaces.invoice_store import IPayableInvoiceStore
from agrostock.core.interfaces.ledger_store import ILedgerStore
from agrostock.core.services.classification import parse_movement_date
from agrostock.core.services.movement_builder import (
    MovementLine,
    build_conversion,
    build_inflow,
    build_outflow,
    build_transfer,
    lines_subtotal,
    place_at_index,
)

logger = get_logger(__name__)


@dataclass
class RecordMovementsResult:
    """Result of recording a transaction."""

    movements: list[StockMovement]
    invoice: PayableInvoice | None = None
    shifted: int = 0  # existing rows moved down by an insertion


def resolve_date(value: str | None) -> datetime:
    """Parse an ISO date from a request, defaulting to now (UTC)."""
    if not value:
        return datetime.now(UTC)
    return as_utc(parse_movement_date(value))


class RecordMovementsUseCase:
    """Build, validate and insert the rows of one manual transaction."""

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        catalog_store: ICatalogStore | None = None,
        invoice_store: IPayableInvoiceStore | None = None,
    ):
        self._ledger_store = ledger_store
        self._catalog_store = catalog_store
        self._invoice_store = invoice_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from agrostock.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_catalog_store(self) -> ICatalogStore:
        if self._catalog_store is None:
            from agrostock.infrastructure.storage.sqlite import get_catalog_store

            self._catalog_store = await get_catalog_store()
        return self._catalog_store

    async def _get_invoice_store(self) -> IPayableInvoiceStore:
        if self._invoice_store is None:
            from agrostock.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _branch(self, branch_id: str) -> Branch:
        catalog = await self._get_catalog_store()
        branch = await catalog.get_branch(branch_id)
        if branch is None:
            raise BranchNotFoundError(branch_id)
        return branch

    async def _line(self, line: MovementLineRequest) -> MovementLine:
        catalog = await self._get_catalog_store()
        product = await catalog.get_product(line.product_id)
        if product is None:
            raise ProductNotFoundError(line.product_id)
        return MovementLine(
            product_id=product.id,
            product_name=product.name,
            quantity=line.quantity,
            price=line.price,
        )

    async def execute(self, request: RecordMovementsRequest) -> RecordMovementsResult:
        """Execute record movements use case."""
        logger.info(
            "record_movements_started",
            type=request.type.value,
            remission_number=request.remission_number,
            branch_id=request.branch_id,
        )

        moment = resolve_date(request.date)
        branch = await self._branch(request.branch_id)

        # 1. Build rows
        if request.type == MovementType.CONVERSION:
            source = await self._line(request.source)  # type: ignore[arg-type]
            target = await self._line(request.target)  # type: ignore[arg-type]
            movements = build_conversion(
                branch.id,
                source,
                target,
                moment,
                request.remission_number,
                branch_name=branch.name,
                comment=request.comment,
            )
            lines = [source, target]
        else:
            lines = [await self._line(line) for line in request.lines]
            if request.type == MovementType.INFLOW:
                movements = build_inflow(
                    branch.id,
                    lines,
                    moment,
                    request.remission_number,
                    branch_name=branch.name,
                    provider_id=request.provider_id,
                    provider_name=request.provider_name,
                    comment=request.comment,
                )
            elif request.type == MovementType.OUTFLOW:
                movements = build_outflow(
                    branch.id,
                    lines,
                    moment,
                    request.remission_number,
                    client_type=request.client_type,
                    reference=request.client_reference,
                    branch_name=branch.name,
                    comment=request.comment,
                )
            else:
                destination = await self._branch(request.to_branch_id)  # type: ignore[arg-type]
                movements = build_transfer(
                    branch.id,
                    destination.id,
                    lines,
                    moment,
                    request.remission_number,
                    from_branch_name=branch.name,
                    to_branch_name=destination.name,
                    comment=request.comment,
                )

        ledger = await self._get_ledger_store()

        # 2. Make room when inserting into an existing remission
        shifted = 0
        if request.insert_at_index is not None:
            shifted = await ledger.shift_indices(
                request.remission_number,
                request.insert_at_index,
                by=len(movements),
            )
            movements = place_at_index(movements, request.insert_at_index)

        # 3. Insert as one group
        movements = await ledger.add_movements(movements)

        # 4. Provider inflows open or grow the payable invoice
        invoice = None
        if request.type == MovementType.INFLOW and request.provider_id:
            invoice = await self._register_payable(request, moment, lines_subtotal(lines))

        logger.info(
            "record_movements_complete",
            remission_number=request.remission_number,
            rows=len(movements),
            shifted=shifted,
        )

        return RecordMovementsResult(movements=movements, invoice=invoice, shifted=shifted)

    async def _register_payable(
        self,
        request: RecordMovementsRequest,
        moment: datetime,
        subtotal: float,
    ) -> PayableInvoice:
        invoice_store = await self._get_invoice_store()
        amount = invoice_total(subtotal, request.iva, request.retefuente)

        invoice = await invoice_store.get_by_remission(request.remission_number)
        if invoice is not None:
            invoice.subtotal += subtotal
            invoice.iva += request.iva
            invoice.retefuente += request.retefuente
            invoice.total_amount += amount
            logger.info(
                "payable_increased",
                remission_number=request.remission_number,
                total_amount=invoice.total_amount,
            )
        else:
            invoice = PayableInvoice(
                remission_number=request.remission_number,
                provider_id=request.provider_id,  # type: ignore[arg-type]
                provider_name=request.provider_name,
                date=moment,
                due_date=resolve_date(request.due_date) if request.due_date else None,
                subtotal=subtotal,
                iva=request.iva,
                retefuente=request.retefuente,
                total_amount=amount,
            )
            logger.info(
                "payable_created",
                remission_number=request.remission_number,
                total_amount=amount,
            )
        return await invoice_store.save_invoice(invoice)
