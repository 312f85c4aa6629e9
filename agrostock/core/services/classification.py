"""
Movement classification and ingestion.

Every aggregation in the system (FIFO valuation, theoretical stock,
stock-log grouping) reads direction from classify(). Raw ledger records
are validated and classified once at the data-access boundary by
ingest_movements().
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from agrostock.config import get_logger
from agrostock.core.entities.movement import (
    ClassifiedMovement,
    Direction,
    MovementType,
    StockMovement,
)
from agrostock.core.exceptions import ValidationError

logger = get_logger(__name__)

# Comment substrings that mark a pre-ledger starting balance
INITIAL_MARKERS = ("inicial", "initial")


def classify(movement: StockMovement) -> ClassifiedMovement | None:
    """
    Tag a movement as an Addition or a Subtraction.

    inflow is always an Addition and outflow always a Subtraction. The
    signed types (transfer, conversion, adjustment) take their direction
    from the sign of the quantity; a zero quantity is neither.

    Returns:
        ClassifiedMovement with the absolute quantity, or None.
    """
    magnitude = abs(movement.quantity)

    if movement.type == MovementType.INFLOW:
        return ClassifiedMovement(movement, Direction.ADDITION, magnitude)
    if movement.type == MovementType.OUTFLOW:
        return ClassifiedMovement(movement, Direction.SUBTRACTION, magnitude)

    if movement.quantity > 0:
        return ClassifiedMovement(movement, Direction.ADDITION, magnitude)
    if movement.quantity < 0:
        return ClassifiedMovement(movement, Direction.SUBTRACTION, magnitude)
    return None


def classify_all(
    movements: Iterable[StockMovement | ClassifiedMovement],
) -> list[ClassifiedMovement]:
    """Classify entities, passing already-classified movements through."""
    classified: list[ClassifiedMovement] = []
    for item in movements:
        if isinstance(item, ClassifiedMovement):
            classified.append(item)
            continue
        result = classify(item)
        if result is not None:
            classified.append(result)
    return classified


def is_initial_marker(comment: str | None) -> bool:
    """Check whether a comment flags the movement as an initial balance."""
    if not comment:
        return False
    lowered = comment.lower()
    return any(marker in lowered for marker in INITIAL_MARKERS)


@dataclass
class RejectedMovement:
    """A raw record excluded from aggregation."""

    record: dict[str, Any]
    reason: str


@dataclass
class IngestionResult:
    """Classified movements plus the records that failed validation."""

    movements: list[ClassifiedMovement] = field(default_factory=list)
    rejected: list[RejectedMovement] = field(default_factory=list)
    neutral: int = 0  # valid rows with no stock effect

    @property
    def entities(self) -> list[StockMovement]:
        return [cm.movement for cm in self.movements]


def _get(record: dict[str, Any], name: str) -> Any:
    """Read a field by snake_case name, falling back to camelCase."""
    if name in record:
        return record[name]
    return record.get(to_camel(name))


def parse_movement_date(value: Any) -> datetime:
    """
    Parse a movement date.

    Raises:
        ValidationError: If the date is missing or cannot be parsed.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationError("date", "unparseable movement date", value) from e
    raise ValidationError("date", "missing movement date", value)


def parse_quantity(value: Any) -> float | None:
    """Coerce a quantity to a finite float, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        quantity = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(quantity):
        return None
    return quantity


def _parse_price(value: Any) -> float:
    price = parse_quantity(value)
    return price if price is not None else 0.0


def _record_to_movement(record: dict[str, Any]) -> tuple[StockMovement | None, str]:
    """Build an entity from a raw record, or return the rejection reason."""
    moment = parse_movement_date(_get(record, "date"))

    product_id = _get(record, "product_id")
    branch_id = _get(record, "branch_id")
    if not product_id or not str(product_id).strip():
        return None, "missing product_id"
    if not branch_id or not str(branch_id).strip():
        return None, "missing branch_id"

    raw_type = _get(record, "type")
    try:
        movement_type = MovementType(raw_type)
    except ValueError:
        return None, f"unknown movement type: {raw_type!r}"

    quantity = parse_quantity(_get(record, "quantity"))
    if quantity is None:
        return None, "non-numeric quantity"

    data = {
        "id": _get(record, "id"),
        "product_id": str(product_id).strip(),
        "branch_id": str(branch_id).strip(),
        "type": movement_type,
        "quantity": quantity,
        "price_at_transaction": _parse_price(_get(record, "price_at_transaction")),
        "date": moment,
        "remission_number": _get(record, "remission_number"),
        "index_in_transaction": _get(record, "index_in_transaction"),
        "comment": _get(record, "comment"),
        "product_name": _get(record, "product_name"),
        "branch_name": _get(record, "branch_name"),
        "provider_id": _get(record, "provider_id"),
        "provider_name": _get(record, "provider_name"),
        "created_at": _get(record, "created_at"),
    }
    if data["id"] is not None:
        data["id"] = str(data["id"])

    try:
        return StockMovement(**data), ""
    except PydanticValidationError as e:
        return None, f"invalid record: {e.errors()[0].get('msg', 'unknown')}"


def _check_entity(movement: StockMovement) -> str:
    if not movement.product_id.strip():
        return "missing product_id"
    if not movement.branch_id.strip():
        return "missing branch_id"
    if not math.isfinite(movement.quantity):
        return "non-numeric quantity"
    return ""


def ingest_movements(
    records: Iterable[StockMovement | dict[str, Any]],
) -> IngestionResult:
    """
    Validate and classify raw ledger records.

    Malformed records (missing product or branch, unknown type,
    non-numeric quantity) are reported in `rejected` and never reach a
    running total. A non-finite price is coerced to 0.

    Args:
        records: Entities or dicts using snake_case or camelCase keys.

    Returns:
        IngestionResult with classified movements and rejections.

    Raises:
        ValidationError: If a record's date is missing or unparseable.
    """
    result = IngestionResult()

    for record in records:
        if isinstance(record, StockMovement):
            movement: StockMovement | None = record
            reason = _check_entity(record)
            raw = record.model_dump(mode="json")
            if not reason and not math.isfinite(record.price_at_transaction):
                movement = record.model_copy(update={"price_at_transaction": 0.0})
        else:
            raw = dict(record)
            movement, reason = _record_to_movement(raw)

        if reason or movement is None:
            logger.warning(
                "movement_rejected",
                movement_id=raw.get("id"),
                reason=reason,
            )
            result.rejected.append(RejectedMovement(record=raw, reason=reason))
            continue

        classified = classify(movement)
        if classified is None:
            result.neutral += 1
            continue
        result.movements.append(classified)

    return result
