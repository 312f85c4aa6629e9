"""
Domain exceptions for the AgroStock application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class AgroStockError(Exception):
    """Base exception for all AgroStock errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(AgroStockError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class LedgerTooLargeError(StorageError):
    """The ledger holds more rows than a full read may load."""

    def __init__(self, max_rows: int):
        super().__init__(
            f"Ledger exceeds LEDGER_MAX_ROWS={max_rows}; refusing to compute from a partial ledger",
            code="LEDGER_TOO_LARGE",
            details={"max_rows": max_rows},
        )


# Lookup Exceptions
class NotFoundError(AgroStockError):
    """Referenced record does not resolve."""

    pass


class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class BranchNotFoundError(NotFoundError):
    """Branch not found."""

    def __init__(self, branch_id: str):
        super().__init__(
            f"Branch not found: {branch_id}",
            code="BRANCH_NOT_FOUND",
            details={"branch_id": branch_id},
        )


class MovementNotFoundError(NotFoundError):
    """Stock movement not found."""

    def __init__(self, movement_id: str):
        super().__init__(
            f"Stock movement not found: {movement_id}",
            code="MOVEMENT_NOT_FOUND",
            details={"movement_id": movement_id},
        )


class RemissionNotFoundError(NotFoundError):
    """No movements share the given remission number."""

    def __init__(self, remission_number: str):
        super().__init__(
            f"Remission not found: {remission_number}",
            code="REMISSION_NOT_FOUND",
            details={"remission_number": remission_number},
        )


class CountNotFoundError(NotFoundError):
    """Inventory count not found."""

    def __init__(self, count_id: str):
        super().__init__(
            f"Inventory count not found: {count_id}",
            code="COUNT_NOT_FOUND",
            details={"count_id": count_id},
        )


# Workflow Exceptions
class InvalidStateError(AgroStockError):
    """Operation rejected because of the count's current state."""

    def __init__(self, count_id: str, status: str, reason: str):
        super().__init__(
            f"Inventory count {count_id} ({status}): {reason}",
            code="INVALID_STATE",
            details={"count_id": count_id, "status": status, "reason": reason},
        )


# Validation Exceptions
class ValidationError(AgroStockError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(AgroStockError):
    """Configuration error."""

    pass
