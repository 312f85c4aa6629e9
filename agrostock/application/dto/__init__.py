"""Data Transfer Objects for use case contracts."""

from agrostock.application.dto.requests import (
    CreateInventoryCountRequest,
    EqualizeCountRequest,
    ImportInventoryRequest,
    ImportLayerRequest,
    ImportRowRequest,
    MovementLineRequest,
    RecordMovementsRequest,
    UpdateMovementRequest,
    UpdatePhysicalQuantitiesRequest,
)

__all__ = [
    "CreateInventoryCountRequest",
    "EqualizeCountRequest",
    "ImportInventoryRequest",
    "ImportLayerRequest",
    "ImportRowRequest",
    "MovementLineRequest",
    "RecordMovementsRequest",
    "UpdateMovementRequest",
    "UpdatePhysicalQuantitiesRequest",
]
