"""Infrastructure layer implementations."""

from agrostock.infrastructure import storage

__all__ = ["storage"]
