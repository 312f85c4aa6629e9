"""Catalog entities: products and branches."""

from datetime import datetime

from pydantic import BaseModel


class Product(BaseModel):
    """A sellable product."""

    id: str
    name: str
    description: str | None = None
    price: float = 0.0  # sale price
    purchase_price: float | None = None
    created_at: datetime | None = None


class Branch(BaseModel):
    """A store location holding its own stock."""

    id: str
    name: str
    location: str | None = None
    manager: str | None = None
    created_at: datetime | None = None


def sort_by_name(products: list[Product]) -> list[Product]:
    """Alphabetical display order used by counts and summaries."""
    return sorted(products, key=lambda p: (p.name or "").casefold())
