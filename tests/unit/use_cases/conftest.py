"""Mock stores shared by use case tests."""

from unittest.mock import AsyncMock

import pytest

from agrostock.core.entities import Branch, Product


@pytest.fixture
def mock_catalog_store():
    """Catalog with branches B1/B2 and products P1/P2."""
    branches = {
        "B1": Branch(id="B1", name="Sede Principal"),
        "B2": Branch(id="B2", name="Sede Norte"),
    }
    products = {
        "P1": Product(id="P1", name="Urea 46%"),
        "P2": Product(id="P2", name="Cal Dolomita"),
    }
    store = AsyncMock()
    store.get_branch = AsyncMock(side_effect=lambda branch_id: branches.get(branch_id))
    store.get_product = AsyncMock(side_effect=lambda product_id: products.get(product_id))
    store.list_branches = AsyncMock(return_value=list(branches.values()))
    store.list_products = AsyncMock(return_value=list(products.values()))
    return store


@pytest.fixture
def mock_ledger_store():
    """Empty ledger that echoes inserted rows."""
    store = AsyncMock()
    store.add_movements = AsyncMock(side_effect=lambda movements: movements)
    store.update_movement = AsyncMock(side_effect=lambda movement: movement)
    store.list_all_movements = AsyncMock(return_value=[])
    store.get_remission = AsyncMock(return_value=[])
    store.list_remission_numbers = AsyncMock(return_value=[])
    store.shift_indices = AsyncMock(return_value=0)
    return store


@pytest.fixture
def mock_invoice_store():
    """No payables yet; saves echo the invoice."""
    store = AsyncMock()
    store.get_by_remission = AsyncMock(return_value=None)
    store.save_invoice = AsyncMock(side_effect=lambda invoice: invoice)
    return store
