"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import agrostock.infrastructure.storage.sqlite.connection as conn_module
from agrostock.application.use_cases.apply_count_adjustments import reset_apply_locks
from agrostock.config import reset_settings
from agrostock.core.entities import Branch, MovementType, Product, StockMovement
from agrostock.infrastructure.storage.sqlite import close_pool, reset_stores
from agrostock.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture(autouse=True)
def _isolate_singletons() -> Generator[None, None, None]:
    """Fresh settings and apply locks for every test."""
    reset_settings()
    reset_apply_locks()
    yield
    reset_settings()
    reset_apply_locks()


@pytest.fixture
def make_movement() -> Callable[..., StockMovement]:
    """Factory for ledger rows; `day` is the day of January 2024."""

    def _make(
        type: MovementType | str,
        quantity: float,
        day: int,
        price: float = 0.0,
        product_id: str = "P1",
        branch_id: str = "B1",
        **kwargs,
    ) -> StockMovement:
        return StockMovement(
            product_id=product_id,
            branch_id=branch_id,
            type=MovementType(type),
            quantity=quantity,
            price_at_transaction=price,
            date=datetime(2024, 1, day, 12, 0, tzinfo=UTC),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_products() -> list[Product]:
    """Catalog with two products, deliberately out of name order."""
    return [
        Product(id="P2", name="urea 46%", price=120.0),
        Product(id="P1", name="Abono Triple 15", price=95.0),
    ]


@pytest.fixture
def sample_branches() -> list[Branch]:
    """Two branches."""
    return [
        Branch(id="B1", name="Sede Principal"),
        Branch(id="B2", name="Sede Norte"),
    ]


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def initialized_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Migrated temporary database with the global pool pointed at it."""
    await initialize_database(temp_db_path, create_backup_before=False)

    conn_module._pool = None
    reset_stores()
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await close_pool()
            reset_stores()
