"""
AgroStock settings.

Read from environment variables (and a local .env file). Each concern has
its own prefix: STORAGE_, LEDGER_ and COUNT_; top-level values such as
ENVIRONMENT and LOG_LEVEL have none.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the SQLite database lives and how it is opened."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "agrostock.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0)  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    """Paging of full-ledger reads (valuation, theoretical stock, stock log)."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    page_size: int = Field(default=1000, gt=0)
    max_rows: int = Field(default=50000, gt=0)

    @model_validator(mode="after")
    def page_fits_cap(self) -> "LedgerSettings":
        if self.page_size > self.max_rows:
            raise ValueError("LEDGER_PAGE_SIZE cannot exceed LEDGER_MAX_ROWS")
        return self


class CountSettings(BaseSettings):
    """Inventory count workflow."""

    model_config = SettingsConfigDict(env_prefix="COUNT_")

    lock_timeout: float = Field(default=30.0, gt=0)  # seconds, per-count apply lock


class Settings(BaseSettings):
    """Process-wide configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "AgroStock Inventory"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    count: CountSettings = Field(default_factory=CountSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Load settings once per process."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget loaded settings so the next get_settings() reloads (for testing)."""
    global _settings
    _settings = None
