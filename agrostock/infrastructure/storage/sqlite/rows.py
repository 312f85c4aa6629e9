"""Column conversion helpers shared by the SQLite stores."""

import uuid
from datetime import UTC, datetime

from agrostock.core.entities.movement import as_utc


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


def to_db_timestamp(value: datetime | None) -> str | None:
    """Fixed-width UTC ISO text, so lexical order matches time order."""
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return as_utc(datetime.fromisoformat(value))
