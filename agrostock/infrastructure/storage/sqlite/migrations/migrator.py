"""
Versioned SQL migrations for the AgroStock database.

Migrations are ``vNNN_<name>.sql`` files next to this module, applied in
version order and recorded in ``schema_migrations`` with a checksum. An
existing database is copied aside before migrating and restored if the
run blows up; the copy is removed after a clean run.
"""

import hashlib
import re
import shutil
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from agrostock.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = [
    "products",
    "branches",
    "stock_movements",
    "payable_invoices",
    "inventory_counts",
    "inventory_count_items",
    "schema_migrations",
]

_TRACKING_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT NOT NULL,
    execution_time_ms INTEGER,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
)
"""


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest)


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _resolve(db_path: Path | None) -> Path:
    return db_path or get_settings().storage.db_path


@asynccontextmanager
async def _connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA foreign_keys=ON")
        yield conn


def discover_migrations(directory: Path | None = None) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in sorted((directory or MIGRATIONS_DIR).glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum; empty before the tracking table exists."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    """Highest applied version, or None for an unmigrated database."""
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.perf_counter()

    def elapsed() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            """
            INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(migration.version, migration.name, False, elapsed(), str(e))

    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed())
    return MigrationResult(migration.version, migration.name, True, elapsed())


def create_backup(db_path: Path) -> Path:
    """Copy the database next to itself with a UTC timestamp suffix."""
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_name(f"{db_path.stem}.backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    """Put a backup back in place of the database."""
    shutil.copy2(backup_path, db_path)
    logger.info("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
    migrations_dir: Path | None = None,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Stops at the first failing migration. Already-applied migrations whose
    file changed since are reported with a warning, never re-run.

    Args:
        db_path: Database file (default from settings).
        create_backup_before: Copy an existing database aside first.
        migrations_dir: Directory holding vNNN_*.sql files.

    Returns:
        One result per migration attempted; empty when up to date.
    """
    db_path = _resolve(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None
    results: list[MigrationResult] = []

    try:
        async with _connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute(_TRACKING_TABLE)
            await conn.commit()

            applied = await get_applied_migrations(conn)
            for migration in discover_migrations(migrations_dir):
                known = applied.get(migration.version)
                if known is not None:
                    if known != migration.checksum:
                        logger.warning("migration_checksum_changed", version=migration.version)
                    continue

                result = await _apply(conn, migration)
                results.append(result)
                if not result.success:
                    break

                cursor = await conn.execute("PRAGMA foreign_key_check")
                if await cursor.fetchall():
                    logger.error("foreign_key_violations_after_migration", version=migration.version)
                    break
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()
        logger.info("backup_cleaned_up")

    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Applied and pending versions of a database."""
    db_path = _resolve(db_path)
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with _connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": sorted(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """Foreign key, page integrity and required-table checks (PASS/FAIL each)."""
    async with _connect(_resolve(db_path)) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = len(await cursor.fetchall())

        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}

    missing = [t for t in REQUIRED_TABLES if t not in tables]
    return [
        {"check": "foreign_keys", "status": "FAIL" if violations else "PASS", "violations": violations},
        {"check": "integrity", "status": "PASS" if integrity == "ok" else "FAIL", "result": integrity},
        {"check": "required_tables", "status": "FAIL" if missing else "PASS", "missing": missing},
    ]
