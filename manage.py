#!/usr/bin/env python3
"""
AgroStock management CLI.

Usage:
    python manage.py migrate             Apply pending schema migrations
    python manage.py status              Show migration status
    python manage.py verify              Verify schema integrity
    python manage.py positions           FIFO valuation per product and branch
    python manage.py theoretical BRANCH  Theoretical stock of a branch
    python manage.py import FILE         Import initial inventory from JSON
    python manage.py apply COUNT_ID      Post adjustments of a completed count
"""

import argparse
import asyncio
import sys
from pathlib import Path

from agrostock.application.dto import ImportInventoryRequest
from agrostock.application.use_cases import (
    ApplyCountAdjustmentsUseCase,
    BranchTheoreticalStockUseCase,
    ImportInventoryUseCase,
    ValueInventoryUseCase,
)
from agrostock.config import configure_logging
from agrostock.core.exceptions import AgroStockError
from agrostock.infrastructure.storage.sqlite import close_pool
from agrostock.infrastructure.storage.sqlite.migrations import (
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


async def cmd_migrate(args: argparse.Namespace) -> int:
    results = await initialize_database(
        args.db_path,
        create_backup_before=not args.no_backup,
    )
    if not results:
        print("Database is up to date.")
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    return 0 if all(r.success for r in results) else 1


async def cmd_status(args: argparse.Namespace) -> int:
    status = await get_migration_status(args.db_path)
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status.get('current_version', 'N/A')}")
    print(f"Applied migrations: {status.get('applied_migrations', [])}")
    print(f"Pending migrations: {status.get('pending_migrations', [])}")
    return 0


async def cmd_verify(args: argparse.Namespace) -> int:
    checks = await verify_schema_integrity(args.db_path)
    failed = False
    for check in checks:
        status = "PASS" if check["status"] == "PASS" else "FAIL"
        print(f"[{status}] {check['check']}")
        if check["status"] != "PASS":
            failed = True
            for key, value in check.items():
                if key not in ("check", "status"):
                    print(f"       {key}: {value}")
    return 1 if failed else 0


async def cmd_positions(args: argparse.Namespace) -> int:
    result = await ValueInventoryUseCase().execute(branch_id=args.branch)
    for summary in result.summaries:
        print(
            f"{summary.product_name:<40} qty={summary.total_quantity:>10.2f} "
            f"value={summary.total_value:>14.2f} avg={summary.average_cost:>10.2f}"
        )
        for position in summary.branches:
            flag = "  OVERSOLD" if position.is_oversold else ""
            print(
                f"    {position.branch_name or position.branch_id:<36} "
                f"qty={position.quantity:>10.2f} value={position.total_value:>14.2f}{flag}"
            )
    print(f"Total value: {result.total_value:.2f}")
    if result.report.rejected:
        print(f"Rejected movements: {len(result.report.rejected)}")
    return 0


async def cmd_theoretical(args: argparse.Namespace) -> int:
    rows = await BranchTheoreticalStockUseCase().execute(
        args.branch_id, exclude_count_id=args.exclude_count
    )
    for row in rows:
        print(
            f"{row.product_name or row.product_id:<40} initial={row.initial:>10.2f} "
            f"in={row.inflows:>10.2f} out={row.outflows:>10.2f} "
            f"theoretical={row.theoretical:>10.2f}"
        )
    return 0


async def cmd_import(args: argparse.Namespace) -> int:
    request = ImportInventoryRequest.model_validate_json(args.file.read_text(encoding="utf-8"))
    result = await ImportInventoryUseCase().execute(request)
    print(f"Imported rows: {result.imported_rows}")
    for remission in result.remissions:
        print(f"  Remission: {remission}")
    for skipped in result.skipped:
        print(f"  Skipped '{skipped.row.product_name}' @ '{skipped.row.branch_name}': {skipped.reason}")
    return 0


async def cmd_apply(args: argparse.Namespace) -> int:
    result = await ApplyCountAdjustmentsUseCase().execute(args.count_id)
    print(f"Adjustments posted under {result.remission_number}: {len(result.movements)} rows")
    return 0


async def _run(args: argparse.Namespace) -> int:
    try:
        return await args.func(args)
    except AgroStockError as e:
        print(f"Error [{e.code}]: {e.message}")
        return 1
    finally:
        await close_pool()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="AgroStock management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_status.set_defaults(func=cmd_status)

    # verify
    p_verify = sub.add_parser("verify", help="Verify schema integrity")
    p_verify.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_verify.set_defaults(func=cmd_verify)

    # positions
    p_positions = sub.add_parser("positions", help="FIFO inventory valuation")
    p_positions.add_argument("--branch", help="Restrict to one branch id")
    p_positions.set_defaults(func=cmd_positions)

    # theoretical
    p_theoretical = sub.add_parser("theoretical", help="Theoretical stock of a branch")
    p_theoretical.add_argument("branch_id", help="Branch id")
    p_theoretical.add_argument("--exclude-count", help="Count id to ignore as baseline")
    p_theoretical.set_defaults(func=cmd_theoretical)

    # import
    p_import = sub.add_parser("import", help="Import initial inventory from a JSON file")
    p_import.add_argument("file", type=Path, help="JSON file with {\"rows\": [...], \"date\": ...}")
    p_import.set_defaults(func=cmd_import)

    # apply
    p_apply = sub.add_parser("apply", help="Post adjustments of a completed count")
    p_apply.add_argument("count_id", help="Inventory count id")
    p_apply.set_defaults(func=cmd_apply)

    args = parser.parse_args()
    configure_logging()
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
