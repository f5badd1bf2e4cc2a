"""
Admin CLI for inspecting soldier records, the ledger and holding areas.

Usage:
    army-records-admin download --name <file.xlsx> --output <path>
    army-records-admin soldiers [--status S] [--unit U] [--page N] [--page-size N] [--json]
    army-records-admin logs [--limit N] [--json]
    army-records-admin summary [--json]
    army-records-admin db-status
    army-records-admin export --output <file.xlsx>
    army-records-admin init-db
"""

import argparse
import shutil
import sys
from pathlib import Path

import psycopg
from dotenv import load_dotenv

from army_records.batch.holding_areas import HoldingAreas
from army_records.batch.writers import SoldierExportWriter
from army_records.config import Settings
from army_records.core.errors import ArmyRecordsError
from army_records.observability.logger import configure_logging, get_logger
from army_records.utils.validation import (
    validate_limit,
    validate_page,
    validate_page_size,
    validate_status,
)
from army_records.warehouse import (
    ProcessingLedger,
    SchemaManager,
    SoldierWriter,
    check_store_health,
)

from .common import add_db_arguments, build_pool, format_timestamp, open_pool, print_json

logger = get_logger(__name__)


def download_command(args, settings: Settings) -> int:
    """
    Copy a generated spreadsheet out of the excel_exports area.
    """
    areas = HoldingAreas(settings.data_dir)
    source = areas.resolve_download(args.name)

    output = Path(args.output)
    if output.is_dir():
        output = output / source.name
    shutil.copyfile(source, output)

    print(f"Downloaded {source.name} to {output}")
    return 0


def soldiers_command(args, settings: Settings) -> int:
    """
    List stored soldiers, newest first.
    """
    status = validate_status(args.status)
    page = validate_page(args.page)
    page_size = validate_page_size(args.page_size)

    with open_pool(args) as pool:
        result = SoldierWriter(pool).list_soldiers(
            status=status,
            unit=args.unit,
            page=page,
            page_size=page_size
        )

    if args.json:
        print_json(result)
        return 0

    print(f"\n{'=' * 100}")
    print("SOLDIER RECORDS")
    print(f"{'=' * 100}\n")
    print(f"Total: {result.total}  Page {result.current_page} of {max(result.total_pages, 1)}\n")

    if not result.soldiers:
        print("No soldier records found matching the criteria.\n")
        return 0

    print(f"{'ID':<12} {'Name':<25} {'Rank':<15} {'Unit':<20} {'Service Date':<13} {'Status'}")
    print(f"{'-' * 100}")
    for soldier in result.soldiers:
        print(
            f"{soldier.id:<12} {soldier.name:<25} {soldier.rank:<15} "
            f"{soldier.unit:<20} {soldier.service_date.isoformat():<13} {soldier.status}"
        )
    print(f"\n{'=' * 100}\n")
    return 0


def logs_command(args, settings: Settings) -> int:
    """
    Show the most recent processing ledger entries.
    """
    limit = validate_limit(args.limit)

    with open_pool(args) as pool:
        entries = ProcessingLedger(pool).recent(limit=limit)

    if args.json:
        print_json(entries)
        return 0

    print(f"\n{'=' * 100}")
    print("PROCESSING LOG")
    print(f"{'=' * 100}\n")

    if not entries:
        print("No files have been processed yet.\n")
        return 0

    print(f"{'Processed':<20} {'Outcome':<10} {'Accepted':>8} {'Rejected':>8}  {'File'}")
    print(f"{'-' * 100}")
    for entry in entries:
        print(
            f"{format_timestamp(entry.processed_at):<20} {entry.outcome:<10} "
            f"{entry.accepted_count:>8} {entry.rejected_count:>8}  {entry.filename}"
        )
        if args.show_violations:
            for message in entry.violations:
                print(f"{'':<22}{message}")
    print(f"\n{'=' * 100}\n")
    return 0


def summary_command(args, settings: Settings) -> int:
    """
    Show holding-area contents and store counts.
    """
    areas = HoldingAreas(settings.data_dir).summary()

    with open_pool(args) as pool:
        writer = SoldierWriter(pool)
        store = {
            "total_soldiers": writer.count(),
            "active_soldiers": writer.count(status="Active"),
        }
        ledger = ProcessingLedger(pool).summary()

    if args.json:
        print_json({**areas, "store": store, "ledger": ledger})
        return 0

    print(f"\n{'=' * 60}")
    print("RECORDS SUMMARY")
    print(f"{'=' * 60}\n")

    print("Holding Areas:")
    for name, area in areas["areas"].items():
        print(f"  {name:<20} {area['count']:>8}")
    print(f"  {'total':<20} {areas['total_files']:>8}\n")

    print("Store:")
    print(f"  Total soldiers: {store['total_soldiers']}")
    print(f"  Active soldiers: {store['active_soldiers']}\n")

    print("Ledger:")
    print(f"  Total runs: {ledger['total_runs']}")
    for outcome, runs in sorted(ledger["runs_by_outcome"].items()):
        print(f"  {outcome:<20} {runs:>8}")
    print(f"\n{'=' * 60}\n")
    return 0


def db_status_command(args, settings: Settings) -> int:
    """
    Probe the store and print the health result as JSON.

    Exits with status 1 when the store is unreachable.
    """
    pool = build_pool(args)
    try:
        health = check_store_health(pool)
    finally:
        pool.close()

    print_json(health)
    return 0 if health.connected else 1


def export_command(args, settings: Settings) -> int:
    """
    Export every stored soldier to a spreadsheet.
    """
    with open_pool(args) as pool:
        count = SoldierExportWriter().write(SoldierWriter(pool).iter_all(), args.output)

    print(f"Exported {count} soldier records to {args.output}")
    return 0


def init_db_command(args, settings: Settings) -> int:
    """
    Create the store tables and the holding-area directories.
    """
    HoldingAreas(settings.data_dir).ensure()
    with open_pool(args) as pool:
        SchemaManager(pool).create_tables()

    print("Database tables and holding areas are ready")
    return 0


COMMANDS = {
    "download": download_command,
    "soldiers": soldiers_command,
    "logs": logs_command,
    "summary": summary_command,
    "db-status": db_status_command,
    "export": export_command,
    "init-db": init_db_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="army-records-admin",
        description="Administration commands for army personnel records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch the correction sheet of a rejected upload
  army-records-admin download --name 1700000000000-ab12cd34-march_schema_errors.xlsx --output .

  # Active soldiers of any unit containing "infantry"
  army-records-admin soldiers --status Active --unit infantry

  # Ten most recent processing runs with their violations
  army-records-admin logs --limit 10 --show-violations
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # download command
    download_parser = subparsers.add_parser(
        "download",
        help="Copy an annotated spreadsheet out of excel_exports"
    )
    download_parser.add_argument(
        "--name",
        required=True,
        help="File name in the excel_exports area"
    )
    download_parser.add_argument(
        "--output",
        default=".",
        help="Destination file or directory (default: current directory)"
    )

    # soldiers command
    soldiers_parser = subparsers.add_parser("soldiers", help="List stored soldier records")
    soldiers_parser.add_argument(
        "--status",
        help="Exact status filter (Active, Retired, Deceased)"
    )
    soldiers_parser.add_argument(
        "--unit",
        help="Case-insensitive unit substring filter"
    )
    soldiers_parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page number (default: 1)"
    )
    soldiers_parser.add_argument(
        "--page-size",
        type=int,
        default=10,
        help="Records per page (default: 10)"
    )
    soldiers_parser.add_argument("--json", action="store_true", help="Print JSON")
    add_db_arguments(soldiers_parser)

    # logs command
    logs_parser = subparsers.add_parser("logs", help="Show recent processing log entries")
    logs_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum number of entries (default: 50)"
    )
    logs_parser.add_argument(
        "--show-violations",
        action="store_true",
        help="Print the violations of each entry"
    )
    logs_parser.add_argument("--json", action="store_true", help="Print JSON")
    add_db_arguments(logs_parser)

    # summary command
    summary_parser = subparsers.add_parser("summary", help="Holding-area and store summary")
    summary_parser.add_argument("--json", action="store_true", help="Print JSON")
    add_db_arguments(summary_parser)

    # db-status command
    status_parser = subparsers.add_parser("db-status", help="Check store connectivity")
    add_db_arguments(status_parser)

    # export command
    export_parser = subparsers.add_parser("export", help="Export all soldiers to a spreadsheet")
    export_parser.add_argument(
        "--output",
        required=True,
        help="Path of the .xlsx file to write"
    )
    add_db_arguments(export_parser)

    # init-db command
    init_parser = subparsers.add_parser("init-db", help="Create tables and holding areas")
    add_db_arguments(init_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        settings = Settings.from_env()
        configure_logging(settings)
        return handler(args, settings)

    except ArmyRecordsError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except (psycopg.OperationalError, OSError, ValueError) as e:
        logger.error(f"Error running {args.command}: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
