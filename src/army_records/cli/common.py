"""
Shared command-line plumbing: database options and component wiring.
"""

import argparse
import json
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from army_records.batch import ConversionPipeline, HoldingAreas
from army_records.config import Settings
from army_records.core.rules import SchemaValidator
from army_records.warehouse import DatabaseConnectionPool, ProcessingLedger, SoldierWriter


def add_db_arguments(parser: argparse.ArgumentParser) -> None:
    """Add --db-* options defaulting to the DB_* environment variables."""
    parser.add_argument(
        "--db-host",
        default=os.getenv("DB_HOST", "localhost"),
        help="Database host (default: $DB_HOST or localhost)"
    )
    parser.add_argument(
        "--db-port",
        type=int,
        default=int(os.getenv("DB_PORT", "5432")),
        help="Database port (default: $DB_PORT or 5432)"
    )
    parser.add_argument(
        "--db-name",
        default=os.getenv("DB_NAME", "army_records"),
        help="Database name (default: $DB_NAME or army_records)"
    )
    parser.add_argument(
        "--db-user",
        default=os.getenv("DB_USER", "army_records"),
        help="Database user (default: $DB_USER or army_records)"
    )
    parser.add_argument(
        "--db-password",
        default=os.getenv("DB_PASSWORD"),
        help="Database password (default: $DB_PASSWORD)"
    )


def build_pool(args: argparse.Namespace) -> DatabaseConnectionPool:
    """Create (not open) a connection pool from parsed --db-* options."""
    return DatabaseConnectionPool(
        host=args.db_host,
        port=args.db_port,
        database=args.db_name,
        user=args.db_user,
        password=args.db_password,
    )


def build_areas(settings: Settings) -> HoldingAreas:
    areas = HoldingAreas(settings.data_dir, max_file_size=settings.max_file_size)
    areas.ensure()
    return areas


def build_pipeline(pool: DatabaseConnectionPool, settings: Settings) -> ConversionPipeline:
    """Wire a pipeline onto an open pool."""
    validator = (
        SchemaValidator.from_yaml(settings.rules_path)
        if settings.rules_path else SchemaValidator()
    )
    return ConversionPipeline(
        areas=build_areas(settings),
        store=SoldierWriter(pool),
        ledger=ProcessingLedger(pool),
        validator=validator,
    )


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    return value


def print_json(value: Any) -> None:
    print(json.dumps(to_jsonable(value), indent=2, default=str))


@contextmanager
def open_pool(args: argparse.Namespace) -> Iterator[DatabaseConnectionPool]:
    """Open a pool from --db-* options for the duration of a command."""
    pool = build_pool(args)
    pool.open()
    try:
        yield pool
    finally:
        pool.close()


def format_timestamp(ts: datetime | str | None) -> str:
    """Format timestamp for display."""
    if isinstance(ts, str):
        return ts
    return ts.strftime("%Y-%m-%d %H:%M:%S") if ts else "N/A"
