"""
Pytest configuration and fixtures for army-records tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Generator
from xml.sax.saxutils import escape

import psycopg
import pytest
from openpyxl import Workbook
from testcontainers.postgres import PostgresContainer

from army_records.batch import ConversionPipeline, HoldingAreas
from army_records.core.models import ProcessingLogEntry, SoldierRecord, StoredSoldier
from army_records.core.schema.fields import FIELD_KEYS, SHEET_HEADERS
from army_records.observability.logger import PACKAGE_LOGGER, setup_logger
from army_records.warehouse import (
    DatabaseConnectionPool,
    ProcessingLedger,
    SchemaManager,
    SoldierWriter,
)


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SAMPLE DATA
# =======================

VALID_SOLDIERS = [
    {
        "id": "S-1001",
        "name": "Jane Doe",
        "rank": "Sergeant",
        "unit": "1st Infantry",
        "service_date": "2015-06-01",
        "status": "Active",
    },
    {
        "id": "S-1002",
        "name": "John Smith",
        "rank": "Captain",
        "unit": "2nd Armored",
        "service_date": "2009-11-15",
        "status": "Retired",
    },
    {
        "id": "S-1003",
        "name": "Maria Garcia",
        "rank": "Private",
        "unit": "1st Infantry",
        "service_date": "2021-01-20",
        "status": "Active",
    },
]


def soldiers(**overrides_by_position: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Copy of VALID_SOLDIERS with per-position overrides.

    soldiers(second={"rank": None}) drops the rank of soldier 2; a None
    override removes the field entirely.
    """
    positions = {"first": 0, "second": 1, "third": 2}
    result = [dict(s) for s in VALID_SOLDIERS]
    for position, overrides in overrides_by_position.items():
        record = result[positions[position]]
        for key, value in overrides.items():
            if value is None:
                record.pop(key, None)
            else:
                record[key] = value
    return result


def build_xml(records: Iterable[dict[str, Any]], root: str = "army_records") -> bytes:
    """Render soldier dictionaries as an XML submission."""
    parts = ["<?xml version=\"1.0\" encoding=\"UTF-8\"?>", f"<{root}>"]
    for record in records:
        parts.append("  <soldier>")
        for key, value in record.items():
            parts.append(f"    <{key}>{escape(str(value))}</{key}>")
        parts.append("  </soldier>")
    parts.append(f"</{root}>")
    return "\n".join(parts).encode("utf-8")


def write_sheet(
    path,
    rows: Iterable[Iterable[Any]],
    header: Iterable[str] = SHEET_HEADERS
):
    """Write an .xlsx file with a header row and data rows."""
    wb = Workbook()
    ws = wb.active
    ws.append(list(header))
    for row in rows:
        ws.append(list(row))
    wb.save(path)
    return path


def as_rows(records: Iterable[dict[str, Any]]) -> list[list[Any]]:
    return [[record.get(key, "") for key in FIELD_KEYS] for record in records]


@pytest.fixture
def valid_soldiers() -> list[dict[str, Any]]:
    return [dict(s) for s in VALID_SOLDIERS]


@pytest.fixture
def valid_xml() -> bytes:
    return build_xml(VALID_SOLDIERS)


@pytest.fixture
def make_soldiers():
    return soldiers


@pytest.fixture
def make_xml():
    return build_xml


@pytest.fixture
def make_sheet():
    return write_sheet


@pytest.fixture
def sheet_rows():
    return as_rows


# =======================
# IN-MEMORY STORE FAKES
# =======================

class FakeSoldierStore:
    """
    Dictionary-backed stand-in for SoldierWriter.

    Ids listed in fail_ids are refused with a DataError; when unreachable
    is set every write raises OperationalError.
    """

    def __init__(self, fail_ids: Iterable[str] = (), unreachable: bool = False):
        self.records: dict[str, StoredSoldier] = {}
        self.fail_ids = set(fail_ids)
        self.unreachable = unreachable
        self.writes = 0

    def upsert_soldier(self, record: SoldierRecord, now: datetime | None = None) -> StoredSoldier:
        if self.unreachable:
            raise psycopg.OperationalError("connection refused")
        if record.id in self.fail_ids:
            raise psycopg.DataError(f"value rejected for {record.id}")

        self.writes += 1
        stamp = now or datetime.utcnow()
        existing = self.records.get(record.id)
        stored = StoredSoldier(
            **record.model_dump(),
            created_at=existing.created_at if existing else stamp,
            updated_at=stamp,
        )
        self.records[record.id] = stored
        return stored


class FakeLedger:
    """List-backed stand-in for ProcessingLedger."""

    def __init__(self):
        self.entries: list[ProcessingLogEntry] = []

    def record(self, entry: ProcessingLogEntry) -> ProcessingLogEntry:
        stored = entry.model_copy(update={"log_id": len(self.entries) + 1})
        self.entries.append(stored)
        return stored


@pytest.fixture
def store_factory():
    return FakeSoldierStore


@pytest.fixture
def fake_store() -> FakeSoldierStore:
    return FakeSoldierStore()


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def areas(tmp_path) -> HoldingAreas:
    holding = HoldingAreas(tmp_path / "data")
    holding.ensure()
    return holding


@pytest.fixture
def pipeline(areas, fake_store, fake_ledger) -> ConversionPipeline:
    return ConversionPipeline(areas=areas, store=fake_store, ledger=fake_ledger)


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    with PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_army",
        password="test_password",
        dbname="test_army_records"
    ) as postgres:
        # Wait for container to be ready
        postgres.get_connection_url()
        yield postgres


@pytest.fixture(scope="session")
def db_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Open a connection pool on the test container and create the tables.
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_army_records",
        user="test_army",
        password="test_password",
    )
    pool.open()
    SchemaManager(pool).create_tables()

    yield pool

    pool.close()


@pytest.fixture(scope="function")
def clean_db(db_pool) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Provide a clean database by truncating all tables before each test
    """
    SchemaManager(db_pool).truncate_tables()
    yield db_pool


@pytest.fixture
def soldier_writer(clean_db) -> SoldierWriter:
    return SoldierWriter(clean_db)


@pytest.fixture
def ledger(clean_db) -> ProcessingLedger:
    return ProcessingLedger(clean_db)


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_env_vars():
    """
    Set test environment variables

    This fixture loads config/test.env when present
    """
    from dotenv import load_dotenv

    env_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "test.env"
    )

    if os.path.exists(env_path):
        load_dotenv(env_path, override=True)


@pytest.fixture(autouse=True)
def package_log_handler():
    """
    Rebind the package log handler after each test.

    CLI entry points reconfigure logging onto the sys.stderr of the moment,
    which is a capture stream closed when capsys/capfd tear down.
    """
    yield
    setup_logger(PACKAGE_LOGGER)
