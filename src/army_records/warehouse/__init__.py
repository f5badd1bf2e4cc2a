"""
PostgreSQL persistence for soldier records and the processing ledger.
"""

from .audit import ProcessingLedger
from .connection import DatabaseConnectionPool
from .health import check_store_health
from .schema_mgmt import SchemaManager
from .upsert import SoldierWriter

__all__ = [
    "DatabaseConnectionPool",
    "ProcessingLedger",
    "SchemaManager",
    "SoldierWriter",
    "check_store_health",
]
