"""
Store health probe.

check_store_health never raises: connectivity failures are reported in
the returned StoreHealth.
"""

import time

import psycopg

from army_records.core.models import StoreHealth
from army_records.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)


def check_store_health(pool: DatabaseConnectionPool) -> StoreHealth:
    """
    Probe the store with a count query.

    Args:
        pool: Database connection pool (opened if needed)

    Returns:
        StoreHealth describing the outcome
    """
    started = time.perf_counter()
    try:
        if not pool.is_open:
            pool.open(max_retries=1)
        result = pool.execute_query("SELECT COUNT(*) AS n FROM soldier_record")
    except (psycopg.Error, RuntimeError) as e:
        logger.warning(f"Store health check failed: {e}")
        return StoreHealth(connected=False, error=str(e))

    return StoreHealth(
        connected=True,
        soldier_count=result[0]["n"],
        latency_ms=round((time.perf_counter() - started) * 1000, 3),
    )
