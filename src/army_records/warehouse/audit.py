"""
Processing ledger operations.

The ledger is append-only: one processing_log row per upload or
re-upload attempt, never updated or deleted.
"""

from typing import Any

import psycopg

from army_records.core.models import ProcessingLogEntry
from army_records.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

LOG_COLUMNS = """
    log_id, filename, outcome, accepted_count, rejected_count, violations, processed_at
"""


class ProcessingLedger:
    """
    Insert-only store of ProcessingLogEntry rows.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize processing ledger.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def record(self, entry: ProcessingLogEntry) -> ProcessingLogEntry:
        """
        Append one entry.

        Args:
            entry: Entry to store (its log_id is ignored)

        Returns:
            The stored entry with its generated log_id

        Raises:
            psycopg.DatabaseError: If insert fails
        """
        insert_sql = f"""
            INSERT INTO processing_log (
                filename,
                outcome,
                accepted_count,
                rejected_count,
                violations,
                processed_at
            ) VALUES (
                %(filename)s,
                %(outcome)s,
                %(accepted_count)s,
                %(rejected_count)s,
                %(violations)s,
                %(processed_at)s
            ) RETURNING {LOG_COLUMNS};
        """

        try:
            with self.pool.transaction() as cur:
                cur.execute(
                    insert_sql,
                    {
                        "filename": entry.filename,
                        "outcome": entry.outcome,
                        "accepted_count": entry.accepted_count,
                        "rejected_count": entry.rejected_count,
                        "violations": list(entry.violations),
                        "processed_at": entry.processed_at,
                    },
                )
                row = cur.fetchone()

        except psycopg.DatabaseError as e:
            logger.error(f"Failed to insert processing log entry: {e}")
            raise

        stored = ProcessingLogEntry(**row)
        logger.debug(
            f"Recorded processing log entry: log_id={stored.log_id}, "
            f"outcome={stored.outcome}"
        )
        return stored

    def recent(self, limit: int = 50) -> list[ProcessingLogEntry]:
        """
        Most recent entries, newest first.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of ProcessingLogEntry
        """
        rows = self.pool.execute_query(
            f"""
            SELECT {LOG_COLUMNS}
            FROM processing_log
            ORDER BY processed_at DESC, log_id DESC
            LIMIT %s
            """,
            (limit,)
        )
        return [ProcessingLogEntry(**row) for row in rows]

    def summary(self) -> dict[str, Any]:
        """
        Get summary statistics of the ledger.

        Returns:
            Dictionary with:
            - total_runs
            - runs_by_outcome
            - total_accepted
            - total_rejected
        """
        rows = self.pool.execute_query(
            """
            SELECT
                outcome,
                COUNT(*) AS runs,
                COALESCE(SUM(accepted_count), 0) AS accepted,
                COALESCE(SUM(rejected_count), 0) AS rejected
            FROM processing_log
            GROUP BY outcome
            """
        )

        return {
            "total_runs": sum(r["runs"] for r in rows),
            "runs_by_outcome": {r["outcome"]: r["runs"] for r in rows},
            "total_accepted": int(sum(r["accepted"] for r in rows)),
            "total_rejected": int(sum(r["rejected"] for r in rows)),
        }
