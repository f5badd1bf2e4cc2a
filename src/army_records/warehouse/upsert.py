"""
Idempotent upsert operations for soldier records.

Implements INSERT ... ON CONFLICT UPDATE keyed by soldier_id, so a
re-submitted record replaces the stored one in place.
"""

from collections.abc import Iterator
from datetime import datetime
from math import ceil

from army_records.core.models import SoldierPage, SoldierRecord, StoredSoldier
from army_records.core.schema.mapping import stored_from_row

from .connection import DatabaseConnectionPool

SELECT_COLUMNS = """
    soldier_id, name, rank, unit, service_date, status, created_at, updated_at
"""


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SoldierWriter:
    """
    Reads and writes the soldier_record table.

    All writes use PostgreSQL's INSERT ... ON CONFLICT UPDATE: the last
    valid submission for an id wins, updated_at is refreshed and
    created_at is kept.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize soldier writer.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def upsert_soldier(self, record: SoldierRecord, now: datetime | None = None) -> StoredSoldier:
        """
        Insert or update one soldier record.

        Args:
            record: Validated soldier record
            now: Timestamp to stamp (defaults to the current UTC time)

        Returns:
            The stored form of the record

        Raises:
            psycopg.DatabaseError: If the store refuses the write
        """
        stamp = now or datetime.utcnow()

        query = f"""
            INSERT INTO soldier_record (
                soldier_id, name, rank, unit, service_date, status, created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (soldier_id) DO UPDATE SET
                name = EXCLUDED.name,
                rank = EXCLUDED.rank,
                unit = EXCLUDED.unit,
                service_date = EXCLUDED.service_date,
                status = EXCLUDED.status,
                updated_at = EXCLUDED.updated_at
            RETURNING {SELECT_COLUMNS}
        """

        with self.pool.transaction() as cur:
            cur.execute(
                query,
                (
                    record.id,
                    record.name,
                    record.rank,
                    record.unit,
                    record.service_date,
                    record.status,
                    stamp,
                    stamp
                )
            )
            row = cur.fetchone()

        return stored_from_row(row)

    def find_by_id(self, soldier_id: str) -> StoredSoldier | None:
        """
        Look up one stored soldier.

        Args:
            soldier_id: Service identifier

        Returns:
            The stored soldier, or None if unknown
        """
        result = self.pool.execute_query(
            f"SELECT {SELECT_COLUMNS} FROM soldier_record WHERE soldier_id = %s",
            (soldier_id,)
        )
        return stored_from_row(result[0]) if result else None

    def count(self, status: str | None = None) -> int:
        """
        Count stored soldiers.

        Args:
            status: Optional exact status filter

        Returns:
            Number of matching records
        """
        if status:
            result = self.pool.execute_query(
                "SELECT COUNT(*) AS n FROM soldier_record WHERE status = %s", (status,)
            )
        else:
            result = self.pool.execute_query("SELECT COUNT(*) AS n FROM soldier_record")
        return result[0]["n"]

    def list_soldiers(
        self,
        status: str | None = None,
        unit: str | None = None,
        page: int = 1,
        page_size: int = 10
    ) -> SoldierPage:
        """
        List stored soldiers, newest first.

        Args:
            status: Exact status filter
            unit: Case-insensitive substring filter on unit
            page: 1-based page number
            page_size: Records per page

        Returns:
            SoldierPage with the records and paging totals
        """
        clauses = []
        params: list = []
        if status:
            clauses.append("status = %s")
            params.append(status)
        if unit:
            clauses.append("unit ILIKE %s ESCAPE '\\'")
            params.append(f"%{escape_like(unit)}%")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        total = self.pool.execute_query(
            f"SELECT COUNT(*) AS n FROM soldier_record {where}", tuple(params)
        )[0]["n"]

        rows = self.pool.execute_query(
            f"""
            SELECT {SELECT_COLUMNS}
            FROM soldier_record
            {where}
            ORDER BY created_at DESC, soldier_id
            LIMIT %s OFFSET %s
            """,
            tuple(params + [page_size, (page - 1) * page_size])
        )

        return SoldierPage(
            soldiers=[stored_from_row(row) for row in rows],
            total=total,
            total_pages=ceil(total / page_size),
            current_page=page,
            page_size=page_size,
        )

    def iter_all(self) -> Iterator[StoredSoldier]:
        """Iterate over every stored soldier, newest first."""
        rows = self.pool.execute_query(
            f"SELECT {SELECT_COLUMNS} FROM soldier_record ORDER BY created_at DESC, soldier_id"
        )
        for row in rows:
            yield stored_from_row(row)
