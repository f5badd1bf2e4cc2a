"""
Schema management operations for the soldier store.

Owns the DDL of the soldier_record and processing_log tables.
"""

from army_records.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

SOLDIER_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS soldier_record (
        soldier_id VARCHAR(50) PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        rank VARCHAR(50) NOT NULL,
        unit VARCHAR(100) NOT NULL,
        service_date DATE NOT NULL,
        status VARCHAR(20) NOT NULL
            CHECK (status IN ('Active', 'Retired', 'Deceased')),
        created_at TIMESTAMP NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
"""

PROCESSING_LOG_DDL = """
    CREATE TABLE IF NOT EXISTS processing_log (
        log_id SERIAL PRIMARY KEY,
        filename VARCHAR(255) NOT NULL,
        outcome VARCHAR(20) NOT NULL
            CHECK (outcome IN ('validated', 'corrected', 'rejected')),
        accepted_count INTEGER NOT NULL DEFAULT 0,
        rejected_count INTEGER NOT NULL DEFAULT 0,
        violations TEXT[] NOT NULL DEFAULT '{}',
        processed_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
"""

INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_soldier_record_status ON soldier_record (status)",
    "CREATE INDEX IF NOT EXISTS idx_soldier_record_created_at ON soldier_record (created_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_processing_log_processed_at ON processing_log (processed_at DESC)",
)

MANAGED_TABLES = ("soldier_record", "processing_log")


class SchemaManager:
    """
    Creates and resets the store tables.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def create_tables(self) -> None:
        """Create tables and indexes if they do not exist (idempotent)."""
        with self.pool.transaction() as cur:
            cur.execute(SOLDIER_TABLE_DDL)
            cur.execute(PROCESSING_LOG_DDL)
            for statement in INDEX_DDL:
                cur.execute(statement)

        logger.info("Store tables ready", extra={"tables": list(MANAGED_TABLES)})

    def truncate_tables(self) -> None:
        """Remove every row from the managed tables."""
        self.pool.execute_command("TRUNCATE TABLE soldier_record, processing_log RESTART IDENTITY")

    def tables_exist(self) -> bool:
        """Check whether both managed tables are present."""
        result = self.pool.execute_query(
            """
            SELECT COUNT(*) AS n
            FROM information_schema.tables
            WHERE table_name = ANY(%s)
            """,
            (list(MANAGED_TABLES),)
        )
        return result[0]["n"] == len(MANAGED_TABLES)
