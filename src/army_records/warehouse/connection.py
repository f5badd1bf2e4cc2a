"""
PostgreSQL connection pool for the soldier store and the processing ledger.

Connection parameters come from the constructor or the DB_HOST, DB_PORT,
DB_NAME, DB_USER and DB_PASSWORD environment variables. Rows are returned
as dictionaries keyed by column name.
"""
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from army_records.observability.logger import get_logger

logger = get_logger(__name__)

APPLICATION_NAME = "army-records"


class DatabaseConnectionPool:
    """
    psycopg3 ConnectionPool with open-retry and transaction helpers.

    Args:
        host: Database host (env DB_HOST, default localhost)
        port: Database port (env DB_PORT, default 5432)
        database: Database name (env DB_NAME, default army_records)
        user: Database user (env DB_USER, default army_records)
        password: Database password (env DB_PASSWORD, required)
        min_size: Connections kept open
        max_size: Connections allowed at once
        timeout: Seconds to wait for a connection, also the connect timeout

    Raises:
        ValueError: If no password is given
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 5,
        timeout: float = 30.0,
    ) -> None:
        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "army_records")
        self.user = user or os.getenv("DB_USER", "army_records")
        password = password or os.getenv("DB_PASSWORD")

        if not password:
            raise ValueError(
                "Database password must be provided. "
                "Set DB_PASSWORD environment variable or pass to constructor."
            )

        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout

        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=password,
            connect_timeout=max(1, int(self.timeout)),
            application_name=APPLICATION_NAME,
        )

        self._pool: ConnectionPool | None = None

    @property
    def display_dsn(self) -> str:
        """Connection target without the password, for logs and errors."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, waiting for min_size connections.

        A no-op when the pool is already open.

        Args:
            max_retries: Connection attempts before giving up
            retry_delay: Seconds between attempts

        Raises:
            psycopg.OperationalError: If every attempt fails
        """
        if self._pool is not None:
            return

        pool = ConnectionPool(
            conninfo=self.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            timeout=self.timeout,
            kwargs={"row_factory": dict_row},
            name=APPLICATION_NAME,
            open=False,
        )

        for attempt in range(1, max_retries + 1):
            try:
                pool.open(wait=True, timeout=self.timeout)
            except psycopg.OperationalError as e:
                # PoolTimeout is an OperationalError
                if attempt < max_retries:
                    logger.warning(
                        f"Connection attempt {attempt}/{max_retries} to {self.display_dsn} failed: {e}"
                    )
                    time.sleep(retry_delay)
                    continue
                pool.close()
                raise psycopg.OperationalError(
                    f"Failed to connect to {self.display_dsn} after {max_retries} attempts: {e}"
                ) from e

            self._pool = pool
            logger.info(
                f"Connected to {self.display_dsn}",
                extra={"pool_min_size": self.min_size, "pool_max_size": self.max_size}
            )
            return

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self) -> Iterator[psycopg.Connection]:
        """
        Borrow a connection; it is returned to the pool on exit.

        Raises:
            RuntimeError: If the pool is not open
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        with self._pool.connection() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[psycopg.Cursor]:
        """
        Cursor inside a transaction that commits on exit.

        An exception raised in the block rolls the transaction back and
        propagates.
        """
        with self.get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    yield cur

    def execute_query(self, query: str, params: tuple | dict | None = None) -> list[dict]:
        """Run a SELECT and return every row."""
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchall()

    def execute_command(self, command: str, params: tuple | dict | None = None) -> int:
        """Run an INSERT, UPDATE, DELETE or DDL statement; returns the row count."""
        with self.transaction() as cur:
            cur.execute(command, params)
            return cur.rowcount

    def ping(self) -> None:
        """
        Round-trip a trivial query.

        Raises:
            psycopg.OperationalError: If the server cannot be reached
        """
        self.execute_query("SELECT 1 AS ok")

    def __enter__(self) -> "DatabaseConnectionPool":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
