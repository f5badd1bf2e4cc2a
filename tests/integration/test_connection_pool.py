"""
Integration tests for the database connection pool

Tests the PostgreSQL connection pool functionality using testcontainers.
"""
import psycopg
import pytest

from army_records.warehouse import DatabaseConnectionPool, SchemaManager


def make_pool(postgres_container, **kwargs) -> DatabaseConnectionPool:
    return DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_army_records",
        user="test_army",
        password="test_password",
        **kwargs
    )


@pytest.mark.integration
def test_connection_pool_initialization(postgres_container):
    """Test that connection pool initializes correctly"""
    pool = make_pool(postgres_container, min_size=2, max_size=5)

    pool.open()

    assert pool.is_open
    assert pool._pool.min_size == 2
    assert pool._pool.max_size == 5

    pool.close()
    assert not pool.is_open


@pytest.mark.integration
def test_get_connection_returns_dict_rows(postgres_container):
    """Test getting a connection from the pool"""
    with make_pool(postgres_container) as pool:
        with pool.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 as test")
                assert cur.fetchone()["test"] == 1


@pytest.mark.integration
def test_ping(postgres_container):
    with make_pool(postgres_container) as pool:
        pool.ping()


@pytest.mark.integration
def test_execute_command_returns_rowcount(postgres_container):
    with make_pool(postgres_container) as pool:
        pool.execute_command("CREATE TABLE IF NOT EXISTS pool_scratch (n INTEGER)")
        try:
            assert pool.execute_command("INSERT INTO pool_scratch VALUES (1), (2)") == 2
            assert pool.execute_query("SELECT COUNT(*) AS n FROM pool_scratch")[0]["n"] == 2
        finally:
            pool.execute_command("DROP TABLE pool_scratch")


@pytest.mark.integration
def test_connection_before_open_raises(postgres_container):
    pool = make_pool(postgres_container)

    with pytest.raises(RuntimeError, match="not open"):
        pool.execute_query("SELECT 1")


@pytest.mark.integration
def test_schema_manager_is_idempotent(db_pool):
    manager = SchemaManager(db_pool)

    manager.create_tables()
    manager.create_tables()

    assert manager.tables_exist()


@pytest.mark.integration
def test_wrong_password_fails_to_open(postgres_container):
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_army_records",
        user="test_army",
        password="wrong_password",
        timeout=3.0,
    )

    with pytest.raises(psycopg.OperationalError):
        pool.open(max_retries=1)

    assert not pool.is_open


@pytest.mark.unit
def test_missing_password_is_refused(monkeypatch):
    monkeypatch.delenv("DB_PASSWORD", raising=False)

    with pytest.raises(ValueError, match="password must be provided"):
        DatabaseConnectionPool(host="localhost")


@pytest.mark.integration
def test_transaction_rolls_back_on_error(postgres_container):
    with make_pool(postgres_container) as pool:
        pool.execute_command("CREATE TABLE IF NOT EXISTS pool_rollback (n INTEGER)")
        try:
            with pytest.raises(psycopg.errors.DivisionByZero):
                with pool.transaction() as cur:
                    cur.execute("INSERT INTO pool_rollback VALUES (1)")
                    cur.execute("SELECT 1 / 0")

            assert pool.execute_query("SELECT COUNT(*) AS n FROM pool_rollback")[0]["n"] == 0
        finally:
            pool.execute_command("DROP TABLE pool_rollback")


@pytest.mark.integration
def test_connection_reports_application_name(postgres_container):
    with make_pool(postgres_container) as pool:
        rows = pool.execute_query("SELECT current_setting('application_name') AS app")

    assert rows[0]["app"] == "army-records"


@pytest.mark.unit
def test_display_dsn_hides_password():
    pool = DatabaseConnectionPool(
        host="db.internal", port=6543, database="records", user="clerk", password="s3cret"
    )

    assert pool.display_dsn == "clerk@db.internal:6543/records"
    assert "s3cret" not in pool.display_dsn
    assert "dbname=records" in pool.conninfo
    assert not pool.is_open
