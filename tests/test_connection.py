"""
Database handle tests with mocked asyncpg objects
"""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from users_api.database import connection
from users_api.database.connection import (
    Database,
    DatabaseError,
    close_database,
    get_database,
    init_database,
    parse_affected_rows,
)


def make_pool(records=None, status="SELECT 0", error=None):
    """Build a pool whose acquire() yields a connection with one prepared statement"""
    prepared = MagicMock()
    prepared.fetch = AsyncMock(return_value=records or [], side_effect=error)
    prepared.get_statusmsg = MagicMock(return_value=status)

    conn = MagicMock()
    conn.prepare = AsyncMock(return_value=prepared)

    acquire = MagicMock()
    acquire.__aenter__ = AsyncMock(return_value=conn)
    acquire.__aexit__ = AsyncMock(return_value=False)

    pool = MagicMock()
    pool.acquire = MagicMock(return_value=acquire)
    pool.close = AsyncMock()
    return pool, conn, prepared


@pytest.mark.parametrize("status,expected", [
    ("UPDATE 1", 1),
    ("UPDATE 0", 0),
    ("DELETE 3", 3),
    ("INSERT 0 1", 1),
    ("SELECT 7", 7),
    ("", 0),
    (None, 0),
    ("CREATE TABLE", 0),
])
def test_parse_affected_rows(status, expected):
    assert parse_affected_rows(status) == expected


@pytest.mark.asyncio
async def test_query_binds_params_and_returns_rows():
    pool, conn, prepared = make_pool(
        records=[{"id": 1, "firstname": "A"}, {"id": 2, "firstname": "B"}],
        status="SELECT 2"
    )
    database = Database(pool)

    result = await database.query("SELECT id, firstname FROM tbl_users WHERE id > $1", [0])

    conn.prepare.assert_awaited_once_with("SELECT id, firstname FROM tbl_users WHERE id > $1")
    prepared.fetch.assert_awaited_once_with(0)
    assert result.rows == [{"id": 1, "firstname": "A"}, {"id": 2, "firstname": "B"}]
    assert result.affected_rows == 2
    assert result.insert_id is None


@pytest.mark.asyncio
async def test_insert_reports_generated_id():
    pool, _, _ = make_pool(records=[{"id": 42}], status="INSERT 0 1")
    database = Database(pool)

    result = await database.query(
        "INSERT INTO tbl_users (firstname) VALUES ($1) RETURNING id", ["A"]
    )

    assert result.insert_id == 42
    assert result.affected_rows == 1


@pytest.mark.asyncio
async def test_update_reports_affected_rows():
    pool, _, _ = make_pool(status="UPDATE 0")
    database = Database(pool)

    result = await database.query("UPDATE tbl_users SET firstname = $1 WHERE id = $2", ["A", 9])

    assert result.affected_rows == 0
    assert result.rows == []


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    asyncpg.PostgresError("syntax error"),
    asyncpg.InterfaceError("pool is closed"),
    ConnectionRefusedError("connection refused"),
    asyncio.TimeoutError(),
])
async def test_store_errors_become_database_error(error):
    pool, _, _ = make_pool(error=error)
    database = Database(pool)

    with pytest.raises(DatabaseError):
        await database.query("SELECT 1")


@pytest.mark.asyncio
async def test_close_closes_pool():
    pool, _, _ = make_pool()

    await Database(pool).close()

    pool.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_init_database_returns_handle_over_pool(monkeypatch):
    pool, conn, _ = make_pool()
    conn.fetchval = AsyncMock(return_value=1)
    create_pool = AsyncMock(return_value=pool)
    monkeypatch.setattr(connection.asyncpg, "create_pool", create_pool)

    database = await init_database()

    assert isinstance(database, Database)
    assert database.pool is pool
    conn.fetchval.assert_awaited_once_with("SELECT 1")
    assert create_pool.await_args.kwargs["max_size"] == connection.settings.DB_POOL_MAX_SIZE


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    ConnectionRefusedError("connection refused"),
    asyncio.TimeoutError(),
])
async def test_unreachable_store_at_startup_is_logged(monkeypatch, caplog, error):
    pool, conn, _ = make_pool()
    conn.fetchval = AsyncMock(side_effect=error)
    monkeypatch.setattr(connection.asyncpg, "create_pool", AsyncMock(return_value=pool))

    with caplog.at_level(logging.ERROR):
        database = await init_database()

    assert database.pool is pool
    assert "Database not reachable at startup" in caplog.text


@pytest.mark.asyncio
async def test_close_database_handles_missing_handle():
    pool, _, _ = make_pool()

    await close_database(None)
    await close_database(Database(pool))

    pool.close.assert_awaited_once()


def test_get_database_reads_app_state():
    database = Database(MagicMock())
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(database=database)))

    assert get_database(request) is database


@pytest.mark.asyncio
async def test_app_starts_with_store_down(app, monkeypatch):
    pool, conn, _ = make_pool()
    conn.fetchval = AsyncMock(side_effect=ConnectionRefusedError("connection refused"))
    monkeypatch.setattr(connection.asyncpg, "create_pool", AsyncMock(return_value=pool))

    async with app.router.lifespan_context(app):
        assert app.state.database.pool is pool

    pool.close.assert_awaited_once()
