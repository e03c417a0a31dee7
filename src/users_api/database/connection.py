"""
Database connection and pool management
"""

import asyncio
import asyncpg
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from fastapi import Request

from users_api.config import settings

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised for any store failure (connectivity, syntax, constraint)"""


@dataclass
class QueryResult:
    """Result of a single statement"""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    affected_rows: int = 0
    insert_id: Optional[int] = None


def parse_affected_rows(status: Optional[str]) -> int:
    """
    Extract the row count from a command status tag.

    asyncpg reports statuses such as "UPDATE 1", "DELETE 0", "INSERT 0 1"
    or "SELECT 3"; the count is always the last token.
    """
    if not status:
        return 0
    try:
        return int(status.split()[-1])
    except ValueError:
        return 0


class Database:
    """Query handle over an asyncpg connection pool"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def query(self, statement: str, params: Sequence[Any] = ()) -> QueryResult:
        """
        Run one parameterized statement on a pooled connection.

        Args:
            statement: SQL text with $1..$n placeholders
            params: Ordered bind values

        Returns:
            QueryResult with the returned rows, the affected-row count and,
            for statements returning an ``id`` column, the generated id
        """
        try:
            async with self.pool.acquire() as conn:
                prepared = await conn.prepare(statement)
                records = await prepared.fetch(*params)
                status = prepared.get_statusmsg()
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            raise DatabaseError(str(e)) from e

        rows = [dict(record) for record in records]
        insert_id = None
        if statement.lstrip().upper().startswith("INSERT") and rows and "id" in rows[0]:
            insert_id = rows[0]["id"]

        return QueryResult(
            rows=rows,
            affected_rows=parse_affected_rows(status),
            insert_id=insert_id
        )

    async def close(self):
        await self.pool.close()


async def init_database() -> Database:
    """Create the connection pool and verify connectivity"""
    pool = await asyncpg.create_pool(
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        user=settings.DB_USER,
        password=settings.DB_PASS,
        database=settings.DB_NAME,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=60
    )

    # Test connection; the pool stays usable if the store comes up later
    try:
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
        logger.error(f"Database not reachable at startup: {e}")

    logger.info(f"Database pool initialized ({settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME})")
    return Database(pool)


async def close_database(database: Optional[Database]):
    """Close database connection pool"""
    if database:
        await database.close()
    logger.info("Database connections closed")


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the handle created at startup"""
    return request.app.state.database
