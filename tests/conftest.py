"""
pytest configuration and fixtures for the Users API test suite
Routes run in-process against an in-memory tbl_users table
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

import httpx
import pytest
import pytest_asyncio

from users_api.app import create_app
from users_api.config import settings
from users_api.database.connection import DatabaseError, QueryResult, get_database

PUBLIC_COLUMNS = ("id", "firstname", "fullname", "lastname")

SET_CLAUSE = re.compile(r"(\w+) = \$(\d+)")


class InMemoryUsersTable:
    """
    Stand-in for the Database handle backed by a dict of rows

    Understands exactly the statements the users service issues and keeps
    every (statement, params) pair so tests can inspect what was sent.
    """

    def __init__(self):
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.next_id = 1
        self.statements: List[tuple] = []
        self.fail = False

    def seed(self, firstname, fullname, lastname, password_hash) -> int:
        user_id = self.next_id
        self.next_id += 1
        self.rows[user_id] = {
            "id": user_id,
            "firstname": firstname,
            "fullname": fullname,
            "lastname": lastname,
            "password": password_hash,
        }
        return user_id

    def _public(self, row):
        return {column: row[column] for column in PUBLIC_COLUMNS}

    async def query(self, statement: str, params: Sequence[Any] = ()) -> QueryResult:
        self.statements.append((statement, list(params)))
        if self.fail:
            raise DatabaseError("connection refused")

        if statement.startswith("SELECT NOW()"):
            return QueryResult(rows=[{"now": datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)}], affected_rows=1)

        if statement.startswith("SELECT"):
            if "WHERE id = $1" in statement:
                row = self.rows.get(params[0])
                rows = [self._public(row)] if row else []
            else:
                rows = [self._public(self.rows[key]) for key in sorted(self.rows)]
            return QueryResult(rows=rows, affected_rows=len(rows))

        if statement.startswith("INSERT"):
            user_id = self.seed(*params)
            return QueryResult(rows=[{"id": user_id}], affected_rows=1, insert_id=user_id)

        if statement.startswith("UPDATE"):
            assignments = SET_CLAUSE.findall(statement)
            (_, where_index), updates = assignments[-1], assignments[:-1]
            row = self.rows.get(params[int(where_index) - 1])
            if row is None:
                return QueryResult(affected_rows=0)
            for column, index in updates:
                row[column] = params[int(index) - 1]
            return QueryResult(affected_rows=1)

        if statement.startswith("DELETE"):
            removed = self.rows.pop(params[0], None)
            return QueryResult(affected_rows=1 if removed else 0)

        raise AssertionError(f"Unexpected statement: {statement}")


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Keep hashing cheap in tests; digests stay real bcrypt"""
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def users_table() -> InMemoryUsersTable:
    return InMemoryUsersTable()


@pytest.fixture
def app(users_table):
    application = create_app()
    application.dependency_overrides[get_database] = lambda: users_table
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
