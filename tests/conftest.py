"""Shared fixtures: a recording in-memory connection and SQLite profiles."""

from pathlib import Path
from typing import Any

import pytest

from sqlport.adapters.base import QueryResult
from sqlport.adapters.sqlite import SQLiteConnection
from sqlport.config.models import SQLiteConfig


class FakeConnection:
    """Connection double that records every call.

    ``fail_on`` holds substrings; a statement containing one of them is
    reported as failed.  ``raise_on`` does the same but raises instead,
    which exercises the rollback path.
    """

    sql_type = "FakeSQL"
    target_label = "Host"

    def __init__(
        self,
        tables: dict[str, list[dict[str, Any]]] | None = None,
        fail_on: tuple[str, ...] = (),
        raise_on: tuple[str, ...] = (),
    ) -> None:
        self.tables = tables or {}
        self.fail_on = fail_on
        self.raise_on = raise_on
        self.executed: list[str] = []
        self.calls: list[str] = []
        self._status = "closed"
        self._last_error = ""

    @property
    def status(self) -> str:
        return self._status

    @property
    def target(self) -> str:
        return "fake:1234"

    async def open(self) -> bool:
        self.calls.append("open")
        self._status = "open"
        return True

    async def close(self) -> None:
        self.calls.append("close")
        self._status = "closed"

    async def begin_transaction(self) -> None:
        self.calls.append("begin")

    async def commit(self) -> None:
        self.calls.append("commit")

    async def rollback(self) -> None:
        self.calls.append("rollback")

    async def query(self, sql: str) -> QueryResult:
        self.executed.append(sql)
        for marker in self.raise_on:
            if marker in sql:
                raise RuntimeError(f"connection lost near {marker}")
        for marker in self.fail_on:
            if marker in sql:
                self._last_error = f"syntax error near {marker}"
                return QueryResult(success=False, error=self._last_error)
        if sql.startswith("SELECT * FROM "):
            name = sql[len("SELECT * FROM "):].rstrip(";").strip("`")
            rows = self.tables.get(name, [])
            return QueryResult(rows=rows, rowcount=len(rows))
        return QueryResult(rowcount=1)

    def error(self) -> str:
        return self._last_error

    async def driver_version(self) -> str:
        return "1.0-fake"

    def escape(self, value: str) -> str:
        return value.replace("'", "\\'")

    def string_literal(self, value: str) -> str:
        return "'" + self.escape(value) + "'"

    def binary_literal(self, value: bytes) -> str:
        return "X'" + value.hex().upper() + "'"

    def quote_identifier(self, name: str) -> str:
        return f"`{name}`"

    async def list_tables(self) -> list[str]:
        return list(self.tables)

    async def create_statement(self, table: str) -> str:
        return f"CREATE TABLE `{table}` (id INT);"

    def integrity_checks(self, enabled: bool) -> str:
        return f"SET FOREIGN_KEY_CHECKS = {1 if enabled else 0};"


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "source.sqlite"


@pytest.fixture
async def sqlite_conn(sqlite_path: Path):
    """SQLite connection on a fresh file; disposed after the test."""
    conn = SQLiteConnection(SQLiteConfig(path=str(sqlite_path)))
    yield conn
    await conn.dispose()
