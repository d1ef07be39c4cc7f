"""Connection protocol definition.

Defines the ``Connection`` Protocol that every backend implements.  The
dump generator and restore executor are written only against this
interface -- they never touch a driver directly.

Usage:
    from sqlport.adapters.base import Connection, ensure_open

    async def count_tables(conn: Connection) -> int:
        async with ensure_open(conn):
            return len(await conn.list_tables())
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

from pydantic import BaseModel, Field


class ConnectionFailedError(Exception):
    """Raised when a connection cannot be established."""

    pass


class QueryFailedError(Exception):
    """Raised when a catalog or read query needed for a dump fails."""

    pass


class Column(BaseModel):
    """Column descriptor as reported by the driver's cursor description."""

    name: str
    type_code: str | None = None
    nullable: bool | None = None


class QueryResult(BaseModel):
    """Outcome of a single statement.

    A statement rejected by the server yields ``success=False`` with the
    driver's message in ``error``; rows are only populated for statements
    that return them.
    """

    success: bool = True
    rows: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[Column] = Field(default_factory=list)
    rowcount: int = -1
    error: str | None = None


class Connection(Protocol):
    """Database connection interface that all backends must implement.

    All I/O methods are async -- callers must ``await`` every operation.
    Calls are made strictly one after another; a connection is owned by a
    single dump or restore call at a time.
    """

    sql_type: str
    target_label: str

    @property
    def status(self) -> str:
        """``"open"`` or ``"closed"``."""
        ...

    @property
    def target(self) -> str:
        """Connection target for the dump header (``host:port`` or file path)."""
        ...

    async def open(self) -> bool:
        """Establish the connection.

        Raises:
            ConnectionFailedError: If the backend cannot be reached or
                rejects the credentials.
        """
        ...

    async def close(self) -> None:
        """Close the connection.  A no-op when already closed."""
        ...

    async def begin_transaction(self) -> None:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...

    async def query(self, sql: str) -> QueryResult:
        """Execute exactly one statement, passed to the driver verbatim.

        Statement-level failures are returned, not raised:

            result = await conn.query("INSERT INTO t VALUES (1);")
            if not result.success:
                print(conn.error())
        """
        ...

    def error(self) -> str:
        """Message of the last failed statement."""
        ...

    async def driver_version(self) -> str:
        ...

    def escape(self, value: str) -> str:
        """Escape quote characters of a string literal for this dialect."""
        ...

    def string_literal(self, value: str) -> str:
        """Return *value* as a complete, quoted string literal.

        The literal never puts a backslash directly before a quote unless
        that backslash escapes the quote.
        """
        ...

    def binary_literal(self, value: bytes) -> str:
        ...

    def quote_identifier(self, name: str) -> str:
        ...

    async def list_tables(self) -> list[str]:
        """Return every user table reported by the backend's catalog."""
        ...

    async def create_statement(self, table: str) -> str:
        """Return backend-native structure text for *table*, ending in ``;``."""
        ...

    def integrity_checks(self, enabled: bool) -> str:
        """Return the statement that enables or disables FK enforcement."""
        ...


@asynccontextmanager
async def ensure_open(conn: Connection) -> AsyncIterator[Connection]:
    """Open *conn* if it is closed and close it again only if we opened it.

    Example:
        async with ensure_open(conn):
            tables = await conn.list_tables()
    """
    opened = False
    if conn.status == "closed":
        await conn.open()
        opened = True
    try:
        yield conn
    finally:
        if opened:
            await conn.close()
