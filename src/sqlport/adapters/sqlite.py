"""SQLite connection.

Provides ``SQLiteConnection`` on SQLAlchemy's async engine with the
``aiosqlite`` driver.  The database file and its parent directory are
created on open.
"""

import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from sqlport.adapters.base import QueryFailedError
from sqlport.adapters.common import AsyncEngineConnection
from sqlport.config.models import SQLiteConfig

logger = logging.getLogger(__name__)


class SQLiteConnection(AsyncEngineConnection):
    """SQLite implementation of the ``Connection`` protocol.

    Example:
        conn = SQLiteConnection(SQLiteConfig(path="data/app.sqlite"))
        async with ensure_open(conn):
            print(await conn.driver_version())
    """

    sql_type = "SQLite"
    target_label = "File"
    backslash_literal = "char(92)"

    def __init__(self, config: SQLiteConfig) -> None:
        super().__init__(config)
        if config.password:
            logger.warning("SQLite driver does not support encryption keys; password ignored")

    @property
    def target(self) -> str:
        return self._config.path

    def url(self) -> URL:
        return URL.create("sqlite+aiosqlite", database=self._config.path)

    def _create_engine(self) -> AsyncEngine:
        path = self._config.path
        if not path.startswith(":"):
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        # SQLAlchemy picks the right pool for file vs. memory databases
        engine = create_async_engine(self.url())

        # pysqlite only sends BEGIN ahead of DML, so DDL would commit on its
        # own; take over transaction control to keep DROP/CREATE undoable
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return engine

    async def driver_version(self) -> str:
        rows = await self.fetch_all("SELECT sqlite_version() AS version")
        return str(rows[0]["version"])

    async def list_tables(self) -> list[str]:
        rows = await self.fetch_all(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND substr(name, 1, 7) != 'sqlite_'"
        )
        return [row["name"] for row in rows]

    async def create_statement(self, table: str) -> str:
        rows = await self.fetch_all(
            f"SELECT sql FROM sqlite_master WHERE name = '{self.escape(table)}'"
        )
        if not rows or rows[0]["sql"] is None:
            raise QueryFailedError(f"No such table: {table}")
        return rows[0]["sql"] + ";"

    def integrity_checks(self, enabled: bool) -> str:
        return f"PRAGMA foreign_keys = {'true' if enabled else 'false'};"
