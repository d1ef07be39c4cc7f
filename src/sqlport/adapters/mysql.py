"""MySQL / MariaDB connection.

Provides ``MySQLConnection`` on SQLAlchemy's async engine with the
``aiomysql`` driver.

Usage:
    from sqlport.adapters.mysql import MySQLConnection
    from sqlport.config.models import MySQLConfig

    conn = MySQLConnection(MySQLConfig(user="root", database="shop"))
    await conn.open()
    tables = await conn.list_tables()
    await conn.close()
"""

import re

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from sqlport.adapters.base import QueryFailedError
from sqlport.adapters.common import RAW_EXECUTION, AsyncEngineConnection, create_async_engine_pooled
from sqlport.config.models import MySQLConfig

_AUTO_INCREMENT_RE = re.compile(r"AUTO_INCREMENT=\d+")


class MySQLConnection(AsyncEngineConnection):
    """MySQL implementation of the ``Connection`` protocol.

    String literals backslash-escape quotes and backslashes; identifiers
    are quoted with backticks.
    """

    sql_type = "MySQL"
    target_label = "Host"

    def __init__(self, config: MySQLConfig) -> None:
        super().__init__(config)

    @property
    def target(self) -> str:
        return f"{self._config.host}:{self._config.port}"

    def url(self) -> URL:
        return URL.create(
            "mysql+aiomysql",
            username=self._config.user,
            password=self._config.password or None,
            host=self._config.host,
            port=self._config.port,
            database=self._config.database,
            query={"charset": self._config.encoding},
        )

    def _create_engine(self) -> AsyncEngine:
        return create_async_engine_pooled(
            self.url(),
            persistent=self._config.persistent,
            connect_args={"connect_timeout": 10},
        )

    async def _on_open(self, conn: AsyncConnection) -> None:
        # Enforce session encoding and locale
        encoding = self._config.encoding
        await conn.exec_driver_sql(
            f"SET character_set_client = '{encoding}', "
            f"character_set_connection = '{encoding}', "
            f"character_set_database = '{encoding}', "
            f"character_set_results = '{encoding}', "
            f"character_set_server = '{encoding}', "
            f"lc_time_names = '{self._config.locale}'",
            execution_options=RAW_EXECUTION,
        )

    def escape(self, value: str) -> str:
        return value.replace("\\", "\\\\").replace("'", "\\'")

    async def driver_version(self) -> str:
        rows = await self.fetch_all("SELECT VERSION() AS version")
        return str(rows[0]["version"])

    async def list_tables(self) -> list[str]:
        rows = await self.fetch_all("SHOW FULL TABLES WHERE Table_type = 'BASE TABLE'")
        # First column is Tables_in_<database>; views have no CREATE TABLE
        return [
            str(next(iter(row.values())))
            for row in rows
            if row.get("Table_type", "BASE TABLE") == "BASE TABLE"
        ]

    async def create_statement(self, table: str) -> str:
        rows = await self.fetch_all(f"SHOW CREATE TABLE {self.quote_identifier(table)}")
        if not rows or "Create Table" not in rows[0]:
            raise QueryFailedError(f"No table structure reported for {table}")
        return _AUTO_INCREMENT_RE.sub("AUTO_INCREMENT=1", rows[0]["Create Table"]) + ";"

    def integrity_checks(self, enabled: bool) -> str:
        return f"SET FOREIGN_KEY_CHECKS = {1 if enabled else 0};"
