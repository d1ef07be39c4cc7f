"""PostgreSQL connection.

Provides ``PostgresConnection`` on SQLAlchemy's async engine with the
``asyncpg`` driver.  Tables are taken from the ``public`` schema; the
structure text is assembled from ``pg_catalog`` and
``information_schema`` since PostgreSQL has no ``SHOW CREATE TABLE``.

Usage:
    from sqlport.adapters.postgres import PostgresConnection
    from sqlport.config.models import PostgresConfig

    conn = PostgresConnection(PostgresConfig(user="app", database="shop"))
"""

import os

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine

from sqlport.adapters.base import QueryFailedError
from sqlport.adapters.common import AsyncEngineConnection, create_async_engine_pooled
from sqlport.config.models import PostgresConfig

SCHEMA = "public"

# nextval() defaults point at sequences the dump does not carry
_SERIAL_TYPES = {"integer": "serial", "bigint": "bigserial", "smallint": "smallserial"}


class PostgresConnection(AsyncEngineConnection):
    """PostgreSQL implementation of the ``Connection`` protocol.

    String literals use doubled quotes; identifiers are quoted with double
    quotes.  The integrity toggle uses ``session_replication_role``, which
    requires a superuser (or a role granted that setting).
    """

    sql_type = "PostgreSQL"
    target_label = "Host"
    backslash_literal = "chr(92)"

    def __init__(self, config: PostgresConfig) -> None:
        super().__init__(config)

    @property
    def target(self) -> str:
        return f"{self._config.host}:{self._config.port}"

    def url(self) -> URL:
        return URL.create(
            "postgresql+asyncpg",
            username=self._config.user,
            password=self._config.password or None,
            host=self._config.host,
            port=self._config.port,
            database=self._config.database,
        )

    def _create_engine(self) -> AsyncEngine:
        return create_async_engine_pooled(
            self.url(),
            persistent=self._config.persistent,
            connect_args={
                "timeout": 10,
                "server_settings": {"client_encoding": self._config.encoding},
            },
        )

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def binary_literal(self, value: bytes) -> str:
        # X'..' is a bit string here; bytea wants the hex escape format
        return "'\\x" + value.hex() + "'::bytea"

    async def driver_version(self) -> str:
        rows = await self.fetch_all("SHOW server_version")
        return f"PostgreSQL {rows[0]['server_version']}"

    async def list_tables(self) -> list[str]:
        rows = await self.fetch_all(
            "SELECT table_name FROM information_schema.tables "
            f"WHERE table_schema = '{SCHEMA}' AND table_type = 'BASE TABLE' "
            "ORDER BY table_name"
        )
        return [row["table_name"] for row in rows]

    async def create_statement(self, table: str) -> str:
        name = self.escape(table)
        columns = await self.fetch_all(f"""
            SELECT
                a.attname AS name,
                pg_catalog.format_type(a.atttypid, a.atttypmod) AS type,
                a.attnotnull AS notnull,
                pg_catalog.pg_get_expr(d.adbin, d.adrelid) AS "default"
            FROM pg_catalog.pg_attribute a
            JOIN pg_catalog.pg_class c ON c.oid = a.attrelid
            JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
            LEFT JOIN pg_catalog.pg_attrdef d
                ON d.adrelid = a.attrelid AND d.adnum = a.attnum
            WHERE n.nspname = '{SCHEMA}'
              AND c.relname = '{name}'
              AND a.attnum > 0
              AND NOT a.attisdropped
            ORDER BY a.attnum
        """)
        if not columns:
            raise QueryFailedError(f"No such table: {table}")

        primary_key = await self.fetch_all(f"""
            SELECT kcu.column_name
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
            WHERE tc.table_schema = '{SCHEMA}'
              AND tc.table_name = '{name}'
              AND tc.constraint_type = 'PRIMARY KEY'
            ORDER BY kcu.ordinal_position
        """)

        definitions = [self._column_definition(col) for col in columns]
        if primary_key:
            keys = ", ".join(self.quote_identifier(r["column_name"]) for r in primary_key)
            definitions.append(f"  PRIMARY KEY ({keys})")

        lines = [f"CREATE TABLE {self.quote_identifier(table)} ("]
        lines.append(("," + os.linesep).join(definitions))
        lines.append(");")
        return os.linesep.join(lines)

    def _column_definition(self, column: dict) -> str:
        col_type = column["type"]
        default = column["default"]
        if default and default.startswith("nextval(") and col_type in _SERIAL_TYPES:
            col_type = _SERIAL_TYPES[col_type]
            default = None

        parts = [f"  {self.quote_identifier(column['name'])}", col_type]
        if column["notnull"]:
            parts.append("NOT NULL")
        if default is not None:
            parts.append(f"DEFAULT {default}")
        return " ".join(parts)

    def integrity_checks(self, enabled: bool) -> str:
        role = "DEFAULT" if enabled else "replica"
        return f"SET session_replication_role = {role};"
