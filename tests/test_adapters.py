"""Tests for the server backends that need no live database."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.pool import NullPool

from sqlport.adapters.base import ConnectionFailedError, QueryFailedError, QueryResult, ensure_open
from sqlport.adapters.common import create_async_engine_pooled
from sqlport.adapters.mysql import MySQLConnection
from sqlport.adapters.postgres import PostgresConnection
from sqlport.config.models import MySQLConfig, PostgresConfig
from sqlport.dump.serializer import data_of


def _mysql(**kwargs) -> MySQLConnection:
    return MySQLConnection(MySQLConfig(user="root", database="shop", **kwargs))


def _postgres(**kwargs) -> PostgresConnection:
    return PostgresConnection(PostgresConfig(user="app", database="warehouse", **kwargs))


class TestEnginePool:
    """create_async_engine_pooled picks pooling from the persistent flag."""

    @pytest.mark.asyncio
    async def test_non_persistent_uses_null_pool(self):
        engine = create_async_engine_pooled("sqlite+aiosqlite:///:memory:", persistent=False)
        try:
            assert isinstance(engine.sync_engine.pool, NullPool)
        finally:
            await engine.dispose()


class TestMySQLConnection:
    """MySQL dialect helpers and catalog parsing."""

    def test_url(self):
        url = _mysql(password="pw", host="db", port=3307).url()
        assert url.drivername == "mysql+aiomysql"
        assert (url.host, url.port, url.database) == ("db", 3307, "shop")
        assert url.query["charset"] == "utf8mb4"

    def test_dialect_helpers(self):
        conn = _mysql()
        assert conn.sql_type == "MySQL"
        assert conn.target == "127.0.0.1:3306"
        assert conn.escape("it's") == "it\\'s"
        assert conn.string_literal("C:\\dir\\") == "'C:\\\\dir\\\\'"
        assert conn.binary_literal(b"\x01\xab") == "X'01AB'"
        assert conn.quote_identifier("order") == "`order`"
        assert conn.integrity_checks(False) == "SET FOREIGN_KEY_CHECKS = 0;"
        assert conn.integrity_checks(True) == "SET FOREIGN_KEY_CHECKS = 1;"

    @pytest.mark.asyncio
    async def test_create_statement_resets_auto_increment(self):
        conn = _mysql()
        create = (
            "CREATE TABLE `users` (\n"
            "  `id` int NOT NULL AUTO_INCREMENT,\n"
            "  PRIMARY KEY (`id`)\n"
            ") ENGINE=InnoDB AUTO_INCREMENT=1042 DEFAULT CHARSET=utf8mb4"
        )
        with patch.object(
            conn, "fetch_all", AsyncMock(return_value=[{"Table": "users", "Create Table": create}])
        ) as fetch:
            text = await conn.create_statement("users")

        fetch.assert_awaited_once_with("SHOW CREATE TABLE `users`")
        assert "AUTO_INCREMENT=1 DEFAULT CHARSET" in text
        assert "`id` int NOT NULL AUTO_INCREMENT," in text
        assert text.endswith(";")

    @pytest.mark.asyncio
    async def test_list_tables_reads_first_column(self):
        conn = _mysql()
        rows = [{"Tables_in_shop": "orders"}, {"Tables_in_shop": "users"}]
        with patch.object(conn, "fetch_all", AsyncMock(return_value=rows)):
            assert await conn.list_tables() == ["orders", "users"]

    @pytest.mark.asyncio
    async def test_list_tables_skips_views(self):
        conn = _mysql()
        rows = [
            {"Tables_in_shop": "orders", "Table_type": "BASE TABLE"},
            {"Tables_in_shop": "order_totals", "Table_type": "VIEW"},
            {"Tables_in_shop": "users", "Table_type": "BASE TABLE"},
        ]
        with patch.object(conn, "fetch_all", AsyncMock(return_value=rows)) as fetch:
            assert await conn.list_tables() == ["orders", "users"]

        fetch.assert_awaited_once_with("SHOW FULL TABLES WHERE Table_type = 'BASE TABLE'")

    @pytest.mark.asyncio
    async def test_create_statement_without_result(self):
        conn = _mysql()
        with patch.object(conn, "fetch_all", AsyncMock(return_value=[])):
            with pytest.raises(QueryFailedError):
                await conn.create_statement("users")

    @pytest.mark.asyncio
    async def test_query_requires_open_connection(self):
        with pytest.raises(RuntimeError, match="not open"):
            await _mysql().query("SELECT 1")

    @pytest.mark.asyncio
    async def test_connection_failure_is_wrapped(self):
        conn = _mysql()
        engine = AsyncMock()
        engine.connect.side_effect = OSError("Connection refused")
        with patch.object(conn, "_create_engine", return_value=engine):
            with pytest.raises(ConnectionFailedError, match="127.0.0.1:3306"):
                async with ensure_open(conn):
                    pass
        assert conn.status == "closed"
        engine.dispose.assert_awaited_once()


class TestPostgresConnection:
    """PostgreSQL dialect helpers and generated structure text."""

    def test_url(self):
        url = _postgres(host="pg").url()
        assert url.drivername == "postgresql+asyncpg"
        assert (url.host, url.port, url.database) == ("pg", 5432, "warehouse")

    def test_dialect_helpers(self):
        conn = _postgres()
        assert conn.sql_type == "PostgreSQL"
        assert conn.escape("it's") == "it''s"
        assert conn.quote_identifier('we"ird') == '"we""ird"'
        assert conn.integrity_checks(False) == "SET session_replication_role = replica;"
        assert conn.integrity_checks(True) == "SET session_replication_role = DEFAULT;"

    def test_literals(self):
        conn = _postgres()
        assert conn.binary_literal(b"\x01\xab") == "'\\x01ab'::bytea"
        assert conn.string_literal("C:\\dir\\") == "'C:\\dir' || chr(92)"

    @pytest.mark.asyncio
    async def test_bytea_rows_use_bytea_literal(self):
        conn = _postgres()
        rows = [{"id": 1, "payload": b"\x01\xab", "path": "C:\\tmp\\"}]
        with patch.object(conn, "query", AsyncMock(return_value=QueryResult(rows=rows))) as query:
            text = await data_of(conn, "files")

        query.assert_awaited_once_with('SELECT * FROM "files";')
        assert text.endswith(
            "INSERT INTO \"files\" VALUES (1,'\\x01ab'::bytea,'C:\\tmp' || chr(92));"
        )

    @pytest.mark.asyncio
    async def test_create_statement(self):
        conn = _postgres()
        columns = [
            {"name": "id", "type": "integer", "notnull": True,
             "default": "nextval('users_id_seq'::regclass)"},
            {"name": "email", "type": "character varying(255)", "notnull": True, "default": None},
            {"name": "active", "type": "boolean", "notnull": False, "default": "true"},
        ]
        primary_key = [{"column_name": "id"}]
        with patch.object(conn, "fetch_all", AsyncMock(side_effect=[columns, primary_key])):
            text = await conn.create_statement("users")

        lines = text.splitlines()
        assert lines[0] == 'CREATE TABLE "users" ('
        assert lines[1] == '  "id" serial NOT NULL,'
        assert lines[2] == '  "email" character varying(255) NOT NULL,'
        assert lines[3] == '  "active" boolean DEFAULT true,'
        assert lines[4] == '  PRIMARY KEY ("id")'
        assert lines[5] == ");"

    @pytest.mark.asyncio
    async def test_create_statement_unknown_table(self):
        conn = _postgres()
        with patch.object(conn, "fetch_all", AsyncMock(return_value=[])):
            with pytest.raises(QueryFailedError, match="No such table"):
                await conn.create_statement("nope")

    @pytest.mark.asyncio
    async def test_driver_version(self):
        conn = _postgres()
        with patch.object(conn, "fetch_all", AsyncMock(return_value=[{"server_version": "16.2"}])):
            assert await conn.driver_version() == "PostgreSQL 16.2"
