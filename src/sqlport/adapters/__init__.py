"""Database connections package.

Provides the ``Connection`` Protocol and the concrete async connections
for MySQL, SQLite and PostgreSQL.

Usage:
    from sqlport.adapters import Connection, SQLiteConnection, ensure_open
"""

from sqlport.adapters.base import (
    Column,
    Connection,
    ConnectionFailedError,
    QueryFailedError,
    QueryResult,
    ensure_open,
)
from sqlport.adapters.mysql import MySQLConnection
from sqlport.adapters.postgres import PostgresConnection
from sqlport.adapters.sqlite import SQLiteConnection

__all__ = [
    "Column",
    "Connection",
    "ConnectionFailedError",
    "QueryFailedError",
    "QueryResult",
    "ensure_open",
    "MySQLConnection",
    "PostgresConnection",
    "SQLiteConnection",
]
