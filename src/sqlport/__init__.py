"""sqlport: portable SQL dump and restore for MySQL, SQLite and PostgreSQL.

Serializes a database's structure and contents into a plain SQL script and
replays such scripts against a live connection.

Usage:
    from sqlport import get_connection, generate_dump, restore_dump
    from sqlport import SQLiteConnection, SQLiteConfig
    from sqlport import load_db_config, DatabaseConfig
"""

__version__ = "0.1.0"

# Connections
from sqlport.adapters import (
    Connection,
    ConnectionFailedError,
    MySQLConnection,
    PostgresConnection,
    QueryFailedError,
    QueryResult,
    SQLiteConnection,
    ensure_open,
)

# Config
from sqlport.config.loader import load_db_config
from sqlport.config.models import (
    DatabaseConfig,
    DatabaseProfile,
    MySQLConfig,
    PostgresConfig,
    SQLiteConfig,
)

# Factory
from sqlport.factory import ProfileNotFoundError, create_connection, get_connection

# Dump / restore
from sqlport.dump import (
    RestoreOutcome,
    Statement,
    StatementError,
    StatementSplitter,
    UnterminatedStatementError,
    dump_database,
    encode_value,
    generate_dump,
    restore_dump,
    run_restore,
    split_statements,
)

__all__ = [
    # Connections
    "Connection",
    "ConnectionFailedError",
    "QueryFailedError",
    "QueryResult",
    "ensure_open",
    "MySQLConnection",
    "PostgresConnection",
    "SQLiteConnection",
    # Config
    "load_db_config",
    "DatabaseConfig",
    "DatabaseProfile",
    "MySQLConfig",
    "PostgresConfig",
    "SQLiteConfig",
    # Factory
    "ProfileNotFoundError",
    "create_connection",
    "get_connection",
    # Dump / restore
    "encode_value",
    "generate_dump",
    "dump_database",
    "StatementSplitter",
    "UnterminatedStatementError",
    "split_statements",
    "Statement",
    "StatementError",
    "RestoreOutcome",
    "run_restore",
    "restore_dump",
]
