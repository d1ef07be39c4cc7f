"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from sqlport.config import load_db_config, DatabaseConfig, MySQLConfig
"""

from sqlport.config.loader import load_db_config
from sqlport.config.models import (
    DatabaseConfig,
    DatabaseProfile,
    DumpSettings,
    MySQLConfig,
    PostgresConfig,
    SQLiteConfig,
)

__all__ = [
    "load_db_config",
    "DatabaseConfig",
    "DatabaseProfile",
    "DumpSettings",
    "MySQLConfig",
    "PostgresConfig",
    "SQLiteConfig",
]
