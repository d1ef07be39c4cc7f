"""Pydantic models for connection profiles and dump settings."""

import re
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator


_SETTING_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


# ============================================================================
# Backend Configuration Models
# ============================================================================


class ConnectionSettings(BaseModel):
    """Settings shared by every backend profile."""

    description: str = ""
    persistent: bool = False  # keep the pooled engine alive across close()


class ServerSettings(ConnectionSettings):
    """Settings for backends reached over the network."""

    host: str = "127.0.0.1"
    port: int = Field(ge=1, le=65535)
    user: str
    password: str = ""
    encoding: str = "utf8"

    @field_validator("encoding")
    @classmethod
    def _check_setting(cls, value: str) -> str:
        # Interpolated into SET statements on open
        if not _SETTING_RE.match(value):
            raise ValueError(f"Invalid connection setting: {value!r}")
        return value


class MySQLConfig(ServerSettings):
    """MySQL / MariaDB connection profile."""

    provider: Literal["mysql"] = "mysql"
    port: int = Field(default=3306, ge=1, le=65535)
    database: str
    encoding: str = "utf8mb4"
    locale: str = "en_US"

    @field_validator("locale")
    @classmethod
    def _check_locale(cls, value: str) -> str:
        if not _SETTING_RE.match(value):
            raise ValueError(f"Invalid connection setting: {value!r}")
        return value


class PostgresConfig(ServerSettings):
    """PostgreSQL connection profile."""

    provider: Literal["postgres"] = "postgres"
    port: int = Field(default=5432, ge=1, le=65535)
    database: str | None = None


class SQLiteConfig(ConnectionSettings):
    """SQLite database file profile."""

    provider: Literal["sqlite"] = "sqlite"
    path: str = Field(min_length=1)
    password: str = ""  # not supported by the stdlib driver; kept for profile parity


DatabaseProfile = Annotated[
    MySQLConfig | PostgresConfig | SQLiteConfig,
    Field(discriminator="provider"),
]


class DumpSettings(BaseModel):
    """Defaults for the ``dump`` and ``restore`` commands."""

    parts: str = "structure,data"
    output_dir: str = "dumps"
    exit_on_error: bool = False


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    dump: DumpSettings = Field(default_factory=DumpSettings)
