"""Connection factory.

Resolves the active profile from db.toml and builds the matching
connection.  The active profile comes from, in order:

1. ``{env_prefix}DB_PROFILE`` env var (for a first connect or CI/CD)
2. ``.db-profile`` lock file in the working directory (written by a
   successful ``sqlport connect``)

``{env_prefix}DB_PASSWORD`` overrides the password stored in the profile.
"""

import logging
import os
from pathlib import Path

from sqlport.adapters.base import Connection
from sqlport.adapters.mysql import MySQLConnection
from sqlport.adapters.postgres import PostgresConnection
from sqlport.adapters.sqlite import SQLiteConnection
from sqlport.config.loader import load_db_config
from sqlport.config.models import DatabaseProfile, MySQLConfig, PostgresConfig, SQLiteConfig

logger = logging.getLogger(__name__)

_PROFILE_LOCK_FILE_NAME = ".db-profile"


# ============================================================================
# Profile Lock File Operations
# ============================================================================


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


def _lock_file() -> Path:
    return Path.cwd() / _PROFILE_LOCK_FILE_NAME


def read_profile_lock() -> str | None:
    """Read profile name from lock file.

    Returns:
        Profile name if lock file exists, None otherwise
    """
    lock_file = _lock_file()
    if lock_file.exists():
        return lock_file.read_text().strip() or None
    return None


def write_profile_lock(profile_name: str) -> None:
    """Write profile name to lock file.

    Only call this after a successful connection.

    Args:
        profile_name: Name of the verified profile
    """
    _lock_file().write_text(profile_name)


def clear_profile_lock() -> None:
    """Remove profile lock file."""
    lock_file = _lock_file()
    if lock_file.exists():
        lock_file.unlink()


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from env var or lock file.

    Args:
        env_prefix: Prefix for the ``DB_PROFILE`` env var
            (e.g. ``"SHOP_"`` reads ``SHOP_DB_PROFILE``).

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_profile = os.environ.get(f"{env_prefix}DB_PROFILE")
    if env_profile:
        return env_profile

    lock_profile = read_profile_lock()
    if lock_profile:
        return lock_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Run: {env_prefix}DB_PROFILE=<name> sqlport connect"
    )


# ============================================================================
# Connection Factory
# ============================================================================


def create_connection(profile: DatabaseProfile) -> Connection:
    """Build the connection class matching ``profile.provider``.

    The connection is returned closed.
    """
    if isinstance(profile, MySQLConfig):
        return MySQLConnection(profile)
    if isinstance(profile, PostgresConfig):
        return PostgresConnection(profile)
    if isinstance(profile, SQLiteConfig):
        return SQLiteConnection(profile)
    raise ValueError(f"Unsupported provider: {getattr(profile, 'provider', profile)!r}")


def resolve_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | str | None = None,
) -> tuple[str, DatabaseProfile]:
    """Resolve profile name and configuration, applying the password override.

    Raises:
        ProfileNotFoundError: If no profile is configured or the name is
            not in db.toml.
        FileNotFoundError: If db.toml doesn't exist.
    """
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix)

    config = load_db_config(config_path)
    if profile_name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    profile = config.profiles[profile_name]
    password = os.environ.get(f"{env_prefix}DB_PASSWORD")
    if password:
        profile = profile.model_copy(update={"password": password})

    return profile_name, profile


def get_connection(
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | str | None = None,
) -> Connection:
    """Create a connection for the given or active profile.

    Args:
        profile_name: Profile name from db.toml.  If None, uses the
            ``{env_prefix}DB_PROFILE`` env var or the ``.db-profile`` lock file.
        env_prefix: Prefix for the ``DB_PROFILE``/``DB_PASSWORD`` env vars.
        config_path: Path to db.toml (default: ``./db.toml``).

    Returns:
        A new, closed connection.  Nothing is cached.

    Example:
        >>> conn = get_connection("local")
        >>> text = await generate_dump(conn)
    """
    name, profile = resolve_profile(profile_name, env_prefix, config_path)
    logger.debug(f"Using profile {name} ({profile.provider})")
    return create_connection(profile)
