"""TOML loader for database profiles.

Example ``db.toml``:

    [profiles.local]
    provider = "mysql"
    description = "Local development server"
    user = "root"
    database = "shop"

    [profiles.cache]
    provider = "sqlite"
    path = "data/cache.sqlite"

    [dump]
    parts = "structure,data"
    output_dir = "dumps"
"""

import tomllib
from pathlib import Path

from sqlport.config.models import DatabaseConfig


def load_db_config(config_path: Path | str | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Args:
        config_path: Path to db.toml (default: ``./db.toml``).

    Returns:
        DatabaseConfig with all profiles.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config format is invalid (pydantic's
            ``ValidationError`` is a ``ValueError``).
    """
    if config_path is None:
        config_path = Path.cwd() / "db.toml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create db.toml with at least one [profiles.<name>] table."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return DatabaseConfig(
        profiles=data.get("profiles", {}),
        dump=data.get("dump", {}),
    )
