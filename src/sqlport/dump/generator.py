"""Dump generator: a whole database (or a table subset) to one SQL script.

Usage:
    from sqlport.dump.generator import dump_database, generate_dump

    text = await generate_dump(conn, parts="structure", tables="users,orders")
    path = await dump_database(conn)   # ./dumps/dump-<timestamp>.sql
"""

import logging
import os
import platform
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from sqlport import __version__
from sqlport.adapters.base import Connection, ensure_open
from sqlport.dump.serializer import data_of, structure_of

logger = logging.getLogger(__name__)

TOOL_NAME = "sqlport"
TOOL_SUMMARY = "Portable SQL dump and restore for MySQL, SQLite and PostgreSQL"

STRUCTURE = "structure"
DATA = "data"
STRUCTURE_AND_DATA = f"{STRUCTURE},{DATA}"

_PARTS = (STRUCTURE, DATA)


def _split_list(value: str | Sequence[str] | None) -> list[str]:
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [item.strip() for item in items if item.strip()]


def _parse_parts(parts: str | Sequence[str]) -> set[str]:
    selected = {part.lower() for part in _split_list(parts)}
    unknown = selected - set(_PARTS)
    if unknown:
        raise ValueError(
            f"Unknown dump part(s): {', '.join(sorted(unknown))}. "
            f"Expected one or more of: {', '.join(_PARTS)}"
        )
    if not selected:
        raise ValueError("At least one dump part must be selected")
    return selected


def _header_line(label: str, value: str) -> str:
    return f"-- {label + ':':<11}{value}".rstrip()


async def _header(conn: Connection) -> list[str]:
    return [
        f"-- SQL Dump v{__version__} by {TOOL_NAME}",
        f"-- {TOOL_SUMMARY}",
        "--",
        _header_line("Python", platform.python_version()),
        _header_line("SQL Type", conn.sql_type),
        _header_line("Version", await conn.driver_version()),
        "--",
        _header_line(conn.target_label, conn.target),
        "--",
        _header_line("Timestamp", datetime.now().strftime("%d. %B %Y %H:%M:%S")),
        "",
    ]


async def generate_dump(
    conn: Connection,
    parts: str | Sequence[str] = STRUCTURE_AND_DATA,
    tables: str | Sequence[str] | None = None,
) -> str:
    """Serialize the database behind *conn* into dump text.

    The output holds a metadata header, the integrity-checks-disable
    statement, one structure and/or data block per table (structure first,
    in table order) and the integrity-checks-enable statement.

    The connection is opened if it is closed and closed again afterwards;
    a connection that was already open is left open.

    Args:
        conn: Connection to dump.
        parts: ``"structure"``, ``"data"`` or both, as a comma-separated
            string or a sequence.
        tables: Tables to dump, as a comma-separated string or a sequence.
            Entries are trimmed and empty ones dropped.  When nothing is
            left, every table in the catalog is dumped.

    Returns:
        The dump text, lines joined with the platform line separator.

    Raises:
        ValueError: If *parts* names an unknown part.
        ConnectionFailedError: If the connection cannot be opened.
        QueryFailedError: If a catalog or table query fails.
    """
    selected = _parse_parts(parts)
    table_list = _split_list(tables)

    async with ensure_open(conn):
        if not table_list:
            table_list = await conn.list_tables()

        lines = await _header(conn)
        lines.append(conn.integrity_checks(False))

        for table in table_list:
            if STRUCTURE in selected:
                lines.append(await structure_of(conn, table))
            if DATA in selected:
                lines.append(await data_of(conn, table))

        lines.extend(["", conn.integrity_checks(True), ""])

    logger.info(f"Dumped {len(table_list)} table(s) from {conn.sql_type} {conn.target}")
    return os.linesep.join(lines)


async def dump_database(
    conn: Connection,
    output_path: str | None = None,
    parts: str | Sequence[str] = STRUCTURE_AND_DATA,
    tables: str | Sequence[str] | None = None,
    output_dir: str = "dumps",
) -> str:
    """Write a dump of *conn* to a file.

    Args:
        conn: Connection to dump.
        output_path: Destination file.  When ``None``, a timestamped path
            under ``./<output_dir>/`` is generated.
        parts: See ``generate_dump``.
        tables: See ``generate_dump``.
        output_dir: Directory for generated paths.

    Returns:
        Path of the written dump file.
    """
    if output_path is None:
        dumps_dir = Path.cwd() / output_dir
        dumps_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
        output_path = str(dumps_dir / f"dump-{timestamp}.sql")

    text = await generate_dump(conn, parts=parts, tables=tables)

    output_path_obj = Path(output_path)
    output_path_obj.parent.mkdir(parents=True, exist_ok=True)

    # Line separators are already platform-specific; write them untranslated
    with open(output_path_obj, "w", encoding="utf-8", newline="") as f:
        f.write(text)

    logger.info(f"Wrote dump to {output_path}")
    return output_path
