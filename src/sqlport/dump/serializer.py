"""Schema/data serializer: one table to DROP/CREATE/INSERT statement text.

Both functions only read from the connection.  Query failures propagate
as ``QueryFailedError``; nothing is retried.
"""

import logging
import os

from sqlport.adapters.base import Connection, QueryFailedError
from sqlport.dump.encoder import encode_value

logger = logging.getLogger(__name__)


async def structure_of(conn: Connection, table: str) -> str:
    """Return the structure block for *table*.

    The block is a comment header, a ``DROP TABLE IF EXISTS`` guard and the
    backend-native ``CREATE TABLE`` text.
    """
    quoted = conn.quote_identifier(table)
    lines = [
        "",
        "--",
        f"-- Table structure for {quoted}",
        "--",
        f"DROP TABLE IF EXISTS {quoted};",
        await conn.create_statement(table),
    ]
    return os.linesep.join(lines)


async def data_of(conn: Connection, table: str) -> str:
    """Return the content block for *table*: one INSERT per row.

    Values are written in column order and encoded with the connection's
    string and binary literals.  Integer keys are positional duplicates
    some drivers add next to the named columns and are skipped.

    Raises:
        QueryFailedError: If the ``SELECT`` is rejected.
    """
    quoted = conn.quote_identifier(table)
    lines = [
        "",
        "--",
        f"-- Table content for {quoted}",
        "--",
    ]

    result = await conn.query(f"SELECT * FROM {quoted};")
    if not result.success:
        raise QueryFailedError(f"Failed to read {table}: {result.error or conn.error()}")

    for row in result.rows:
        values = [
            encode_value(value, conn.string_literal, conn.binary_literal)
            for key, value in row.items()
            if not isinstance(key, int)
        ]
        lines.append(f"INSERT INTO {quoted} VALUES ({','.join(values)});")

    logger.debug(f"Serialized {len(result.rows)} rows from {table}")
    return os.linesep.join(lines)
