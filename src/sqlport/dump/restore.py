"""Restore executor: replay a dump against a connection in one transaction.

Statements are submitted strictly in dump order.  A statement the backend
rejects is recorded and, unless ``exit_on_error`` is set, the restore
moves on; the transaction is still committed at the end.  Only an
exception escaping the loop (lost connection, failed commit) rolls the
transaction back.

Usage:
    from sqlport.dump.restore import restore_dump, run_restore

    outcome = await run_restore(conn, "dumps/shop.sql")
    print(outcome.format_report())

    ok = await restore_dump(conn, dump_text)   # True / False
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from sqlport.adapters.base import Connection, ensure_open
from sqlport.dump.models import RestoreOutcome, StatementError
from sqlport.dump.splitter import StatementSplitter, split_dump_text

logger = logging.getLogger(__name__)

DumpSource = str | os.PathLike | Iterable[str]


def read_dump_lines(dump: DumpSource) -> list[str]:
    """Resolve a dump given as a file path, raw text or pre-split lines.

    A string is treated as a path when it names an existing file and holds
    no line break; otherwise it is dump text.
    """
    if isinstance(dump, os.PathLike):
        return split_dump_text(Path(dump).read_text(encoding="utf-8"))
    if isinstance(dump, str):
        if "\n" not in dump and "\r" not in dump and os.path.isfile(dump):
            return split_dump_text(Path(dump).read_text(encoding="utf-8"))
        return split_dump_text(dump)
    return list(dump)


async def run_restore(
    conn: Connection,
    dump: DumpSource,
    exit_on_error: bool = False,
    strict: bool = False,
) -> RestoreOutcome:
    """Execute every statement of *dump* against *conn*.

    Args:
        conn: Target connection.  Opened if closed, and closed again only
            if this call opened it.
        dump: File path, raw dump text or a sequence of lines.
        exit_on_error: Stop at the first rejected statement.  Statements
            after it are never submitted.
        strict: Treat an unterminated statement at end of input as an
            error instead of discarding it.

    Returns:
        RestoreOutcome with one ``StatementError`` per rejected statement,
        and ``rolled_back``/``exception`` set when the transaction was
        rolled back.

    Raises:
        ConnectionFailedError: If the connection cannot be opened.
    """
    splitter = StatementSplitter(read_dump_lines(dump), strict=strict)
    outcome = RestoreOutcome()

    async with ensure_open(conn):
        await conn.begin_transaction()
        try:
            for statement in splitter:
                result = await conn.query(statement.sql)
                outcome.statements_executed += 1

                if not result.success:
                    message = result.error or conn.error()
                    logger.warning(f"Statement failed at line {statement.line_number}: {message}")
                    outcome.errors.append(StatementError(
                        statement_index=statement.index,
                        line_number=statement.line_number,
                        code=statement.last_line,
                        message=message,
                        executed=statement.index,
                    ))
                    if exit_on_error:
                        break
                else:
                    logger.debug(f"Executed statement {statement.index} (line {statement.line_number})")

            await conn.commit()
        except Exception as e:
            logger.error(f"Restore aborted, rolling back: {e}")
            await conn.rollback()
            outcome.rolled_back = True
            outcome.exception = str(e)

    logger.info(
        f"Restore finished: {outcome.statements_executed} statement(s), "
        f"{len(outcome.errors)} error(s)"
    )
    return outcome


async def restore_dump(
    conn: Connection,
    dump: DumpSource,
    exit_on_error: bool = False,
    return_error: bool = False,
) -> bool | str:
    """Restore *dump* and report success the flag-driven way.

    Returns:
        ``True`` when every statement succeeded.  Otherwise the multi-line
        error report if *return_error* is set, else ``False``.
    """
    outcome = await run_restore(conn, dump, exit_on_error=exit_on_error)
    if outcome.success:
        return True
    if return_error:
        return outcome.format_report()
    return False
