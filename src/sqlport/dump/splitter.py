"""Statement splitter: dump lines in, executable statements out.

Delimits statements with line-oriented heuristics rather than a SQL
grammar.  Three states are tracked per line:

- ``Normal``: blank lines, ``--``/``#`` comment lines and block comments
  are skipped; anything else is accumulated.
- ``InBlockComment``: lines are skipped until one contains ``*/``.
- ``InQuotedValue``: a string literal is open across physical lines.  The
  line break is kept in the statement text and nothing terminates the
  statement, not even a trailing ``;``.

Quote tracking is a parity count: after dropping doubled backslashes, the
number of ``'`` minus the number of ``\\'`` on a line flips the quoted state
when odd.  Backslash escaping is the only escape recognised; doubled
quotes (``''``) keep parity even and therefore also pass through.

Usage:
    from sqlport.dump.splitter import StatementSplitter, split_dump_text

    for statement in StatementSplitter(split_dump_text(dump)):
        print(statement.line_number, statement.sql)
"""

import logging
import os
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from sqlport.dump.models import Statement

logger = logging.getLogger(__name__)

LINE_COMMENT_MARKERS = ("--", "#")
BLOCK_COMMENT_START = "/*"
BLOCK_COMMENT_END = "*/"

_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")


class UnterminatedStatementError(ValueError):
    """Raised in strict mode when input ends inside a statement."""

    def __init__(self, line_number: int, text: str) -> None:
        self.line_number = line_number
        self.text = text
        super().__init__(
            f"Unterminated statement at end of input (line {line_number}): "
            f"{text.strip()[:80]}"
        )


@dataclass
class ParserState:
    """Mutable scan state; fresh for every pass over the input."""

    in_quoted_value: bool = False
    in_block_comment: bool = False
    pending_text: str = ""
    line_count: int = 0


def split_dump_text(text: str) -> list[str]:
    """Split raw dump text on ``\\r\\n``, ``\\n`` or ``\\r``."""
    return _LINE_BREAK_RE.split(text)


def toggles_quote(line: str) -> bool:
    """Return True when *line* opens or closes a quoted value."""
    scratch = line.replace("\\\\", "")
    quotes = scratch.count("'") - scratch.count("\\'")
    return quotes % 2 != 0


class StatementSplitter:
    """Iterable of the complete statements contained in *lines*.

    Each ``iter()`` rescans the input from the start, so the same splitter
    can be consumed more than once.  Text left over at the end of input
    without a terminating ``;`` is discarded with a warning, or raises
    ``UnterminatedStatementError`` when *strict* is set.

    Args:
        lines: Physical dump lines.  A plain string is split first.
        strict: Raise instead of discarding an unterminated tail.
    """

    def __init__(self, lines: Iterable[str] | str, strict: bool = False) -> None:
        if isinstance(lines, str):
            lines = split_dump_text(lines)
        elif not isinstance(lines, Sequence):
            lines = list(lines)
        self._lines: Sequence[str] = lines
        self.strict = strict

    def __iter__(self) -> Iterator[Statement]:
        return self._scan()

    def _scan(self) -> Iterator[Statement]:
        state = ParserState()
        index = 0
        line_number = 0

        for line_number, raw in enumerate(self._lines, start=1):
            text = raw.rstrip("\r\n")

            if state.in_block_comment:
                if BLOCK_COMMENT_END in text:
                    state.in_block_comment = False
                continue

            chunk = text
            if not state.in_quoted_value:
                stripped = text.lstrip()
                if not stripped or stripped.startswith(LINE_COMMENT_MARKERS):
                    continue
                if stripped.startswith(BLOCK_COMMENT_START):
                    # A comment closed on its own line needs no state change
                    if BLOCK_COMMENT_END not in stripped[len(BLOCK_COMMENT_START):]:
                        state.in_block_comment = True
                    continue
            else:
                chunk = os.linesep + text

            if toggles_quote(text):
                state.in_quoted_value = not state.in_quoted_value

            state.pending_text += chunk

            if state.in_quoted_value:
                continue

            state.line_count += 1

            if text.strip().endswith(";"):
                yield Statement(
                    index=index,
                    sql=state.pending_text,
                    line_number=line_number,
                    line_count=state.line_count,
                    last_line=text,
                )
                index += 1
                state.pending_text = ""
                state.line_count = 0

        if state.pending_text.strip():
            if self.strict:
                raise UnterminatedStatementError(line_number, state.pending_text)
            logger.warning(
                f"Discarding unterminated statement at end of input "
                f"(line {line_number}): {state.pending_text.strip()[:80]}"
            )


def split_statements(lines: Iterable[str] | str, strict: bool = False) -> Iterator[Statement]:
    """Lazily yield the statements contained in *lines*."""
    return iter(StatementSplitter(lines, strict=strict))
