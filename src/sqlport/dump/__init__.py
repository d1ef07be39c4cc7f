"""Dump and restore engine.

Provides the value encoder, the per-table serializer, the dump generator,
the statement splitter and the restore executor.

Usage:
    from sqlport.dump import generate_dump, restore_dump, split_statements
"""

from sqlport.dump.encoder import encode_row, encode_value, escape_quotes, hex_literal, quote_string
from sqlport.dump.generator import (
    DATA,
    STRUCTURE,
    STRUCTURE_AND_DATA,
    dump_database,
    generate_dump,
)
from sqlport.dump.models import RestoreOutcome, Statement, StatementError
from sqlport.dump.restore import read_dump_lines, restore_dump, run_restore
from sqlport.dump.serializer import data_of, structure_of
from sqlport.dump.splitter import (
    ParserState,
    StatementSplitter,
    UnterminatedStatementError,
    split_dump_text,
    split_statements,
)

__all__ = [
    "encode_value",
    "encode_row",
    "escape_quotes",
    "quote_string",
    "hex_literal",
    "structure_of",
    "data_of",
    "STRUCTURE",
    "DATA",
    "STRUCTURE_AND_DATA",
    "generate_dump",
    "dump_database",
    "ParserState",
    "StatementSplitter",
    "UnterminatedStatementError",
    "split_dump_text",
    "split_statements",
    "Statement",
    "StatementError",
    "RestoreOutcome",
    "read_dump_lines",
    "run_restore",
    "restore_dump",
]
