"""Value encoder: one column value to one SQL literal.

Pure functions, no I/O.  How a string or binary value is quoted is
dialect-specific and comes from the connection's ``string_literal()`` and
``binary_literal()``; the defaults are the backslash style and ``X'..'``
hex literals MySQL dumps use.
"""

import math
import os
from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any


def escape_quotes(value: str) -> str:
    """Prefix every single quote with a backslash."""
    return value.replace("'", "\\'")


def quote_string(value: str) -> str:
    return "'" + escape_quotes(value) + "'"


def hex_literal(value: bytes) -> str:
    return "X'" + value.hex().upper() + "'"


def encode_value(
    value: Any,
    string_literal: Callable[[str], str] = quote_string,
    binary_literal: Callable[[bytes], str] = hex_literal,
) -> str:
    """Render *value* as a SQL literal.

    - ``None`` becomes ``NULL``.
    - Integers, finite floats and decimals are written unquoted.
    - Bytes go through *binary_literal*.
    - Strings lose carriage returns, have newlines rewritten to the platform
      line separator, and are quoted by *string_literal*.

    Examples:
        >>> encode_value(None)
        'NULL'
        >>> encode_value(42)
        '42'
        >>> encode_value("it's")
        "'it\\\\'s'"
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return repr(value)
    if isinstance(value, Decimal) and value.is_finite():
        return str(value)
    if isinstance(value, bytes | bytearray | memoryview):
        return binary_literal(bytes(value))

    if isinstance(value, datetime):
        text = value.isoformat(sep=" ")
    elif isinstance(value, date | time):
        text = value.isoformat()
    else:
        text = str(value)

    text = text.replace("\r", "").replace("\n", os.linesep)
    return string_literal(text)


def encode_row(
    values: list[Any],
    string_literal: Callable[[str], str] = quote_string,
    binary_literal: Callable[[bytes], str] = hex_literal,
) -> str:
    """Render a row as the parenthesised value list of an INSERT."""
    return "(" + ",".join(encode_value(v, string_literal, binary_literal) for v in values) + ")"
