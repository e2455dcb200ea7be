# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""MySQL literal escaping for Python values.

escape() turns one value into the text of a complete SQL value expression,
following the MySQL string-escaping convention (backslash escapes inside
single quotes). It is a pure function: the timezone used for datetimes is
an explicit argument, never module or instance state.

    >>> escape(None)
    'NULL'
    >>> escape("O'Brien")
    "'O\\\\'Brien'"
    >>> escape([1, 2, 3])
    '(1, 2, 3)'
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence, Set
from datetime import date, datetime, timedelta, timezone as dt_timezone, tzinfo
from decimal import Decimal
from typing import Any

from ..errors import DataFormatError

# Characters MySQL requires (or recommends) escaping inside a quoted literal
_STRING_ESCAPES = str.maketrans({
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\b": "\\b",
    "\t": "\\t",
    "\x1a": "\\Z",
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
})

_OFFSET_RE = re.compile(r"^([+\- ])(\d\d):?(\d\d)?$")

UTC = "Z"
LOCAL = "local"


def resolve_timezone(timezone: str | None = UTC) -> tzinfo | None:
    """Map a timezone string to a tzinfo.

    Accepts "Z" (UTC), "local" (host zone, returned as None so that
    astimezone() picks it up) or a fixed offset like "+02:00", "-0530", "+08".

    Raises:
        DataFormatError: If the string is not recognized.
    """
    if timezone in (None, "", UTC):
        return dt_timezone.utc
    if timezone == LOCAL:
        return None
    match = _OFFSET_RE.match(timezone)
    if match is None:
        raise DataFormatError(f"Invalid timezone: {timezone!r}")
    sign, hours, minutes = match.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return dt_timezone(-offset if sign == "-" else offset)


def format_datetime(value: date, timezone: str | None = UTC) -> str:
    """Render a date/datetime in MySQL's canonical literal form (unquoted).

    Aware datetimes are converted to ``timezone``; naive datetimes are taken
    as wall-clock time and rendered unchanged.
    """
    target = resolve_timezone(timezone)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(target)
        return (
            f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
            f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}."
            f"{value.microsecond // 1000:03d}"
        )
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def escape_string(value: str) -> str:
    """Backslash-escape special characters and wrap in single quotes."""
    return "'" + value.translate(_STRING_ESCAPES) + "'"


def quote_identifier(name: str) -> str:
    """Return a back-quoted identifier. ``*`` is returned as is."""
    if name == "*":
        return name
    return "`" + str(name).replace("`", "``") + "`"


def _escape_number(value: int | float | Decimal) -> str:
    # Format through the base type: subclasses (IntEnum, ...) may override __str__
    if isinstance(value, int):
        return int.__repr__(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise DataFormatError(f"Cannot represent {value!r} as a SQL number")
        return float.__repr__(value)
    value = Decimal(value)
    if not value.is_finite():
        raise DataFormatError(f"Cannot represent {value!r} as a SQL number")
    return str(value)


def _escape_sequence(values: Any, timezone: str | None) -> str:
    # Nested sequences become parenthesized groups: ((1, 2), (3, 4))
    return "(" + ", ".join(escape(v, timezone, stringify_objects=True) for v in values) + ")"


def _escape_mapping(values: Mapping[str, Any], timezone: str | None) -> str:
    return ", ".join(
        f"{quote_identifier(key)}={escape(val, timezone, stringify_objects=True)}"
        for key, val in values.items()
    )


def escape(value: Any, timezone: str | None = UTC, stringify_objects: bool = False) -> str:
    """Convert a Python value to SQL literal text.

    Args:
        value: None, bool, int/float/Decimal, date/datetime, bytes-like,
            str, sequence or set of values, or mapping of column -> value.
        timezone: Target zone for aware datetimes ("Z", "local", "+HH:MM").
        stringify_objects: Render mappings as their quoted text form instead
            of a column assignment list (`` `key`=value, ... ``).

    Returns:
        A single, syntactically complete SQL value expression.

    Raises:
        DataFormatError: For non-finite numbers or an invalid timezone.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return _escape_number(value)
    if isinstance(value, date):
        return escape_string(format_datetime(value, timezone))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "X'" + bytes(value).hex() + "'"
    if isinstance(value, str):
        return escape_string(value)
    if isinstance(value, Mapping):
        if stringify_objects:
            return escape_string(str(value))
        return _escape_mapping(value, timezone)
    if isinstance(value, (Sequence, Set)):
        return _escape_sequence(value, timezone)
    return escape_string(str(value))


__all__ = [
    "LOCAL",
    "UTC",
    "escape",
    "escape_string",
    "format_datetime",
    "quote_identifier",
    "resolve_timezone",
]
