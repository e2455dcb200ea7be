# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQL statement assembly for INSERT, UPDATE, DELETE and SELECT.

Builders are pure functions returning SQL text with every value inlined
through escape(). Conditions go through compile_condition(); an empty
condition omits the WHERE keyword. ``tail`` is trusted text appended at the
end (ORDER BY, LIMIT, ...).
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..errors import DataFormatError
from .condition import compile_condition
from .escape import UTC, escape, quote_identifier

_LIMIT_RE = re.compile(r"\blimit\s", re.IGNORECASE)


def _join(*parts: str | None) -> str:
    return " ".join(part for part in parts if part)


def _where(condition: Any, timezone: str | None) -> str:
    sql = compile_condition(condition, timezone)
    return f"WHERE {sql}" if sql else ""


def _fields_sql(fields: str | Sequence[str] | None) -> str:
    if fields is None:
        return "*"
    if isinstance(fields, str):
        return fields.strip() or "*"
    return ", ".join(quote_identifier(f) for f in fields) or "*"


def build_insert(
    table: str,
    rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
    timezone: str | None = UTC,
    missing: Any = "",
) -> str:
    """Build a (multi-row) INSERT statement.

    The column list is the union of keys across all rows, in order of first
    appearance. A row without one of the columns gets ``missing`` for it
    (an empty string unless told otherwise). Values present in a row are
    escaped as they are, so None, 0 and False keep their meaning.

    Args:
        table: Table name.
        rows: One mapping or a sequence of mappings.
        timezone: Timezone for datetime values.
        missing: Placeholder value for columns absent from a row.

    Raises:
        DataFormatError: If rows is empty or contains a non-mapping.

    Example:
        >>> build_insert("t", [{"a": 1}, {"b": 2}])
        "INSERT INTO `t`(`a`,`b`) VALUES (1,''),('',2)"
    """
    if isinstance(rows, Mapping):
        rows = [rows]
    if (
        not isinstance(rows, Sequence)
        or isinstance(rows, str)
        or not rows
        or not all(isinstance(row, Mapping) for row in rows)
    ):
        raise DataFormatError("Bad data format: rows must be a mapping or a list of mappings.")

    fields = list(dict.fromkeys(key for row in rows for key in row))
    columns = ",".join(quote_identifier(f) for f in fields)
    values = ",".join(
        "(" + ",".join(escape(row[f] if f in row else missing, timezone) for f in fields) + ")"
        for row in rows
    )
    return f"INSERT INTO {quote_identifier(table)}({columns}) VALUES {values}"


def build_update(
    table: str,
    condition: Any,
    data: Mapping[str, Any],
    tail: str = "",
    timezone: str | None = UTC,
) -> str:
    """Build an UPDATE statement from a column -> value mapping.

    Raises:
        DataFormatError: If data is not a non-empty mapping.
    """
    if not isinstance(data, Mapping) or not data:
        raise DataFormatError("Data must be a non-empty mapping.")

    assignments = ",".join(
        f"{quote_identifier(key)}={escape(value, timezone)}" for key, value in data.items()
    )
    return _join(
        "UPDATE",
        quote_identifier(table),
        "SET",
        assignments,
        _where(condition, timezone),
        (tail or "").strip(),
    )


def build_delete(
    table: str, condition: Any, tail: str = "", timezone: str | None = UTC
) -> str:
    """Build a DELETE statement."""
    return _join(
        "DELETE FROM",
        quote_identifier(table),
        _where(condition, timezone),
        (tail or "").strip(),
    )


def build_select(
    table: str,
    fields: str | Sequence[str] | None = "*",
    condition: Any = None,
    tail: str = "",
    timezone: str | None = UTC,
) -> str:
    """Build a SELECT statement.

    ``fields`` is either raw column text ("id, COUNT(*) AS n") or a list of
    column names, each back-quoted.
    """
    return _join(
        "SELECT",
        _fields_sql(fields),
        "FROM",
        quote_identifier(table),
        _where(condition, timezone),
        (tail or "").strip(),
    )


def ensure_limit(tail: str = "") -> str:
    """Append ``LIMIT 1`` unless tail already has a LIMIT clause."""
    tail = (tail or "").strip()
    if _LIMIT_RE.search(tail):
        return tail
    return _join(tail, "LIMIT 1")


def build_select_one(
    table: str,
    fields: str | Sequence[str] | None = "*",
    condition: Any = None,
    tail: str = "",
    timezone: str | None = UTC,
) -> str:
    """Build a SELECT statement limited to a single row."""
    return build_select(table, fields, condition, ensure_limit(tail), timezone)


__all__ = [
    "build_insert",
    "build_update",
    "build_delete",
    "build_select",
    "build_select_one",
    "ensure_limit",
]
