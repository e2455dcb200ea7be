# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SQL text generation and pooled adapters for MySQL.

Components:
    escape: Value → SQL literal text (MySQL backslash-escaping convention).
    compile_condition: Polymorphic where condition → SQL boolean text.
    Condition nodes: Raw, Fragment, And, Or, Not, Equals, Compare, Match.
    build_*: INSERT / UPDATE / DELETE / SELECT statement assembly.
    DbAdapter, MysqlAdapter, get_adapter: Pooled connection adapters.

Escaping and condition compilation are pure and synchronous: they hold no
state and can be called concurrently from any task.

Example:
    >>> compile_condition(["$and", ["a", 1], ["b", ">", 2]])
    '((`a`=1) AND (`b` > 2))'
    >>> build_select("users", ["id"], {"name": "Ann"})
    "SELECT `id` FROM `users` WHERE `name`='Ann'"
"""

from .adapters import DbAdapter, MysqlAdapter, QueryResult, get_adapter
from .condition import (
    And,
    Compare,
    Condition,
    Equals,
    Fragment,
    Match,
    Not,
    Or,
    Raw,
    compile_condition,
    parse_condition,
)
from .escape import escape, format_datetime, quote_identifier
from .statement import (
    build_delete,
    build_insert,
    build_select,
    build_select_one,
    build_update,
    ensure_limit,
)

__all__ = [
    # Escaping
    "escape",
    "format_datetime",
    "quote_identifier",
    # Conditions
    "Condition",
    "Raw",
    "Fragment",
    "And",
    "Or",
    "Not",
    "Equals",
    "Compare",
    "Match",
    "parse_condition",
    "compile_condition",
    # Statements
    "build_insert",
    "build_update",
    "build_delete",
    "build_select",
    "build_select_one",
    "ensure_limit",
    # Adapters
    "DbAdapter",
    "MysqlAdapter",
    "QueryResult",
    "get_adapter",
]
