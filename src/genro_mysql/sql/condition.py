# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Where-condition compiler: polymorphic condition values to SQL boolean text.

A condition can be given in three shapes:

1. Raw string, used verbatim (trusted SQL)::

       "id > 10 AND deleted = 0"

2. Equality mapping, a conjunction of ``column = value`` tests::

       {"status": "active", "tenant_id": 7}  →  `status`='active' AND `tenant_id`=7

3. Prefix expression, a list whose first element is a logical tag or a field::

       ["$and", ["a", 1], ["$or", ["b", ">", 2], ["c", "IN", [1, 2]]]]
       →  ((`a`=1) AND ((`b` > 2) OR (`c` IN (1, 2))))

   ``["field", value]`` is an equality, ``["field", op, value]`` a comparison,
   ``["raw sql"]`` a parenthesized trusted fragment, ``[]`` no condition.

Each shape is parsed into an explicit node tree (Raw, Fragment, And, Or,
Not, Equals, Compare, Match) which is then compiled. Nodes can also be
built directly, which is the only way to use a subquery as a value::

    Compare("id", "IN", Raw("SELECT user_id FROM banned"))

compile_condition() returns None when there is nothing to filter on, so
callers can omit the WHERE keyword entirely.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass
from typing import Any, ClassVar

from ..errors import ConditionError
from .escape import UTC, escape, quote_identifier

OPERATORS = frozenset({
    "=", "!=", "<>", "<", ">", "<=", ">=", "<=>",
    "LIKE", "NOT LIKE",
    "IN", "NOT IN",
    "IS", "IS NOT",
    "BETWEEN", "NOT BETWEEN",
    "REGEXP", "NOT REGEXP", "RLIKE",
})

AND = "$and"
OR = "$or"
NOT = "$not"


def _is_list_value(value: Any) -> bool:
    return isinstance(value, (Sequence, Set)) and not isinstance(value, (str, bytes, bytearray))


class Condition(ABC):
    """Node of a where-condition tree."""

    # True when the compiled text is already enclosed in parentheses
    grouped: ClassVar[bool] = True

    @abstractmethod
    def to_sql(self, timezone: str | None = UTC) -> str | None:
        """Compile to SQL text, or None if the node filters nothing."""
        ...

    def operand_sql(self, timezone: str | None = UTC) -> str | None:
        """Compile for use inside a larger expression (always parenthesized)."""
        sql = self.to_sql(timezone)
        if sql is None or self.grouped:
            return sql
        return f"({sql})"


def _value_sql(value: Any, timezone: str | None) -> str:
    if isinstance(value, Condition):
        sql = value.operand_sql(timezone)
        if sql is None:
            raise ConditionError("Empty condition used as a comparison value")
        return sql
    return escape(value, timezone)


@dataclass(frozen=True)
class Raw(Condition):
    """Trusted SQL text, returned unchanged."""

    sql: str
    grouped: ClassVar[bool] = False

    def to_sql(self, timezone: str | None = UTC) -> str | None:
        return self.sql if self.sql.strip() else None


@dataclass(frozen=True)
class Fragment(Condition):
    """Trusted SQL text wrapped in parentheses."""

    sql: str

    def to_sql(self, timezone: str | None = UTC) -> str | None:
        return f"({self.sql})" if self.sql.strip() else None


@dataclass(frozen=True)
class _Junction(Condition):
    items: tuple[Condition, ...] = ()
    keyword: ClassVar[str] = ""

    def to_sql(self, timezone: str | None = UTC) -> str | None:
        parts = [sql for sql in (item.operand_sql(timezone) for item in self.items) if sql]
        if not parts:
            return None
        return "(" + f" {self.keyword} ".join(parts) + ")"


@dataclass(frozen=True)
class And(_Junction):
    """Conjunction of sub-conditions; empty children are skipped."""

    keyword: ClassVar[str] = "AND"


@dataclass(frozen=True)
class Or(_Junction):
    """Disjunction of sub-conditions; empty children are skipped."""

    keyword: ClassVar[str] = "OR"


@dataclass(frozen=True)
class Not(Condition):
    inner: Condition

    def to_sql(self, timezone: str | None = UTC) -> str | None:
        sql = self.inner.operand_sql(timezone)
        if sql is None:
            return None
        return f"(NOT {sql})"


@dataclass(frozen=True)
class Equals(Condition):
    """``field = value``"""

    field: str
    value: Any = None

    def to_sql(self, timezone: str | None = UTC) -> str | None:
        return f"({quote_identifier(self.field)}={_value_sql(self.value, timezone)})"


@dataclass(frozen=True)
class Compare(Condition):
    """``field <op> value`` with op taken from OPERATORS."""

    field: str
    op: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ConditionError(f"Unsupported operator '{self.op}'")

    @property
    def operator(self) -> str:
        return " ".join(str(self.op).split()).upper()

    def to_sql(self, timezone: str | None = UTC) -> str | None:
        column = quote_identifier(self.field)
        op = self.operator
        value = self.value

        if op in ("IN", "NOT IN") and not isinstance(value, Condition):
            if not _is_list_value(value):
                return f"({column} {op} ({escape(value, timezone)}))"
            if not value:
                # IN () is not valid SQL: nothing matches IN, everything matches NOT IN
                return "(1=0)" if op == "IN" else "(1=1)"

        if op in ("BETWEEN", "NOT BETWEEN"):
            if not _is_list_value(value) or len(value) != 2:
                raise ConditionError(f"{op} requires a [low, high] pair, got {value!r}")
            low, high = value
            return (
                f"({column} {op} {_value_sql(low, timezone)} "
                f"AND {_value_sql(high, timezone)})"
            )

        return f"({column} {op} {_value_sql(value, timezone)})"


@dataclass(frozen=True)
class Match(Condition):
    """Equality mapping: ``a = 1 AND b = 2`` without outer parentheses."""

    values: Mapping[str, Any]
    grouped: ClassVar[bool] = False

    def to_sql(self, timezone: str | None = UTC) -> str | None:
        if not self.values:
            return None
        return " AND ".join(
            f"{quote_identifier(key)}={_value_sql(val, timezone)}"
            for key, val in self.values.items()
        )


def _field_name(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ConditionError(f"Field name must be a non-empty string, got {value!r}")
    return value


def _parse_operand(value: Any) -> Condition | None:
    """Parse a child of a logical node; bare strings are trusted fragments."""
    if isinstance(value, str):
        return Fragment(value)
    return parse_condition(value)


def _parse_sequence(items: Sequence[Any]) -> Condition | None:
    if not items:
        return None

    head = items[0]
    tag = head.lower() if isinstance(head, str) else None

    if tag in (AND, OR):
        children = (_parse_operand(item) for item in items[1:])
        node_class = And if tag == AND else Or
        return node_class(tuple(child for child in children if child is not None))

    if tag == NOT:
        if len(items) < 2:
            raise ConditionError("'$not' requires an operand")
        inner = _parse_operand(items[1])
        return None if inner is None else Not(inner)

    if len(items) == 1:
        return _parse_operand(head)
    if len(items) == 2:
        return Equals(_field_name(head), items[1])
    return Compare(_field_name(head), items[1], items[2])


def parse_condition(value: Any) -> Condition | None:
    """Parse a condition value into a node tree.

    Args:
        value: None, raw SQL string, Condition node, prefix-expression
            list/tuple, or mapping of column -> value.

    Returns:
        The root node, or None for an empty condition.

    Raises:
        ConditionError: If the value has no condition shape or is malformed.
    """
    if value is None:
        return None
    if isinstance(value, Condition):
        return value
    if isinstance(value, str):
        return Raw(value)
    if isinstance(value, Mapping):
        return Match(dict(value))
    if isinstance(value, (list, tuple)):
        return _parse_sequence(value)
    raise ConditionError(f"Invalid condition type: {type(value).__name__}")


def compile_condition(value: Any, timezone: str | None = UTC) -> str | None:
    """Compile a condition value to SQL boolean text.

    Returns:
        The expression, or None when the condition is empty and the WHERE
        clause must be omitted.
    """
    node = parse_condition(value)
    if node is None:
        return None
    return node.to_sql(timezone)


__all__ = [
    "OPERATORS",
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
]
