# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""MySQL connection pool with table-oriented CRUD helpers.

MySQLPool leases one connection per statement from a pooled adapter and
returns it on every exit path. Statements are built with every value
inlined through escape(); raw query() also accepts driver-side parameters.

Usage:
    db = MySQLPool(host="localhost", database="app", user="app", pool=5)

    await db.insert("users", [{"name": "Ann"}, {"name": "Bob", "admin": 1}])
    await db.update("users", {"name": "Ann"}, {"admin": 1})
    rows = await db.select("users", ["id", "name"], ["$or", ["admin", 1], ["id", "<", 10]])
    user = await db.select_one("users", "*", {"name": "Bob"}, "ORDER BY id DESC")
    await db.delete("users", ["id", "IN", [3, 4]])
    rows = await db.query("SELECT * FROM users WHERE id > %s", [100])

    await db.shutdown()
"""

from __future__ import annotations

import dataclasses
import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from .config import PoolConfig
from .errors import AcquireError
from .sql.adapters import DbAdapter, QueryResult, get_adapter
from .sql.escape import escape
from .sql.statement import (
    build_delete,
    build_insert,
    build_select,
    build_select_one,
    build_update,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping, Sequence

    from .sql.adapters.base import Params

logger = logging.getLogger(__name__)


class MySQLPool:
    """Bounded pool of MySQL connections with CRUD helpers.

    Every request is a coroutine with exactly one outcome: it returns a
    result or raises. Invalid row/update data raises DataFormatError before
    any connection is leased; a failed lease raises AcquireError; driver
    errors propagate after the connection went back to the pool.

    Conditions accepted by update/delete/select/select_one: a raw SQL
    string, a mapping of column -> value (AND of equalities), a prefix
    expression list (see sql.condition) or a Condition node. An empty
    condition omits the WHERE clause.

    Attributes:
        config: Validated PoolConfig.
        adapter: Pooled DbAdapter executing the statements.
    """

    def __init__(
        self,
        config: PoolConfig | None = None,
        adapter: DbAdapter | None = None,
        **options: Any,
    ):
        """Initialize the pool (no connection is opened yet).

        Args:
            config: Pool configuration. Keyword options build one, or
                override fields of the given one.
            adapter: Pooled adapter to use instead of get_adapter(config).
            **options: PoolConfig fields (host, port, database, user,
                password, pool, timezone, ...).

        Raises:
            ConfigurationError: If host, port, database, user or pool is invalid.
        """
        if config is None:
            config = PoolConfig(**options)
        elif options:
            config = dataclasses.replace(config, **options)
        self.config = config.validate()
        self.adapter: DbAdapter = adapter or get_adapter(self.config)

        logger.debug(
            "Create MySQLPool: pool=%d, host=%s:%s",
            self.config.pool, self.config.host, self.config.port,
        )

    # -------------------------------------------------------------------------
    # Connection management
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[Any]:
        """Lease a connection for the duration of the block.

        The connection is released exactly once when the block exits,
        whether normally or with an exception. If the lease itself fails
        nothing is released.

        Raises:
            AcquireError: If the pool cannot provide a connection.
        """
        try:
            conn = await self.adapter.acquire()
        except Exception as e:
            raise AcquireError(f"Cannot acquire connection: {e}") from e
        try:
            yield conn
        finally:
            await self.adapter.release(conn)

    async def shutdown(self) -> None:
        """Close connection pool (application shutdown)."""
        await self.adapter.shutdown()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def escape(self, value: Any) -> str:
        """Escape a value as a SQL literal using the configured timezone."""
        return escape(value, self.config.timezone)

    def timestamp(self) -> int:
        """Current Unix time in whole seconds."""
        return int(time.time())

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    async def query(
        self, sql: str, params: Params = None
    ) -> list[dict[str, Any]] | QueryResult:
        """Execute one statement on a leased connection.

        Args:
            sql: Statement text, optionally with %s / %(name)s placeholders.
            params: Values the driver substitutes for the placeholders.

        Returns:
            Rows for statements with a result set, QueryResult otherwise.
        """
        async with self.connection() as conn:
            logger.debug("Query: %s", sql)
            return await self.adapter.execute(conn, sql, params)

    async def insert(
        self,
        table: str,
        rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        missing: Any = "",
    ) -> QueryResult:
        """Insert one row or a batch of rows.

        Columns absent from a row get ``missing`` (empty string by default).
        """
        sql = build_insert(table, rows, self.config.timezone, missing)
        return await self.query(sql)

    async def update(
        self, table: str, condition: Any, data: Mapping[str, Any], tail: str = ""
    ) -> QueryResult:
        """Update rows matching condition with the column -> value mapping data."""
        sql = build_update(table, condition, data, tail, self.config.timezone)
        return await self.query(sql)

    async def delete(self, table: str, condition: Any, tail: str = "") -> QueryResult:
        """Delete rows matching condition."""
        sql = build_delete(table, condition, tail, self.config.timezone)
        return await self.query(sql)

    async def select(
        self,
        table: str,
        fields: str | Sequence[str] | None = "*",
        condition: Any = None,
        tail: str = "",
    ) -> list[dict[str, Any]]:
        """Select rows; fields is raw column text or a list of column names."""
        sql = build_select(table, fields, condition, tail, self.config.timezone)
        return await self.query(sql)

    async def select_one(
        self,
        table: str,
        fields: str | Sequence[str] | None = "*",
        condition: Any = None,
        tail: str = "",
    ) -> dict[str, Any] | None:
        """Select the first matching row, or None.

        ``LIMIT 1`` is appended unless tail already contains a LIMIT.
        """
        sql = build_select_one(table, fields, condition, tail, self.config.timezone)
        rows = await self.query(sql)
        return rows[0] if rows else None


__all__ = ["MySQLPool"]
