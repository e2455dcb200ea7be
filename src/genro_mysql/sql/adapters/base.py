# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Base adapter class for async connection pools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

Params = Union[Sequence[Any], Mapping[str, Any], None]


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a statement that returns no rows (INSERT, UPDATE, DELETE, DDL).

    Attributes:
        affected_rows: Rows inserted, changed or deleted by the statement.
        insert_id: AUTO_INCREMENT value generated by an INSERT, else 0/None.
    """

    affected_rows: int = 0
    insert_id: int | None = None


class DbAdapter(ABC):
    """Abstract base class for pooled database adapters.

    Connection model:
    - acquire(): Leases a connection from the pool (may wait or fail)
    - release(conn): Returns a leased connection; called exactly once per lease
    - shutdown(): Closes the pool (application shutdown only)

    Statements are executed in autocommit mode: each one is its own
    transaction, nothing is held on a connection between leases.
    """

    @abstractmethod
    async def acquire(self) -> Any:
        """Lease a connection from the pool.

        Returns:
            Database connection object.
        """
        ...

    @abstractmethod
    async def release(self, conn: Any) -> None:
        """Return a leased connection to the pool."""
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        """Close the pool and every idle connection."""
        ...

    @abstractmethod
    async def execute(
        self, conn: Any, query: str, params: Params = None
    ) -> list[dict[str, Any]] | QueryResult:
        """Execute one statement on a leased connection.

        Positional (``%s``) or named (``%(name)s``) placeholders in query are
        substituted by the driver from params. With params None the query
        text is sent as is.

        Returns:
            Rows as a list of dicts when the statement yields a result set,
            a QueryResult otherwise.
        """
        ...
