# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pooled database adapters.

Components:
    DbAdapter: Abstract base class defining the pool interface.
    MysqlAdapter: MySQL/MariaDB adapter using an aiomysql pool.
    QueryResult: Outcome of a statement without a result set.
    get_adapter: Factory creating the adapter for a PoolConfig.

Connection Model:
    - acquire(): Leases a connection from the pool
    - release(conn): Returns it, exactly once per lease
    - execute(conn, sql, params): Runs one statement in autocommit mode
    - shutdown(): Closes the pool

Example:
    Usage via MySQLPool (recommended)::

        from genro_mysql import MySQLPool

        db = MySQLPool(host="localhost", database="app", user="app", pool=5)
        rows = await db.select("users", ["id", "name"], {"active": 1})
        await db.shutdown()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...errors import ConfigurationError
from .base import DbAdapter, QueryResult
from .mysql import MysqlAdapter

if TYPE_CHECKING:
    from ...config import PoolConfig

__all__ = ["DbAdapter", "MysqlAdapter", "QueryResult", "ADAPTERS", "get_adapter"]

# Adapter registry, keyed by driver name
ADAPTERS: dict[str, type[DbAdapter]] = {
    "mysql": MysqlAdapter,
    "mariadb": MysqlAdapter,
}


def get_adapter(config: PoolConfig) -> DbAdapter:
    """Create the pooled adapter for a configuration.

    Args:
        config: Validated pool configuration; config.driver selects the adapter.

    Returns:
        Configured DbAdapter instance (the pool itself opens lazily).

    Raises:
        ConfigurationError: If the driver is unknown.
    """
    driver = (config.driver or "").lower()
    adapter_class = ADAPTERS.get(driver)
    if adapter_class is None:
        raise ConfigurationError(
            f"Unknown database driver: '{config.driver}'. Supported: {', '.join(sorted(ADAPTERS))}"
        )
    return adapter_class(config)
