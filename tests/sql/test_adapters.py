# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for sql.adapters module - adapter factory and aiomysql adapter."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from genro_mysql import PoolConfig
from genro_mysql.errors import ConfigurationError
from genro_mysql.sql.adapters import ADAPTERS, DbAdapter, MysqlAdapter, QueryResult, get_adapter
from genro_mysql.sql.adapters import mysql as mysql_module


class FakeCursor:
    """Async cursor double with a fixed description/result."""

    def __init__(self, description=None, rows=None, rowcount=0, lastrowid=None):
        self.description = description
        self.rows = rows or []
        self.rowcount = rowcount
        self.lastrowid = lastrowid
        self.executed: list[tuple[str, Any]] = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True
        return False

    async def execute(self, query, args=None):
        self.executed.append((query, args))

    async def fetchall(self):
        return tuple(self.rows)


class FakeConn:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor


class ClosableConn:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeAiomysqlPool:
    """Stand-in for aiomysql.Pool."""

    def __init__(self):
        self.acquired: list[object] = []
        self.released: list[object] = []
        self.wakeups = 0
        self.closed = False
        self.waited = False

    async def acquire(self):
        conn = ClosableConn()
        self.acquired.append(conn)
        return conn

    async def _wakeup(self):
        self.wakeups += 1

    def release(self, conn):
        # aiomysql returns the task waking up pending acquirers
        self.released.append(conn)
        return asyncio.ensure_future(self._wakeup())

    def close(self):
        self.closed = True

    async def wait_closed(self):
        self.waited = True


@pytest.fixture
def config() -> PoolConfig:
    return PoolConfig(host="db.local", port=3307, database="app", user="u", password="p", pool=3)


@pytest.fixture
def fake_pool(monkeypatch) -> tuple[FakeAiomysqlPool, list[dict[str, Any]]]:
    """Patch aiomysql.create_pool, recording its keyword arguments."""
    pool = FakeAiomysqlPool()
    calls: list[dict[str, Any]] = []

    async def create_pool(**kwargs):
        calls.append(kwargs)
        await asyncio.sleep(0)
        return pool

    monkeypatch.setattr(mysql_module.aiomysql, "create_pool", create_pool)
    return pool, calls


class TestGetAdapter:
    """Tests for get_adapter factory function."""

    def test_mysql_driver(self, config):
        assert isinstance(get_adapter(config), MysqlAdapter)

    def test_mariadb_alias(self, config):
        config.driver = "MariaDB"
        assert isinstance(get_adapter(config), MysqlAdapter)

    def test_unknown_driver_raises(self, config):
        config.driver = "postgresql"
        with pytest.raises(ConfigurationError, match="Unknown database driver"):
            get_adapter(config)

    def test_registry(self):
        assert ADAPTERS["mysql"] is MysqlAdapter

    def test_db_adapter_is_abstract_base(self):
        with pytest.raises(TypeError):
            DbAdapter()  # type: ignore


class TestMysqlAdapterPool:
    """Tests for lazy pool creation and lifecycle."""

    async def test_pool_created_on_first_acquire(self, config, fake_pool):
        pool, calls = fake_pool
        adapter = MysqlAdapter(config)
        assert calls == []

        conn = await adapter.acquire()

        assert conn is pool.acquired[0]
        assert len(calls) == 1
        kwargs = calls[0]
        assert kwargs["host"] == "db.local"
        assert kwargs["port"] == 3307
        assert kwargs["db"] == "app"
        assert kwargs["user"] == "u"
        assert kwargs["password"] == "p"
        assert kwargs["minsize"] == 1
        assert kwargs["maxsize"] == 3
        assert kwargs["autocommit"] is True
        assert kwargs["cursorclass"] is mysql_module.aiomysql.DictCursor

    async def test_concurrent_acquires_create_one_pool(self, config, fake_pool):
        pool, calls = fake_pool
        adapter = MysqlAdapter(config)

        await asyncio.gather(*(adapter.acquire() for _ in range(5)))

        assert len(calls) == 1
        assert len(pool.acquired) == 5

    async def test_release_returns_to_pool(self, config, fake_pool):
        pool, _ = fake_pool
        adapter = MysqlAdapter(config)
        conn = await adapter.acquire()
        await adapter.release(conn)
        assert pool.released == [conn]
        assert pool.wakeups == 1
        assert not conn.closed

    async def test_release_after_shutdown_closes_connection(self, config, fake_pool):
        pool, _ = fake_pool
        adapter = MysqlAdapter(config)
        conn = await adapter.acquire()
        await adapter.shutdown()

        await adapter.release(conn)

        assert conn.closed
        assert pool.released == []

    async def test_shutdown_closes_pool(self, config, fake_pool):
        pool, calls = fake_pool
        adapter = MysqlAdapter(config)
        await adapter.acquire()

        await adapter.shutdown()

        assert pool.closed and pool.waited
        # A new pool is opened on the next acquire
        await adapter.acquire()
        assert len(calls) == 2

    async def test_shutdown_without_pool(self, config):
        await MysqlAdapter(config).shutdown()

    async def test_connect_failure_raises_connection_error(self, config, monkeypatch):
        async def create_pool(**kwargs):
            raise OSError("Connection refused")

        monkeypatch.setattr(mysql_module.aiomysql, "create_pool", create_pool)
        adapter = MysqlAdapter(config)

        with pytest.raises(ConnectionError, match="Connection refused"):
            await adapter.acquire()

    async def test_connect_timeout(self, config, monkeypatch):
        config.connect_timeout = 0.01

        async def create_pool(**kwargs):
            await asyncio.sleep(5)

        monkeypatch.setattr(mysql_module.aiomysql, "create_pool", create_pool)
        adapter = MysqlAdapter(config)

        with pytest.raises(TimeoutError, match="timed out"):
            await adapter.acquire()


class TestMysqlAdapterExecute:
    """Tests for execute result shapes."""

    async def test_result_set_returns_rows(self, config):
        rows = [{"id": 1}, {"id": 2}]
        cursor = FakeCursor(description=(("id",),), rows=rows)
        adapter = MysqlAdapter(config)

        result = await adapter.execute(FakeConn(cursor), "SELECT id FROM t WHERE id > %s", [0])

        assert result == rows
        assert cursor.executed == [("SELECT id FROM t WHERE id > %s", [0])]
        assert cursor.closed

    async def test_statement_returns_query_result(self, config):
        cursor = FakeCursor(description=None, rowcount=2, lastrowid=7)
        adapter = MysqlAdapter(config)

        result = await adapter.execute(FakeConn(cursor), "INSERT INTO t(a) VALUES (1),(2)")

        assert result == QueryResult(affected_rows=2, insert_id=7)
        assert cursor.executed == [("INSERT INTO t(a) VALUES (1),(2)", None)]
