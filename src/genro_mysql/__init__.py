# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""genro-mysql: pooled MySQL access with injection-safe statement building."""

from .config import PoolConfig, config_from_env
from .errors import (
    AcquireError,
    ConditionError,
    ConfigurationError,
    DataFormatError,
    MySQLPoolError,
)
from .pool import MySQLPool
from .sql import QueryResult, compile_condition, escape

__version__ = "0.1.0"

__all__ = [
    "MySQLPool",
    "PoolConfig",
    "config_from_env",
    "QueryResult",
    "escape",
    "compile_condition",
    "MySQLPoolError",
    "ConfigurationError",
    "DataFormatError",
    "ConditionError",
    "AcquireError",
]
