# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for genro-mysql.

Configuration errors are raised at construction time. Data-format errors
are raised before any connection is acquired. Acquisition errors wrap the
pool failure. Query errors are the driver's own exceptions and are not
wrapped.
"""

from __future__ import annotations


class MySQLPoolError(Exception):
    """Base class for errors raised by genro-mysql itself."""


class ConfigurationError(MySQLPoolError, ValueError):
    """Invalid or missing pool configuration (host, port, database, user, pool)."""


class DataFormatError(MySQLPoolError, ValueError):
    """Row or update data that cannot be turned into a statement."""


class ConditionError(DataFormatError):
    """Where condition that cannot be compiled to a boolean SQL expression."""


class AcquireError(MySQLPoolError, ConnectionError):
    """A connection could not be obtained from the pool."""


__all__ = [
    "MySQLPoolError",
    "ConfigurationError",
    "DataFormatError",
    "ConditionError",
    "AcquireError",
]
