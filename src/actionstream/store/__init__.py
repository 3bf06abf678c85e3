# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Log store capability interface and its Redis Streams adapter.
"""

from .log_store import ActionStreamError, LogEntry, LogStore, StoreUnavailable, normalize_fields
from .redis_store import RedisLogStore

__all__ = [
    "ActionStreamError",
    "LogEntry",
    "LogStore",
    "StoreUnavailable",
    "normalize_fields",
    "RedisLogStore",
]
