# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Redis Streams implementation of LogStore."""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Mapping, Sequence, Tuple, Union

import redis

from .log_store import LogEntry, LogStore, StoreUnavailable, normalize_fields

logger = logging.getLogger(__name__)


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisLogStore(LogStore):
    """
    LogStore backed by a Redis Stream per key.

    Works with clients created with or without ``decode_responses``.
    Every redis error is re-raised as StoreUnavailable.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    @contextmanager
    def _translate_errors(self, operation: str, key: str) -> Iterator[None]:
        try:
            yield
        except redis.exceptions.RedisError as e:
            logger.error(f"Redis {operation} on {key} failed: {e}")
            raise StoreUnavailable(operation, key, e) from e

    def length(self, key: str) -> int:
        with self._translate_errors("XLEN", key):
            return int(self.redis_client.xlen(key))

    def read_range(self, key: str, start_id: str, max_count: int) -> List[LogEntry]:
        if max_count <= 0:
            return []

        with self._translate_errors("XREAD", key):
            # Non-blocking: returns [(stream_name, [(id, {field: value}), ...])]
            messages = self.redis_client.xread({key: start_id}, count=max_count)

        # RESP3 connections return a {stream_name: [...]} mapping instead
        streams = messages.items() if isinstance(messages, dict) else (messages or [])

        entries = []
        for _stream, stream_messages in streams:
            for message_id, fields in stream_messages:
                entries.append(
                    LogEntry(
                        id=_decode(message_id),
                        fields=tuple(
                            (_decode(name), _decode(value)) for name, value in fields.items()
                        ),
                    )
                )
        return entries

    def delete(self, key: str) -> None:
        with self._translate_errors("DEL", key):
            self.redis_client.delete(key)

    def delete_entries(self, key: str, ids: Sequence[str]) -> int:
        if not ids:
            return 0
        with self._translate_errors("XDEL", key):
            return int(self.redis_client.xdel(key, *ids))

    def append(self, key: str, fields: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> str:
        pairs = normalize_fields(fields)
        if not pairs:
            raise ValueError("An entry needs at least one field")

        names = [name for name, _ in pairs]
        if len(set(names)) != len(names):
            # redis-py sends and parses fields as a dict
            duplicates = sorted({name for name in names if names.count(name) > 1})
            raise ValueError(f"Repeated field names: {', '.join(duplicates)}")

        with self._translate_errors("XADD", key):
            entry_id = self.redis_client.xadd(key, dict(pairs))
        return _decode(entry_id)
