# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Shared fixtures: an in-memory LogStore and a clean environment."""

import os
from typing import Callable, Dict, List, Sequence, Tuple

import pytest

from actionstream.store.log_store import LogEntry, LogStore, StoreUnavailable, normalize_fields

STREAM_KEY = "K"


def _id_key(entry_id: str) -> Tuple[int, int]:
    ms, _, seq = entry_id.partition("-")
    return int(ms), int(seq or 0)


class InMemoryLogStore(LogStore):
    """
    LogStore kept in a dict, recording every call.

    ``fail_on`` names operations that raise StoreUnavailable.
    ``hooks`` maps an operation name to a callable run right after it.
    """

    def __init__(self):
        self.streams: Dict[str, List[LogEntry]] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail_on = set()
        self.hooks: Dict[str, Callable[[], None]] = {}
        self._seq = 0

    def _record(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if operation in self.fail_on:
            raise StoreUnavailable(operation, key, ConnectionError("store is down"))

    def _after(self, operation: str) -> None:
        hook = self.hooks.get(operation)
        if hook:
            hook()

    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]

    def length(self, key: str) -> int:
        self._record("length", key)
        result = len(self.streams.get(key, []))
        self._after("length")
        return result

    def read_range(self, key: str, start_id: str, max_count: int) -> List[LogEntry]:
        self._record("read_range", key)
        start = _id_key(start_id)
        result = [e for e in self.streams.get(key, []) if _id_key(e.id) > start][:max_count]
        self._after("read_range")
        return result

    def delete(self, key: str) -> None:
        self._record("delete", key)
        self.streams.pop(key, None)
        self._after("delete")

    def delete_entries(self, key: str, ids: Sequence[str]) -> int:
        self._record("delete_entries", key)
        wanted = set(ids)
        before = self.streams.get(key, [])
        kept = [e for e in before if e.id not in wanted]
        self.streams[key] = kept
        self._after("delete_entries")
        return len(before) - len(kept)

    def append(self, key: str, fields) -> str:
        # Producer-side writes are not recorded as worker calls
        self._seq += 1
        entry = LogEntry(id=f"{1700000000000 + self._seq}-0", fields=normalize_fields(fields))
        self.streams.setdefault(key, []).append(entry)
        return entry.id


class RecordingHandler:
    """Handler collecting (entry_id, fields) calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, entry_id, fields):
        self.calls.append((entry_id, fields))


@pytest.fixture
def store():
    return InMemoryLogStore()


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ACTIONSTREAM_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("ACTIONSTREAM_"):
            monkeypatch.delenv(name, raising=False)
