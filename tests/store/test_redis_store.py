# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Tests for RedisLogStore.

The redis client is a Mock; these tests pin down the commands sent and the
decoding of replies.
"""

from unittest.mock import Mock

import pytest
import redis

from actionstream.store.log_store import LogEntry, StoreUnavailable
from actionstream.store.redis_store import RedisLogStore

KEY = "Streaming_Actions"


@pytest.fixture
def client():
    return Mock(spec=redis.Redis)


@pytest.fixture
def log_store(client):
    return RedisLogStore(client)


class TestReads:
    """XLEN and XREAD."""

    def test_length(self, client, log_store):
        client.xlen.return_value = 3

        assert log_store.length(KEY) == 3
        client.xlen.assert_called_once_with(KEY)

    def test_read_range_decodes_bytes(self, client, log_store):
        client.xread.return_value = [
            [
                KEY.encode(),
                [
                    (b"1700000000000-0", {b"name": b"Action1", b"description": b"first"}),
                    (b"1700000000001-0", {b"name": b"Action2"}),
                ],
            ]
        ]

        entries = log_store.read_range(KEY, "0", 2)

        client.xread.assert_called_once_with({KEY: "0"}, count=2)
        assert entries == [
            LogEntry("1700000000000-0", (("name", "Action1"), ("description", "first"))),
            LogEntry("1700000000001-0", (("name", "Action2"),)),
        ]

    def test_read_range_with_decoded_responses(self, client, log_store):
        client.xread.return_value = [[KEY, [("5-0", {"name": "Action1"})]]]

        assert log_store.read_range(KEY, "0", 1) == [LogEntry("5-0", (("name", "Action1"),))]

    def test_read_range_resp3_mapping(self, client, log_store):
        client.xread.return_value = {KEY: [[b"5-0", {b"name": b"Action1"}]]}

        assert log_store.read_range(KEY, "0", 1) == [LogEntry("5-0", (("name", "Action1"),))]

    def test_read_range_missing_key(self, client, log_store):
        client.xread.return_value = []

        assert log_store.read_range(KEY, "0", 10) == []

    def test_read_range_zero_count_skips_redis(self, client, log_store):
        assert log_store.read_range(KEY, "0", 0) == []
        client.xread.assert_not_called()


class TestWrites:
    """DEL, XDEL and XADD."""

    def test_delete(self, client, log_store):
        client.delete.return_value = 0

        log_store.delete(KEY)

        client.delete.assert_called_once_with(KEY)

    def test_delete_entries(self, client, log_store):
        client.xdel.return_value = 2

        assert log_store.delete_entries(KEY, ["1-0", "2-0"]) == 2
        client.xdel.assert_called_once_with(KEY, "1-0", "2-0")

    def test_delete_entries_empty(self, client, log_store):
        assert log_store.delete_entries(KEY, []) == 0
        client.xdel.assert_not_called()

    def test_append_keeps_field_order(self, client, log_store):
        client.xadd.return_value = b"1700000000000-0"

        entry_id = log_store.append(KEY, [("b", "2"), ("a", 1)])

        assert entry_id == "1700000000000-0"
        sent = client.xadd.call_args.args[1]
        assert list(sent.items()) == [("b", "2"), ("a", "1")]

    def test_append_rejects_repeated_field_names(self, client, log_store):
        """Repeated names would collapse into the last value on the way to XADD."""
        with pytest.raises(ValueError, match="Repeated field names: a"):
            log_store.append(KEY, [("a", "1"), ("b", "2"), ("a", "3")])

        client.xadd.assert_not_called()

    def test_append_requires_fields(self, client, log_store):
        with pytest.raises(ValueError):
            log_store.append(KEY, {})
        client.xadd.assert_not_called()


class TestErrors:
    """Redis errors surface as StoreUnavailable."""

    def test_connection_error(self, client, log_store):
        cause = redis.exceptions.ConnectionError("Connection refused")
        client.xlen.side_effect = cause

        with pytest.raises(StoreUnavailable) as exc:
            log_store.length(KEY)

        assert exc.value.operation == "XLEN"
        assert exc.value.key == KEY
        assert exc.value.cause is cause

    def test_timeout_on_read(self, client, log_store):
        client.xread.side_effect = redis.exceptions.TimeoutError("Timeout reading")

        with pytest.raises(StoreUnavailable):
            log_store.read_range(KEY, "0", 1)

    def test_wrong_type_on_delete_entries(self, client, log_store):
        client.xdel.side_effect = redis.exceptions.ResponseError("WRONGTYPE")

        with pytest.raises(StoreUnavailable):
            log_store.delete_entries(KEY, ["1-0"])
