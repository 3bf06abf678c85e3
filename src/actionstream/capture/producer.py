# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Producer side of the action stream."""

import logging
from typing import Iterable, Mapping, Tuple, Union

from ..shared.streams import STREAMING_ACTIONS_STREAM
from ..store.log_store import LogStore

logger = logging.getLogger(__name__)


class StreamProducer:
    """Append action events to the stream tailed by StreamTailWorker."""

    def __init__(self, store: LogStore, stream_key: str = STREAMING_ACTIONS_STREAM):
        self.store = store
        self.stream_key = stream_key

    def append(self, fields: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> str:
        """
        Append one entry.

        Args:
            fields: name/value pairs of the event, order preserved

        Returns:
            The id Redis assigned to the entry
        """
        entry_id = self.store.append(self.stream_key, fields)
        logger.debug(f"Appended {entry_id} to {self.stream_key}")
        return entry_id

    def simulate(self, count: int = 1000) -> str:
        """
        Append a single entry carrying ``count`` synthetic actions.

        Fields are ``Action1 .. ActionN`` with values
        ``"Action number N is listed"``.
        """
        if count < 1:
            raise ValueError("count must be at least 1")

        fields = [(f"Action{n}", f"Action number {n} is listed") for n in range(1, count + 1)]
        entry_id = self.append(fields)
        logger.info(f"Simulated {count} actions on {self.stream_key} as entry {entry_id}")
        return entry_id
