# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Tailing worker for a single Redis Stream key.

Polls the stream, hands every visible entry to a handler in order, then
removes the processed batch. Runs until its stop event is set or its task is
cancelled.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..shared.streams import (
    CLEANUP_ENTRIES,
    CLEANUP_POLICIES,
    CLEANUP_STREAM,
    STREAM_START_ID,
    STREAMING_ACTIONS_STREAM,
)
from ..store.log_store import LogEntry, LogStore
from .handlers import EntryHandler, LoggingEntryHandler

logger = logging.getLogger(__name__)


class StreamTailWorker:
    """
    Single-key stream tailer.

    Each cycle:
    - Idle: the stream is empty, wait ``idle_interval``
    - Draining: read the ``n`` visible entries from the start of the stream,
      call the handler once per entry (oldest first), clean up once for the
      whole batch, wait ``active_interval``

    The stop event is checked at the top of every cycle, between the length
    query and the read, and during both waits. A batch that has been read is
    always handled and cleaned up before the worker stops.

    Store errors are not caught: they end ``run``. Handler errors are logged
    and counted, and the rest of the batch is still handled and cleaned up.

    Only one worker may tail a given key.
    """

    def __init__(
        self,
        store: LogStore,
        handler: Optional[EntryHandler] = None,
        stream_key: str = STREAMING_ACTIONS_STREAM,
        idle_interval: float = 1.0,
        active_interval: float = 2.0,
        cleanup: str = CLEANUP_STREAM,
        name: str = "tail-worker-1",
    ):
        """
        Initialize worker.

        Args:
            store: Log store to tail
            handler: Called as handler(entry_id, fields) for every entry
                (defaults to LoggingEntryHandler)
            stream_key: Key of the stream to tail
            idle_interval: Seconds to wait after a poll that found nothing
            active_interval: Seconds to wait after a processed batch
            cleanup: "stream" deletes the whole key after each batch,
                "entries" deletes only the ids that were read
            name: Worker name used in log records
        """
        if cleanup not in CLEANUP_POLICIES:
            raise ValueError(f"Unknown cleanup policy: {cleanup}")
        if idle_interval <= 0 or active_interval <= 0:
            raise ValueError("Poll intervals must be positive")

        self.store = store
        self.handler = handler or LoggingEntryHandler()
        self.stream_key = stream_key
        self.idle_interval = idle_interval
        self.active_interval = active_interval
        self.cleanup = cleanup
        self.name = name

        self._stop_event = asyncio.Event()
        self.running = False
        self.stats = {
            'cycles': 0,
            'idle_cycles': 0,
            'batches': 0,
            'processed': 0,
            'failed': 0,
        }

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Poll until stopped.

        Args:
            stop_event: Cancellation signal. When omitted the worker's own
                event is used, which stop() sets.
        """
        if self.running:
            logger.warning(f"{self.name} already running")
            return

        if stop_event is not None:
            self._stop_event = stop_event
        stop_event = self._stop_event

        self.running = True
        logger.info(f"Starting {self.name} on stream {self.stream_key} (cleanup={self.cleanup})")

        try:
            while not stop_event.is_set():
                processed = await self._poll(stop_event)
                if processed is None:
                    break

                interval = self.active_interval if processed else self.idle_interval
                if await self._wait(stop_event, interval):
                    break

        except asyncio.CancelledError:
            logger.info(f"{self.name} cancelled")

        finally:
            self.running = False

        logger.info(f"{self.name} stopped")

    def stop(self) -> None:
        """Request a stop. The loop exits at its next check."""
        self._stop_event.set()

    async def poll_once(self) -> int:
        """
        Run a single Idle/Draining decision without waiting afterwards.

        Returns:
            Number of entries handed to the handler (0 when idle)
        """
        return await self._poll(None)

    async def _poll(self, stop_event: Optional[asyncio.Event]) -> Optional[int]:
        self.stats['cycles'] += 1

        length = await asyncio.to_thread(self.store.length, self.stream_key)
        if length == 0:
            self.stats['idle_cycles'] += 1
            logger.debug(f"{self.stream_key} is empty")
            return 0

        if stop_event is not None and stop_event.is_set():
            return None

        entries = await asyncio.to_thread(
            self.store.read_range, self.stream_key, STREAM_START_ID, length
        )
        if not entries:
            # Emptied by someone else between XLEN and XREAD
            self.stats['idle_cycles'] += 1
            return 0

        for entry in entries:
            self._dispatch(entry)

        await self._cleanup(entries)

        self.stats['batches'] += 1
        logger.debug(f"Processed {len(entries)} entries from {self.stream_key}")
        return len(entries)

    def _dispatch(self, entry: LogEntry) -> None:
        try:
            self.handler(entry.id, entry.fields)
            self.stats['processed'] += 1
        except Exception as e:
            self.stats['failed'] += 1
            logger.error(f"Handler failed for entry {entry.id}: {e}", exc_info=True)

    async def _cleanup(self, entries: List[LogEntry]) -> None:
        if self.cleanup == CLEANUP_ENTRIES:
            ids = [entry.id for entry in entries]
            await asyncio.to_thread(self.store.delete_entries, self.stream_key, ids)
        else:
            await asyncio.to_thread(self.store.delete, self.stream_key)

    async def _wait(self, stop_event: asyncio.Event, interval: float) -> bool:
        """Wait for interval seconds. Returns True if stopped meanwhile."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
            return True
        except asyncio.TimeoutError:
            return False

    def get_stats(self) -> Dict[str, Any]:
        """Get worker statistics."""
        return {
            'worker': self.name,
            'stream': self.stream_key,
            'running': self.running,
            **self.stats
        }
