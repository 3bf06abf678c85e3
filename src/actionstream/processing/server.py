# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Main server for the stream tailer.

Connects to Redis, starts one StreamTailWorker and stops it on SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal
import sys
from typing import Optional

import redis

from ..shared.config import Config
from ..store.redis_store import RedisLogStore
from .handlers import EntryHandler, LoggingEntryHandler
from .tail_worker import StreamTailWorker

logger = logging.getLogger(__name__)


def create_redis_client(config: Config) -> redis.Redis:
    """
    Create a Redis client from configuration and verify the connection.

    Raises:
        RuntimeError: If Redis does not answer PING
    """
    client = redis.Redis(
        host=config.redis_host,
        port=config.redis_port,
        db=config.redis_db,
        socket_timeout=config.socket_timeout,
        socket_connect_timeout=config.socket_connect_timeout,
        decode_responses=False,  # RedisLogStore decodes
    )

    try:
        client.ping()
    except redis.exceptions.RedisError as e:
        client.close()
        raise RuntimeError(
            f"Could not connect to Redis at {config.redis_host}:{config.redis_port}: {e}"
        ) from e

    return client


class TailServer:
    """
    Process-level owner of the tailing worker.

    Manages:
    - Redis connection
    - Stream tail worker
    - Graceful shutdown
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        redis_client: Optional[redis.Redis] = None,
        handler: Optional[EntryHandler] = None,
    ):
        """
        Initialize tail server.

        Args:
            config: Configuration instance (creates default if not provided)
            redis_client: Pre-built client, skips connection setup
            handler: Entry handler (defaults to logging each entry)
        """
        self.config = config or Config()
        self.redis_client = redis_client
        self._owns_client = redis_client is None
        self.handler = handler
        self.worker: Optional[StreamTailWorker] = None
        self.stop_event = asyncio.Event()
        self.running = False

    def _initialize_redis(self) -> None:
        """Initialize Redis connection."""
        if self.redis_client is not None:
            return

        logger.info(f"Connecting to Redis at {self.config.redis_host}:{self.config.redis_port}")
        self.redis_client = create_redis_client(self.config)
        logger.info("Redis connection established")

    def _initialize_worker(self) -> None:
        """Initialize the stream tail worker."""
        handler = self.handler or LoggingEntryHandler(self.config.entry_log_level)

        self.worker = StreamTailWorker(
            store=RedisLogStore(self.redis_client),
            handler=handler,
            stream_key=self.config.stream_key,
            idle_interval=self.config.idle_interval,
            active_interval=self.config.active_interval,
            cleanup=self.config.cleanup,
        )

    async def start(self) -> None:
        """Start the server. Blocks until stop() is called, or returns at once if it already was."""
        if self.running:
            logger.warning("Server already running")
            return

        logger.info("Starting stream tail server...")

        self.config.validate()
        self._initialize_redis()
        self._initialize_worker()

        self.running = True
        try:
            await self.worker.run(self.stop_event)
        finally:
            self.running = False
            self._close_redis()

    def stop(self) -> None:
        """Signal the worker to stop. Safe to call more than once."""
        if not self.stop_event.is_set():
            logger.info("Stopping server...")
            self.stop_event.set()

    def _close_redis(self) -> None:
        if self._owns_client and self.redis_client is not None:
            self.redis_client.close()
        logger.info("Server stopped")


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


async def serve(config: Optional[Config] = None) -> None:
    """Run a TailServer with SIGINT/SIGTERM wired to a graceful stop."""
    server = TailServer(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, server.stop)

    try:
        await server.start()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)


def main() -> None:
    """Main entry point."""
    try:
        config = Config()
        config.validate()
        setup_logging(config.log_level)
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
