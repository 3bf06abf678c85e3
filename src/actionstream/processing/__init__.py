# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Processing layer: tails the action stream and reports each entry.
"""

from .handlers import EntryHandler, LoggingEntryHandler
from .tail_worker import StreamTailWorker

__all__ = [
    "EntryHandler",
    "LoggingEntryHandler",
    "StreamTailWorker",
]
