# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Shared components used by the producer, the worker and the CLI.
"""

from .config import Config, ConfigError
from .streams import (
    CLEANUP_ENTRIES,
    CLEANUP_POLICIES,
    CLEANUP_STREAM,
    STREAM_START_ID,
    STREAMING_ACTIONS_STREAM,
)

__all__ = [
    "Config",
    "ConfigError",
    "CLEANUP_ENTRIES",
    "CLEANUP_POLICIES",
    "CLEANUP_STREAM",
    "STREAM_START_ID",
    "STREAMING_ACTIONS_STREAM",
]
