# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Entry handlers invoked by the tailing worker."""

import logging
from typing import Callable, Optional, Union

from ..store.log_store import Fields, LogEntry

# (entry_id, fields) -> None. Runs on the worker's only execution path and
# must not block indefinitely.
EntryHandler = Callable[[str, Fields], None]


class LoggingEntryHandler:
    """Report each entry as one log record with its id and name=value lines."""

    def __init__(self, level: Union[int, str] = logging.WARNING, logger: Optional[logging.Logger] = None):
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            if not isinstance(resolved, int):
                raise ValueError(f"Unknown log level: {level}")
            level = resolved
        self.level = level
        self.logger = logger or logging.getLogger(__name__)

    def __call__(self, entry_id: str, fields: Fields) -> None:
        self.logger.log(
            self.level,
            "Stream entry received %s , %s",
            entry_id,
            LogEntry(entry_id, fields).render(),
        )
