# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Capability interface for an append-only, per-key log.

The tailing worker only depends on this interface. RedisLogStore is the
production implementation; tests use an in-memory one.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Tuple, Union

Fields = Tuple[Tuple[str, str], ...]


class ActionStreamError(Exception):
    """Base class for errors raised by actionstream."""


class StoreUnavailable(ActionStreamError):
    """The store connection is down or a call to it failed."""

    def __init__(self, operation: str, key: str, cause: Exception):
        super().__init__(f"{operation} on '{key}' failed: {cause}")
        self.operation = operation
        self.key = key
        self.cause = cause


@dataclass(frozen=True)
class LogEntry:
    """
    One append to the log.

    Attributes:
        id: Store-assigned id such as "1700000000000-0". Opaque to the worker.
        fields: Ordered (name, value) pairs of one logical event.
    """

    id: str
    fields: Fields

    def render(self) -> str:
        """Render fields as newline-joined name=value lines."""
        return "\n".join(f"{name}={value}" for name, value in self.fields)


def normalize_fields(fields: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> Fields:
    """Coerce a mapping or pair sequence into an ordered tuple of string pairs."""
    pairs = fields.items() if isinstance(fields, Mapping) else fields
    return tuple((str(name), str(value)) for name, value in pairs)


class LogStore(ABC):
    """Minimal capability set the tailing worker needs from a store."""

    @abstractmethod
    def length(self, key: str) -> int:
        """Number of entries currently under key (0 if the key is absent)."""
        raise NotImplementedError

    @abstractmethod
    def read_range(self, key: str, start_id: str, max_count: int) -> List[LogEntry]:
        """
        Read up to max_count entries with ids greater than start_id.

        Returns entries oldest first. Fewer than max_count are returned when
        fewer exist.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete the whole log. Deleting an absent key is not an error."""
        raise NotImplementedError

    @abstractmethod
    def delete_entries(self, key: str, ids: Sequence[str]) -> int:
        """Delete the given entries only. Returns how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def append(self, key: str, fields: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> str:
        """
        Append one entry and return its store-assigned id.

        Raises:
            ValueError: If fields is empty or repeats a field name
        """
        raise NotImplementedError
