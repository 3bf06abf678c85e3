# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Configuration management for the stream tailer.

Values are resolved in this order: dataclass defaults, then
``~/.actionstream/config.yaml``, then ``ACTIONSTREAM_*`` environment
variables.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .streams import CLEANUP_POLICIES, CLEANUP_STREAM, STREAMING_ACTIONS_STREAM

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration value is missing or out of range."""


@dataclass
class Config:
    """Stream tailer configuration container."""

    # Redis settings
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0

    # Stream settings
    stream_key: str = STREAMING_ACTIONS_STREAM
    idle_interval: float = 1.0  # seconds, after an empty poll
    active_interval: float = 2.0  # seconds, after a processed batch
    cleanup: str = CLEANUP_STREAM

    # Logging settings
    log_level: str = "INFO"
    entry_log_level: str = "WARNING"

    # Config file path
    config_path: Optional[Path] = None

    def __post_init__(self):
        """Initialize configuration after creation."""
        if self.config_path is None:
            self.config_path = Path.home() / ".actionstream" / "config.yaml"
        else:
            self.config_path = Path(self.config_path)

        if self.config_path.exists():
            self.load_from_file()

        self.load_from_env()

    def load_from_file(self) -> None:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {self.config_path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {self.config_path}: top level is not a mapping")
            return

        redis_section = self._section(data, "redis")
        self.redis_host = redis_section.get("host", self.redis_host)
        self.redis_port = redis_section.get("port", self.redis_port)
        self.redis_db = redis_section.get("db", self.redis_db)
        self.socket_timeout = redis_section.get("socket_timeout", self.socket_timeout)
        self.socket_connect_timeout = redis_section.get(
            "socket_connect_timeout", self.socket_connect_timeout
        )

        stream = self._section(data, "stream")
        self.stream_key = stream.get("key", self.stream_key)
        self.idle_interval = stream.get("idle_interval", self.idle_interval)
        self.active_interval = stream.get("active_interval", self.active_interval)
        self.cleanup = stream.get("cleanup", self.cleanup)

        logging_section = self._section(data, "logging")
        self.log_level = logging_section.get("level", self.log_level)
        self.entry_log_level = logging_section.get("entry_level", self.entry_log_level)

    def _section(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.get(name, {})
        if not isinstance(section, dict):
            logger.warning(f"Ignoring config section '{name}': expected a mapping")
            return {}
        return section

    def load_from_env(self) -> None:
        """Load configuration from environment variables."""
        if env_host := os.environ.get("ACTIONSTREAM_REDIS_HOST"):
            self.redis_host = env_host

        if env_port := os.environ.get("ACTIONSTREAM_REDIS_PORT"):
            self.redis_port = self._parse(env_port, int, "ACTIONSTREAM_REDIS_PORT")

        if env_db := os.environ.get("ACTIONSTREAM_REDIS_DB"):
            self.redis_db = self._parse(env_db, int, "ACTIONSTREAM_REDIS_DB")

        if env_key := os.environ.get("ACTIONSTREAM_STREAM_KEY"):
            self.stream_key = env_key

        if env_idle := os.environ.get("ACTIONSTREAM_IDLE_INTERVAL"):
            self.idle_interval = self._parse(env_idle, float, "ACTIONSTREAM_IDLE_INTERVAL")

        if env_active := os.environ.get("ACTIONSTREAM_ACTIVE_INTERVAL"):
            self.active_interval = self._parse(env_active, float, "ACTIONSTREAM_ACTIVE_INTERVAL")

        if env_cleanup := os.environ.get("ACTIONSTREAM_CLEANUP"):
            self.cleanup = env_cleanup

        if env_level := os.environ.get("ACTIONSTREAM_LOG_LEVEL"):
            self.log_level = env_level

    @staticmethod
    def _parse(raw: str, kind, name: str):
        try:
            return kind(raw)
        except ValueError as e:
            raise ConfigError(f"Invalid value for {name}: {raw!r}") from e

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True when every value is usable

        Raises:
            ConfigError: If a value is out of range
        """
        if not self.stream_key:
            raise ConfigError("stream key must not be empty")

        if not isinstance(self.redis_port, int) or not 0 < self.redis_port < 65536:
            raise ConfigError(f"Invalid Redis port: {self.redis_port}")

        for name in ("idle_interval", "active_interval"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"{name} must be a positive number of seconds, got {value!r}")

        if self.cleanup not in CLEANUP_POLICIES:
            raise ConfigError(
                f"Unknown cleanup policy: {self.cleanup}. "
                f"Valid policies: {', '.join(CLEANUP_POLICIES)}"
            )

        for name in ("log_level", "entry_log_level"):
            level = getattr(self, name)
            if not isinstance(logging.getLevelName(str(level).upper()), int):
                raise ConfigError(f"Unknown {name}: {level}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "redis": {
                "host": self.redis_host,
                "port": self.redis_port,
                "db": self.redis_db,
                "socket_timeout": self.socket_timeout,
                "socket_connect_timeout": self.socket_connect_timeout,
            },
            "stream": {
                "key": self.stream_key,
                "idle_interval": self.idle_interval,
                "active_interval": self.active_interval,
                "cleanup": self.cleanup,
            },
            "logging": {
                "level": self.log_level,
                "entry_level": self.entry_log_level,
            },
        }
