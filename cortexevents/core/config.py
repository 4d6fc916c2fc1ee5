"""Configuration management for cortexevents.

This module provides configuration dataclasses and utilities for loading
configuration from YAML files and environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigurationError


DEFAULT_CORTEX_URL = "wss://localhost:6868"

# LOG_LEVEL verbosity -> logging level
_VERBOSITY_LEVELS = {
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
}


def log_level_from_env(default: int = 1) -> int:
    """Translate the LOG_LEVEL environment variable into a logging level.

    LOG_LEVEL is a verbosity number: 1 shows warnings and errors, 2 adds
    connection progress, 3 adds per-sample debugging. Values above 3 are
    treated as 3.

    Raises:
        ConfigurationError: If LOG_LEVEL is set but is not an integer.
    """
    raw = os.environ.get("LOG_LEVEL")
    if raw is None or raw.strip() == "":
        verbosity = default
    else:
        try:
            verbosity = int(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"LOG_LEVEL must be an integer, got '{raw}'",
                parameter="LOG_LEVEL",
            ) from e

    verbosity = max(1, min(verbosity, 3))
    return _VERBOSITY_LEVELS[verbosity]


@dataclass(frozen=True)
class WatchConfig:
    """Configuration for an event watching session.

    Attributes:
        threshold: Minimum power a power-rated field needs before it may
            update the state (0.0 to 1.0).
        strict_changes: If True, facial samples only emit when the final
            state differs from the state before the sample.
    """

    threshold: float = 0.0
    strict_changes: bool = False

    def __post_init__(self) -> None:
        """Validate the threshold is within acceptable range."""
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(
                f"Threshold must be between 0.0 and 1.0, got {self.threshold}",
                parameter="threshold",
            )


@dataclass(frozen=True)
class EmotivConfig:
    """Configuration for the Emotiv Cortex API connection.

    Attributes:
        client_id: Emotiv Cortex API client ID.
        client_secret: Emotiv Cortex API client secret.
        license_id: Optional license ID sent with authorize.
        headset_id: Optional specific headset ID to connect to.
        url: Cortex WebSocket URL.
    """

    client_id: str
    client_secret: str
    license_id: Optional[str] = None
    headset_id: Optional[str] = None
    url: str = DEFAULT_CORTEX_URL

    def __post_init__(self) -> None:
        """Validate required credentials are provided."""
        if not self.client_id:
            raise ConfigurationError(
                "Emotiv client_id is required", parameter="client_id"
            )
        if not self.client_secret:
            raise ConfigurationError(
                "Emotiv client_secret is required", parameter="client_secret"
            )

    @classmethod
    def from_env(cls) -> EmotivConfig:
        """Create EmotivConfig from environment variables.

        Reads the following environment variables:
        - EMOTIV_CLIENT_ID (required)
        - EMOTIV_CLIENT_SECRET (required)
        - EMOTIV_LICENSE_ID (optional)
        - EMOTIV_HEADSET_ID (optional)
        - CORTEX_URL (optional)

        Raises:
            ConfigurationError: If required environment variables are not set.
        """
        client_id = os.environ.get("EMOTIV_CLIENT_ID", "")
        client_secret = os.environ.get("EMOTIV_CLIENT_SECRET", "")

        if not client_id:
            raise ConfigurationError(
                "Environment variable EMOTIV_CLIENT_ID is required",
                parameter="EMOTIV_CLIENT_ID",
            )
        if not client_secret:
            raise ConfigurationError(
                "Environment variable EMOTIV_CLIENT_SECRET is required",
                parameter="EMOTIV_CLIENT_SECRET",
            )

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            license_id=os.environ.get("EMOTIV_LICENSE_ID"),
            headset_id=os.environ.get("EMOTIV_HEADSET_ID"),
            url=os.environ.get("CORTEX_URL", DEFAULT_CORTEX_URL),
        )


@dataclass
class Config:
    """Main configuration container for cortexevents.

    Attributes:
        emotiv: Cortex API connection configuration.
        watch: Event watching configuration.
        log_level: Logging level used by the command line runner.
    """

    emotiv: EmotivConfig
    watch: WatchConfig = field(default_factory=WatchConfig)
    log_level: int = logging.WARNING

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        The watch section keeps its defaults (threshold 0).
        """
        return cls(emotiv=EmotivConfig.from_env(), log_level=log_level_from_env())

    @classmethod
    def from_yaml(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML file: {e}") from e

        if data is None:
            raise ConfigurationError("Configuration file is empty")
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping, got {type(data).__name__}"
            )

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Config:
        """Create Config from a dictionary, typically parsed YAML.

        Credentials missing from the dictionary fall back to the
        EMOTIV_CLIENT_ID / EMOTIV_CLIENT_SECRET environment variables.
        """
        emotiv_data = data.get("emotiv") or {}
        if not isinstance(emotiv_data, dict):
            raise ConfigurationError(
                "The emotiv section must be a mapping", parameter="emotiv"
            )

        client_id = emotiv_data.get("client_id") or os.environ.get(
            "EMOTIV_CLIENT_ID", ""
        )
        client_secret = emotiv_data.get("client_secret") or os.environ.get(
            "EMOTIV_CLIENT_SECRET", ""
        )

        emotiv = EmotivConfig(
            client_id=client_id,
            client_secret=client_secret,
            license_id=emotiv_data.get("license_id"),
            headset_id=emotiv_data.get("headset_id"),
            url=emotiv_data.get("url", DEFAULT_CORTEX_URL),
        )

        watch_data = data.get("watch") or {}
        try:
            watch = WatchConfig(**watch_data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid watch configuration: {e}") from e

        verbosity = data.get("log_level")
        if verbosity is None:
            log_level = log_level_from_env()
        else:
            try:
                verbosity = int(verbosity)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"log_level must be an integer, got '{verbosity}'",
                    parameter="log_level",
                ) from e
            log_level = _VERBOSITY_LEVELS[max(1, min(verbosity, 3))]

        return cls(emotiv=emotiv, watch=watch, log_level=log_level)
