"""Core module for cortexevents.

This module provides the foundational components of the library:
- Typed samples, aggregated state and snapshots
- The EventStream coordinator and watch_events entry point
- Configuration management
- Custom exceptions for error handling

Example usage:
    >>> from cortexevents.core import EventStream
    >>> from cortexevents.sources import MockTransport
    >>>
    >>> transport = MockTransport()
    >>> with EventStream(transport, 0.5, print):
    ...     transport.push("com", ["push", 0.7])
"""

from .events import (
    NEUTRAL,
    AggregatedState,
    CommandSample,
    EmotivStream,
    FacialSample,
    StateSnapshot,
)
from .exceptions import (
    AuthenticationError,
    BCIError,
    ConfigurationError,
    ConnectionError,
    DeviceNotFoundError,
    SessionError,
    SubscriptionError,
)
from .config import (
    Config,
    EmotivConfig,
    WatchConfig,
    log_level_from_env,
)
from .engine import EventStream, StreamState, watch_events

__all__ = [
    # Events
    "NEUTRAL",
    "AggregatedState",
    "CommandSample",
    "EmotivStream",
    "FacialSample",
    "StateSnapshot",
    # Coordinator
    "EventStream",
    "StreamState",
    "watch_events",
    # Configuration
    "Config",
    "EmotivConfig",
    "WatchConfig",
    "log_level_from_env",
    # Exceptions
    "AuthenticationError",
    "BCIError",
    "ConfigurationError",
    "ConnectionError",
    "DeviceNotFoundError",
    "SessionError",
    "SubscriptionError",
]
