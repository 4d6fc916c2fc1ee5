"""
cortexevents - combine Emotiv facial expressions and mental commands into a
single state that only reports real changes.

The package is organised as:

- Typed samples, state and snapshots (`core.events`)
- The session/stream coordinator and `watch_events` (`core.engine`)
- Column mapping and state reduction (`processors`)
- Device transports: the Cortex WebSocket client and a mock (`sources`)
- Console output (`publishers`)
- The `cortexevents` command (`cli`)

Example:
    >>> from cortexevents import watch_events
    >>> stop = watch_events(client, 0.5, lambda snapshot: print(snapshot.as_dict()))
    >>> # ...
    >>> stop()
"""

# Public API of the package
from .core.engine import EventStream, StreamState, watch_events
from .core.events import StateSnapshot
from .core.exceptions import BCIError, SubscriptionError

__all__ = [
    "BCIError",
    "EventStream",
    "StateSnapshot",
    "StreamState",
    "SubscriptionError",
    "watch_events",
]
__version__ = "0.1.0"
