"""Device transports for cortexevents.

All transports implement the CortexTransport protocol, so EventStream works
the same against a real headset and against the in-memory mock.

Available transports:
    - CortexClient: Real Emotiv devices via the Cortex API
    - MockTransport: In-memory transport for tests and demos
"""

from cortexevents.sources.base import CortexTransport, StreamHandler, StreamListeners
from cortexevents.sources.mock import DEFAULT_HEADERS, MockTransport, ScriptedSample


# Lazy import for CortexClient to avoid the websocket dependency if not needed
def __getattr__(name: str):
    """Lazy loading for the WebSocket transport."""
    if name == "CortexClient":
        from cortexevents.sources.emotiv import CortexClient
        return CortexClient
    if name == "CortexCredentials":
        from cortexevents.sources.emotiv import CortexCredentials
        return CortexCredentials
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Protocol and helpers
    "CortexTransport",
    "StreamHandler",
    "StreamListeners",
    # Mock transport
    "DEFAULT_HEADERS",
    "MockTransport",
    "ScriptedSample",
    # Emotiv (lazy loaded)
    "CortexClient",
    "CortexCredentials",
]
