"""Emotiv Cortex transport.

Example usage:
    >>> from cortexevents.sources.emotiv import CortexClient, CortexCredentials
    >>>
    >>> client = CortexClient(CortexCredentials(
    ...     client_id="your-client-id",
    ...     client_secret="your-client-secret",
    ... ))
    >>> client.connect()
    >>> client.init()
"""

from cortexevents.sources.emotiv.cortex_client import (
    CortexClient,
    CortexCredentials,
    CortexState,
)

__all__ = [
    "CortexClient",
    "CortexCredentials",
    "CortexState",
]
