"""In-memory Cortex transport for testing and development.

MockTransport implements the CortexTransport protocol without a headset or
a running Cortex service. It records every transport call in order and lets
the caller push stream rows to the registered handlers. It's useful for:
- Unit and integration testing
- Demos and documentation examples
- Replaying a recorded sequence of samples
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from cortexevents.sources.base import StreamHandler, StreamListeners


logger = logging.getLogger(__name__)


DEFAULT_HEADERS: Dict[str, Tuple[str, ...]] = {
    "com": ("act", "pow"),
    "fac": ("eyeAct", "uAct", "uPow", "lAct", "lPow"),
}


@dataclass
class ScriptedSample:
    """A stream row to deliver after a delay.

    Attributes:
        delay: Seconds to wait before delivering this row.
        stream: Stream name, e.g. "fac" or "com".
        row: Positional values in header order.
    """

    delay: float
    stream: str
    row: Sequence[Any]


class MockTransport:
    """Mock transport recording calls and delivering pushed samples.

    Example:
        >>> transport = MockTransport()
        >>> stop = watch_events(transport, 0.5, print)
        >>> _ = transport.push("com", ["push", 0.7])
        StateSnapshot(command='push', eyes='neutral', brows='neutral', mouth='neutral')
        >>> stop()
        >>> transport.calls
        [('create_session', 'open'), ('subscribe', ('com', 'fac')), ...]
    """

    def __init__(
        self,
        headers: Optional[Dict[str, Sequence[str]]] = None,
        failed_streams: Iterable[str] = (),
    ) -> None:
        """Initialize the mock transport.

        Args:
            headers: Column header per stream. Defaults to the Cortex
                ``com`` and ``fac`` layouts.
            failed_streams: Streams whose subscribe entry comes back without
                a payload.
        """
        source = headers if headers is not None else DEFAULT_HEADERS
        self._headers = {name: tuple(cols) for name, cols in source.items()}
        self._failed_streams = set(failed_streams)
        self._listeners = StreamListeners()
        self._session_status: Optional[str] = None
        self._subscribed: List[str] = []
        self.calls: List[Tuple[str, Any]] = []

    @property
    def session_status(self) -> Optional[str]:
        """Last status passed to create_session or update_session."""
        return self._session_status

    @property
    def subscribed_streams(self) -> List[str]:
        """Streams currently subscribed."""
        return list(self._subscribed)

    def listener_count(self, stream: str) -> int:
        """Number of handlers registered for a stream."""
        return self._listeners.listener_count(stream)

    def create_session(self, status: str = "open") -> None:
        self.calls.append(("create_session", status))
        self._session_status = status

    def subscribe(self, streams: Sequence[str]) -> List[Dict[str, Any]]:
        self.calls.append(("subscribe", tuple(streams)))
        result: List[Dict[str, Any]] = []
        for stream in streams:
            if stream in self._failed_streams or stream not in self._headers:
                logger.info("MockTransport refusing subscription to '%s'", stream)
                result.append({})
                continue
            self._subscribed.append(stream)
            result.append({stream: {"cols": list(self._headers[stream])}})
        return result

    def unsubscribe(self, streams: Sequence[str]) -> None:
        self.calls.append(("unsubscribe", tuple(streams)))
        self._subscribed = [s for s in self._subscribed if s not in streams]

    def update_session(self, status: str) -> None:
        self.calls.append(("update_session", status))
        self._session_status = status

    def on(self, stream: str, handler: StreamHandler) -> None:
        self.calls.append(("on", stream))
        self._listeners.on(stream, handler)

    def remove_listener(self, stream: str, handler: StreamHandler) -> None:
        self.calls.append(("remove_listener", stream))
        self._listeners.remove_listener(stream, handler)

    def push(self, stream: str, row: Sequence[Any]) -> bool:
        """Deliver one row on a stream, synchronously.

        Returns:
            True if a handler received it.
        """
        message = {stream: list(row), "sid": "mock-session", "time": time.time()}
        return self._listeners.emit(message)

    def play(self, script: Iterable[ScriptedSample]) -> int:
        """Deliver a scripted sequence of rows, honoring each delay.

        Returns:
            Number of rows that reached a handler.
        """
        delivered = 0
        for item in script:
            if item.delay > 0:
                time.sleep(item.delay)
            if self.push(item.stream, item.row):
                delivered += 1
        return delivered
