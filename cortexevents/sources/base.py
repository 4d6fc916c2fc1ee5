"""Transport protocol for Cortex-style stream sources.

EventStream talks to the device through the small interface defined here:
session open/close, stream subscribe/unsubscribe and per-stream listener
registration. CortexClient implements it over the real WebSocket API and
MockTransport implements it in memory.
"""

import logging
from abc import abstractmethod
from typing import Any, Callable, Dict, List, Protocol, Sequence, runtime_checkable


logger = logging.getLogger(__name__)


# A stream listener receives the whole stream message, e.g.
# {"fac": ["neutral", "surprise", 0.6, "smile", 0.2], "sid": "...", "time": 0.0}
StreamHandler = Callable[[Dict[str, Any]], None]


@runtime_checkable
class CortexTransport(Protocol):
    """Protocol defining what EventStream needs from a device transport.

    Lifecycle as driven by EventStream:
        1. create_session(status="open")
        2. subscribe(streams) - returns one entry per requested stream
        3. on(stream, handler) - events flow to handlers
        4. unsubscribe(streams)
        5. update_session(status="close")
        6. remove_listener(stream, handler)

    Thread Safety:
        Handlers may be invoked from a background thread.
    """

    @abstractmethod
    def create_session(self, status: str = "open") -> None:
        """Open a session with the headset."""
        ...

    @abstractmethod
    def subscribe(self, streams: Sequence[str]) -> List[Dict[str, Any]]:
        """Subscribe to the given streams.

        Returns:
            One dict per requested stream, in request order. A successful
            entry maps the stream name to its payload, which carries the
            ``cols`` header, e.g. ``{"com": {"cols": ["act", "pow"]}}``.
            A failed entry does not contain the stream name.
        """
        ...

    @abstractmethod
    def unsubscribe(self, streams: Sequence[str]) -> None:
        """Stop the given streams."""
        ...

    @abstractmethod
    def update_session(self, status: str) -> None:
        """Change the session status, e.g. ``"close"``."""
        ...

    @abstractmethod
    def on(self, stream: str, handler: StreamHandler) -> None:
        """Register a handler for messages of one stream."""
        ...

    @abstractmethod
    def remove_listener(self, stream: str, handler: StreamHandler) -> None:
        """Remove a previously registered handler."""
        ...


class StreamListeners:
    """Per-stream handler registry shared by the transports.

    Dispatch does not catch handler errors: a failing handler surfaces to
    whoever delivered the message.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[StreamHandler]] = {}

    def on(self, stream: str, handler: StreamHandler) -> None:
        """Register a handler; registering the same handler twice is a no-op."""
        handlers = self._handlers.setdefault(stream, [])
        if handler not in handlers:
            handlers.append(handler)

    def remove_listener(self, stream: str, handler: StreamHandler) -> None:
        """Remove a handler. Safe to call if it was never registered."""
        handlers = self._handlers.get(stream, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, stream: str) -> int:
        """Number of handlers registered for a stream."""
        return len(self._handlers.get(stream, []))

    def emit(self, message: Dict[str, Any]) -> bool:
        """Deliver a stream message to every handler of each stream it carries.

        Returns:
            True if at least one handler received the message.
        """
        delivered = False
        for stream, handlers in list(self._handlers.items()):
            if stream not in message:
                continue
            for handler in list(handlers):
                handler(message)
                delivered = True
        if not delivered:
            logger.debug("No listener for message keys %s", sorted(message))
        return delivered
