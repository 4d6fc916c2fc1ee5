"""Event stream coordinator - folds the com and fac streams into one state.

This module provides the EventStream class, which owns one Cortex session
with two subscriptions and turns their samples into change notifications.

Architecture:
    transport "com"/"fac" row -> column mapper -> typed sample
        -> reducer(AggregatedState) -> StateSnapshot -> on_result

Lifecycle:
    UNINITIALIZED --open()--> ACTIVE --close()--> CLOSED

Thread Safety:
    Real transports deliver samples on a background thread, so every
    reduction runs under the stream's lock.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from cortexevents.core.events import AggregatedState, EmotivStream, StateSnapshot
from cortexevents.core.exceptions import SessionError, SubscriptionError
from cortexevents.processors.columns import (
    command_sample_from_row,
    facial_sample_from_row,
)
from cortexevents.processors.reducer import reduce_command, reduce_facial
from cortexevents.sources.base import CortexTransport


logger = logging.getLogger(__name__)


ResultCallback = Callable[[StateSnapshot], None]

# Subscribe order matters: reply entry 0 is com, entry 1 is fac
STREAMS: List[str] = [EmotivStream.COM.value, EmotivStream.FAC.value]


class StreamState(Enum):
    """Lifecycle states of an EventStream."""

    UNINITIALIZED = auto()
    ACTIVE = auto()
    CLOSED = auto()


def _payload(subscriptions: List[Dict[str, Any]], index: int, stream: str) -> Optional[Dict[str, Any]]:
    """Return the subscription payload for stream at index, if present."""
    if index >= len(subscriptions):
        return None
    entry = subscriptions[index] or {}
    return entry.get(stream) or None


class EventStream:
    """Combines mental commands and facial expressions into one state.

    Opening the stream creates a session, subscribes to ``com`` and ``fac``
    and starts listening. Every sample that changes the aggregated state
    produces one StateSnapshot passed to ``on_result``. Power-rated fields
    (command, brows, mouth) only change when their power is at least
    ``threshold``; eye actions have no power rating and always apply.

    Example:
        >>> with EventStream(client, 0.5, print) as stream:
        ...     input("Press Enter to stop...")

    Attributes:
        threshold: Minimum power for power-rated fields.
        strict_changes: Emit facial updates only when the final state
            differs from the state before the sample.
    """

    def __init__(
        self,
        client: CortexTransport,
        threshold: float,
        on_result: ResultCallback,
        strict_changes: bool = False,
    ) -> None:
        """Initialize the stream. Nothing is sent until open().

        Args:
            client: Transport to open the session on.
            threshold: Minimum power for power-rated fields. Not validated.
            on_result: Called with a snapshot on every state change.
            strict_changes: Select final-diff change detection for facial
                samples instead of "any field touched".
        """
        self._client = client
        self._threshold = threshold
        self._on_result = on_result
        self._strict_changes = strict_changes

        self._lock = threading.RLock()
        self._state = StreamState.UNINITIALIZED
        self._opening = False
        self._current = AggregatedState()

        self._to_command: Optional[Callable[[Any], Any]] = None
        self._to_facial: Optional[Callable[[Any], Any]] = None

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def strict_changes(self) -> bool:
        return self._strict_changes

    @property
    def state(self) -> StreamState:
        """Current lifecycle state."""
        with self._lock:
            return self._state

    @property
    def current(self) -> StateSnapshot:
        """Snapshot of the aggregated state right now."""
        with self._lock:
            return self._current.snapshot()

    def open(self) -> EventStream:
        """Open the session, subscribe and start listening.

        The session and subscribe round trips run without holding the
        stream's lock; ``state`` reads UNINITIALIZED until they succeed.

        Returns:
            self, so ``stream = EventStream(...).open()`` reads naturally.

        Raises:
            SessionError: If the stream was already opened, or another
                thread is opening it.
            SubscriptionError: If the ``com`` or ``fac`` payload is absent
                from the subscribe reply.
            BCIError: Any transport failure, unchanged.
        """
        with self._lock:
            if self._state is not StreamState.UNINITIALIZED or self._opening:
                state = "OPENING" if self._opening else self._state.name
                raise SessionError(f"Cannot open stream in state {state}")
            self._opening = True

        try:
            logger.info("Opening event stream (threshold=%s)", self._threshold)
            self._client.create_session(status="open")
            subscriptions = self._client.subscribe(streams=STREAMS)

            com = _payload(subscriptions, 0, EmotivStream.COM.value)
            fac = _payload(subscriptions, 1, EmotivStream.FAC.value)
            missing = [
                name
                for name, payload in zip(STREAMS, (com, fac))
                if payload is None
            ]
            if missing:
                raise SubscriptionError(
                    f"Failed to subscribe to {', '.join(missing)}",
                    streams=missing,
                )

            to_command = command_sample_from_row(com.get("cols", []))
            to_facial = facial_sample_from_row(fac.get("cols", []))

            with self._lock:
                self._to_command = to_command
                self._to_facial = to_facial
                self._current = AggregatedState()
                self._client.on(EmotivStream.FAC.value, self._on_facial)
                self._client.on(EmotivStream.COM.value, self._on_command)
                self._state = StreamState.ACTIVE
        finally:
            with self._lock:
                self._opening = False

        logger.info("Event stream active")
        return self

    def close(self) -> None:
        """Unsubscribe, close the session and detach the handlers.

        Steps run in that order, once. Calling close() on a stream that is
        not active does nothing.
        """
        with self._lock:
            if self._state is not StreamState.ACTIVE:
                logger.debug("Stream not active (%s), ignoring close()", self._state.name)
                return
            self._state = StreamState.CLOSED

        logger.info("Closing event stream")
        self._client.unsubscribe(streams=STREAMS)
        self._client.update_session(status="close")
        self._client.remove_listener(EmotivStream.COM.value, self._on_command)
        self._client.remove_listener(EmotivStream.FAC.value, self._on_facial)
        logger.info("Event stream closed")

    def _on_facial(self, event: Dict[str, Any]) -> None:
        """Handle one ``fac`` message."""
        sample = self._to_facial(event.get(EmotivStream.FAC.value) or [])
        with self._lock:
            snapshot = reduce_facial(
                self._current, sample, self._threshold, strict=self._strict_changes
            )
        if snapshot is not None:
            self._on_result(snapshot)

    def _on_command(self, event: Dict[str, Any]) -> None:
        """Handle one ``com`` message."""
        sample = self._to_command(event.get(EmotivStream.COM.value) or [])
        with self._lock:
            snapshot = reduce_command(self._current, sample, self._threshold)
        if snapshot is not None:
            self._on_result(snapshot)

    def __enter__(self) -> EventStream:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def watch_events(
    client: CortexTransport,
    threshold: float,
    on_result: ResultCallback,
    strict_changes: bool = False,
) -> Callable[[], None]:
    """Start watching facial expressions and mental commands.

    Args:
        client: An initialised transport (e.g. CortexClient after init()).
        threshold: Minimum power for command, brows and mouth updates.
        on_result: Called with a StateSnapshot every time the state changes.
        strict_changes: See EventStream.

    Returns:
        A zero-argument function that tears the session down.

    Example:
        >>> stop = watch_events(client, 0.5, lambda s: print(s.as_dict()))
        >>> # ...
        >>> stop()
    """
    stream = EventStream(client, threshold, on_result, strict_changes=strict_changes)
    stream.open()
    return stream.close
