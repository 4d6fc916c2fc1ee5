"""Console publisher for watching state changes in a terminal.

Each snapshot becomes one aligned line:

    eyes: lookL      | brows: surprise   | mouth: neutral    | command: push
"""

import logging
import sys
from typing import TYPE_CHECKING, TextIO

from cortexevents.publishers.base import Publisher

if TYPE_CHECKING:
    from cortexevents.core.events import StateSnapshot


logger = logging.getLogger(__name__)

COLUMN_WIDTH = 10


def pad(text: str, width: int) -> str:
    """Right-pad text with spaces to width. Longer text is left as is."""
    return text.ljust(width)


def format_snapshot(snapshot: "StateSnapshot", width: int = COLUMN_WIDTH) -> str:
    """Format a snapshot as a single aligned console line."""
    return (
        f"eyes: {pad(snapshot.eyes, width)} | "
        f"brows: {pad(snapshot.brows, width)} | "
        f"mouth: {pad(snapshot.mouth, width)} | "
        f"command: {snapshot.command}"
    )


class ConsolePublisher(Publisher):
    """Publisher that prints one line per snapshot.

    Attributes:
        stream: Output stream (defaults to sys.stdout)

    Example:
        with ConsolePublisher() as publisher:
            stop = watch_events(client, 0.0, publisher.publish)
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._is_ready = False
        self._event_count = 0

    def start(self) -> None:
        """Mark the publisher as ready."""
        self._is_ready = True
        self._event_count = 0
        logger.debug("Console publisher started")

    def stop(self) -> None:
        """Flush the output stream and mark as not ready."""
        if self._is_ready:
            self._stream.flush()
            self._is_ready = False
            logger.debug("Console publisher stopped (published %d snapshots)", self._event_count)

    @property
    def is_ready(self) -> bool:
        """Check if the publisher is ready."""
        return self._is_ready

    @property
    def event_count(self) -> int:
        """Number of snapshots published since start()."""
        return self._event_count

    def publish(self, snapshot: "StateSnapshot") -> None:
        """Print the snapshot.

        Raises:
            RuntimeError: If the publisher has not been started.
        """
        if not self._is_ready:
            raise RuntimeError("Console publisher not started. Call start() first.")

        self.write_line(format_snapshot(snapshot))
        self._event_count += 1

    def write_line(self, message: str) -> None:
        """Write a line to the output stream, flushing immediately."""
        self._stream.write(message + "\n")
        self._stream.flush()
