"""Base publisher protocol for cortexevents.

Publishers receive state snapshots and present them somewhere: the console,
a log, a game. Any publisher's publish() can be passed directly as the
result callback of watch_events().
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cortexevents.core.events import StateSnapshot


class Publisher(ABC):
    """Abstract base class for all snapshot publishers.

    Lifecycle:
        1. Create publisher instance
        2. Call start() to initialize resources
        3. Call publish() to handle snapshots
        4. Call stop() to release resources
    """

    @abstractmethod
    def publish(self, snapshot: "StateSnapshot") -> None:
        """Publish a state snapshot.

        Raises:
            RuntimeError: If the publisher is not ready (start() not called).
        """
        pass

    @abstractmethod
    def start(self) -> None:
        """Initialize publisher resources."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Release publisher resources. Safe to call multiple times."""
        pass

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """True if start() has been called and stop() has not."""
        pass

    def __enter__(self) -> "Publisher":
        """Context manager entry - starts the publisher."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - stops the publisher."""
        self.stop()
