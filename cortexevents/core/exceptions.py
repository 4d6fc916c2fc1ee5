"""Exception hierarchy for cortexevents.

Every error raised by the library derives from BCIError, so callers can
catch anything coming out of a session with a single handler while still
getting the specific failure when they need it.

    BCIError
    ├── ConnectionError
    │   └── DeviceNotFoundError
    ├── AuthenticationError
    ├── SessionError
    ├── SubscriptionError
    └── ConfigurationError
"""

from typing import List, Optional


class BCIError(Exception):
    """Base exception for all cortexevents errors.

    The string form is ``[source_id] message (detail)``, where the prefix
    and the detail only appear when present.

    Attributes:
        message: Human-readable error description.
        source_id: Optional identifier of the component that raised the error.
    """

    def __init__(self, message: str, source_id: Optional[str] = None) -> None:
        self.message = message
        self.source_id = source_id
        super().__init__(self._render())

    def _detail(self) -> Optional[str]:
        """Extra context appended in parentheses. None for no suffix."""
        return None

    def _render(self) -> str:
        text = self.message
        if self.source_id:
            text = f"[{self.source_id}] {text}"
        detail = self._detail()
        if detail:
            text = f"{text} ({detail})"
        return text


class ConnectionError(BCIError):
    """The Cortex service could not be reached, or stopped answering.

    Attributes:
        cause: The lower-level exception, if there was one.
    """

    def __init__(
        self,
        message: str,
        source_id: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.cause = cause
        super().__init__(message, source_id)

    def _detail(self) -> Optional[str]:
        if self.cause is None:
            return None
        return f"caused by: {type(self.cause).__name__}: {self.cause}"


class DeviceNotFoundError(ConnectionError):
    """Cortex answered, but has no usable headset.

    Attributes:
        device_type: Headset family that was looked for, e.g. "Emotiv".
    """

    def __init__(
        self,
        message: str = "No headset found",
        source_id: Optional[str] = None,
        device_type: Optional[str] = None,
    ) -> None:
        self.device_type = device_type
        if device_type and "headset" not in message.lower():
            message = f"{device_type} headset not found: {message}"
        super().__init__(message, source_id)


class AuthenticationError(BCIError):
    """Cortex refused access or returned no token."""


class SessionError(BCIError):
    """A session could not be opened, used or closed.

    Also raised for lifecycle misuse such as opening a stream twice.
    """

    def __init__(
        self,
        message: str,
        source_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id
        super().__init__(message, source_id)

    def _detail(self) -> Optional[str]:
        return f"session: {self.session_id}" if self.session_id else None


class SubscriptionError(BCIError):
    """A requested stream is missing from the subscribe reply.

    Attributes:
        streams: Names of the streams that did not come back.
    """

    def __init__(
        self,
        message: str,
        source_id: Optional[str] = None,
        streams: Optional[List[str]] = None,
    ) -> None:
        self.streams = list(streams or [])
        super().__init__(message, source_id)


class ConfigurationError(BCIError):
    """A setting is missing or out of range."""

    def __init__(
        self,
        message: str,
        source_id: Optional[str] = None,
        parameter: Optional[str] = None,
    ) -> None:
        self.parameter = parameter
        super().__init__(message, source_id)

    def _detail(self) -> Optional[str]:
        return f"parameter: {self.parameter}" if self.parameter else None
