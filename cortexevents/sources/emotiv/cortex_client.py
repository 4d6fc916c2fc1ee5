"""Blocking Cortex transport over websocket-client.

This module provides the CortexTransport implementation used against a real
headset. It handles the access/authorization handshake, headset selection,
session management and stream subscription, and dispatches stream messages
to per-stream listeners.

Cortex speaks JSON-RPC 2.0 over a local secure WebSocket
(reference: https://emotiv.gitbook.io/cortex-api/).
"""

import json
import logging
import ssl
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Sequence

import websocket

from cortexevents.core.config import DEFAULT_CORTEX_URL, EmotivConfig
from cortexevents.core.exceptions import (
    AuthenticationError,
    BCIError,
    ConnectionError,
    DeviceNotFoundError,
    SessionError,
    SubscriptionError,
)
from cortexevents.sources.base import StreamHandler, StreamListeners


logger = logging.getLogger(__name__)


# Cortex error codes grouped by the exception they map to
_JSONRPC_ERRORS = (-32600, -32601, -32602, -32603)
_AUTH_ERRORS = (-32002, -32014, -32015, -32021, -32102)
_HEADSET_ERRORS = (-32001, -32004)
_SESSION_ERRORS = (-32005, -32012)
_STREAM_ERRORS = (-32016,)


class CortexState(Enum):
    """States for the Cortex API connection."""

    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    READY = auto()  # authorized, headset selected
    SESSION_OPEN = auto()
    ERROR = auto()


@dataclass
class CortexCredentials:
    """Application credentials sent with requestAccess and authorize.

    Attributes:
        client_id: Cortex application client ID.
        client_secret: Cortex application client secret.
        license_id: License to debit sessions from. Optional.
    """

    client_id: str
    client_secret: str
    license_id: Optional[str] = None

    @classmethod
    def from_config(cls, config: EmotivConfig) -> "CortexCredentials":
        """Create credentials from an EmotivConfig."""
        return cls(
            client_id=config.client_id,
            client_secret=config.client_secret,
            license_id=config.license_id,
        )


@dataclass
class _PendingRequest:
    """A request waiting for its JSON-RPC reply."""

    method: str
    done: threading.Event = field(default_factory=threading.Event)
    response: Dict[str, Any] = field(default_factory=dict)


ErrorCallback = Callable[[Exception], None]


class CortexClient:
    """Blocking JSON-RPC client for the Emotiv Cortex API.

    Requests are sent from the caller's thread and block until the matching
    reply arrives. The WebSocket itself runs on a daemon thread, and stream
    messages are dispatched to listeners on that thread.

    Example usage:
        >>> client = CortexClient(CortexCredentials("id", "secret"))
        >>> client.connect()
        >>> client.init()
        >>> stop = watch_events(client, 0.5, print)
        >>> # ... snapshots are printed as the state changes ...
        >>> stop()
        >>> client.disconnect()
    """

    CORTEX_URL = DEFAULT_CORTEX_URL

    def __init__(
        self,
        credentials: CortexCredentials,
        headset_id: Optional[str] = None,
        url: Optional[str] = None,
        request_timeout: float = 10.0,
        debit: int = 10,
    ) -> None:
        """Initialize the Cortex client.

        Args:
            credentials: Authentication credentials for the API.
            headset_id: Optional specific headset ID to use.
                       If None, the first available headset is used.
            url: Cortex WebSocket URL. Defaults to the local Cortex service.
            request_timeout: Seconds to wait for each JSON-RPC reply.
            debit: Number of sessions to debit from the license on authorize.
        """
        self._credentials = credentials
        self._target_headset_id = headset_id
        self._url = url or self.CORTEX_URL
        self._request_timeout = request_timeout
        self._debit = debit

        self._state = CortexState.DISCONNECTED
        self._ws: Optional[websocket.WebSocketApp] = None
        self._ws_thread: Optional[threading.Thread] = None
        self._opened = threading.Event()
        self._lock = threading.Lock()

        self._next_id = 1
        self._pending: Dict[int, _PendingRequest] = {}
        self._listeners = StreamListeners()

        self._cortex_token: Optional[str] = None
        self._headset_id: Optional[str] = None
        self._session_id: Optional[str] = None

        self.on_error: Optional[ErrorCallback] = None

    @classmethod
    def from_config(cls, config: EmotivConfig, **kwargs: Any) -> "CortexClient":
        """Create a client from an EmotivConfig."""
        return cls(
            CortexCredentials.from_config(config),
            headset_id=config.headset_id,
            url=config.url,
            **kwargs,
        )

    @property
    def state(self) -> CortexState:
        """Current state of the Cortex connection."""
        return self._state

    @property
    def headset_id(self) -> Optional[str]:
        """ID of the selected headset, if any."""
        return self._headset_id

    @property
    def session_id(self) -> Optional[str]:
        """ID of the open session, if any."""
        return self._session_id

    # -------------------------------------------------------------------------
    # Connection
    # -------------------------------------------------------------------------

    def connect(self, timeout: float = 5.0) -> None:
        """Open the WebSocket and wait until it is connected.

        Raises:
            ConnectionError: If already connected or the socket does not
                open within timeout.
        """
        with self._lock:
            if self._state != CortexState.DISCONNECTED:
                raise ConnectionError(
                    f"Cannot connect: client is in state {self._state.name}"
                )
            self._state = CortexState.CONNECTING
            self._opened.clear()

        logger.info("Connecting to Emotiv Cortex API at %s...", self._url)

        self._ws = websocket.WebSocketApp(
            self._url,
            on_open=self._on_ws_open,
            on_message=self._on_ws_message,
            on_error=self._on_ws_error,
            on_close=self._on_ws_close,
        )

        self._ws_thread = threading.Thread(
            target=self._run_websocket,
            daemon=True,
            name="CortexWebSocket",
        )
        self._ws_thread.start()

        if not self._opened.wait(timeout):
            self.disconnect()
            raise ConnectionError(f"Could not connect to {self._url} within {timeout}s")

    def _run_websocket(self) -> None:
        """Run the WebSocket event loop with SSL configured."""
        if self._ws is None:
            return

        # Cortex uses a self-signed certificate
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE

        self._ws.run_forever(sslopt={"context": ssl_context})

    def disconnect(self) -> None:
        """Close the WebSocket.

        Safe to call even if not connected. Requests still waiting for a
        reply fail with ConnectionError.
        """
        with self._lock:
            if self._state == CortexState.DISCONNECTED:
                return
            self._state = CortexState.DISCONNECTED

        logger.info("Disconnecting from Emotiv Cortex API...")

        if self._ws is not None:
            self._ws.close()
            self._ws = None

        self._fail_pending("Connection closed")

        self._cortex_token = None
        self._session_id = None
        self._headset_id = None

    # -------------------------------------------------------------------------
    # Cortex API
    # -------------------------------------------------------------------------

    def init(self) -> None:
        """Request access, authorize and select a headset.

        Raises:
            AuthenticationError: If Cortex returns no token.
            DeviceNotFoundError: If no (matching) headset is available.
        """
        access = self._request(
            "requestAccess",
            {
                "clientId": self._credentials.client_id,
                "clientSecret": self._credentials.client_secret,
            },
        )
        if access and not access.get("accessGranted", False):
            # Might still be approved already; authorize will tell
            logger.warning("Access not granted: %s", access.get("message", ""))

        params: Dict[str, Any] = {
            "clientId": self._credentials.client_id,
            "clientSecret": self._credentials.client_secret,
            "debit": self._debit,
        }
        if self._credentials.license_id:
            params["license"] = self._credentials.license_id

        result = self._request("authorize", params)
        token = result.get("cortexToken") if result else None
        if not token:
            raise AuthenticationError("No cortexToken in authorize response")
        self._cortex_token = token
        logger.info("Authentication successful")

        headsets = self._request("queryHeadsets", {})
        self._headset_id = self._select_headset(headsets or [])
        self._state = CortexState.READY
        logger.info("Using headset: %s", self._headset_id)

    def _select_headset(self, headsets: List[Dict[str, Any]]) -> str:
        """Pick the configured headset, or the first one available."""
        if not headsets:
            raise DeviceNotFoundError(
                "No headsets found. Ensure your Emotiv headset is connected.",
                device_type="Emotiv",
            )

        if self._target_headset_id is None:
            return headsets[0].get("id")

        for headset in headsets:
            if headset.get("id") == self._target_headset_id:
                return self._target_headset_id

        available = [h.get("id", "unknown") for h in headsets]
        raise DeviceNotFoundError(
            f"Headset '{self._target_headset_id}' not found. Available: {available}",
            device_type="Emotiv",
        )

    def create_session(self, status: str = "open") -> None:
        """Create a session with the selected headset.

        Raises:
            SessionError: If init() has not run or Cortex returns no session.
        """
        if not self._cortex_token or not self._headset_id:
            raise SessionError("Cannot create session before init()")

        result = self._request(
            "createSession",
            {
                "cortexToken": self._cortex_token,
                "headset": self._headset_id,
                "status": status,
            },
        )
        session_id = result.get("id") if result else None
        if not session_id:
            raise SessionError("No session ID in createSession response")

        self._session_id = session_id
        self._state = CortexState.SESSION_OPEN
        logger.info("Session created: %s", self._session_id)

    def update_session(self, status: str) -> None:
        """Update the session status; ``"close"`` ends the session."""
        self._request(
            "updateSession",
            {
                "cortexToken": self._cortex_token,
                "session": self._require_session(),
                "status": status,
            },
        )
        logger.info("Session %s status set to '%s'", self._session_id, status)
        if status == "close":
            self._session_id = None
            self._state = CortexState.READY

    def subscribe(self, streams: Sequence[str]) -> List[Dict[str, Any]]:
        """Subscribe to data streams.

        Returns:
            One entry per requested stream, in request order. Successful
            streams map their name to ``{"cols": [...], "sid": ...}``;
            streams Cortex refused give an empty dict.
        """
        result = self._request(
            "subscribe",
            {
                "cortexToken": self._cortex_token,
                "session": self._require_session(),
                "streams": list(streams),
            },
        ) or {}

        for failure in result.get("failure", []):
            logger.warning(
                "Subscription to '%s' failed: %s",
                failure.get("streamName"),
                failure.get("message", "unknown error"),
            )

        succeeded = {
            entry.get("streamName"): entry for entry in result.get("success", [])
        }

        subscriptions: List[Dict[str, Any]] = []
        for name in streams:
            entry = succeeded.get(name)
            if entry is None:
                subscriptions.append({})
            else:
                subscriptions.append(
                    {name: {"cols": list(entry.get("cols", [])), "sid": entry.get("sid")}}
                )

        logger.info("Subscribed to streams: %s", sorted(succeeded))
        return subscriptions

    def unsubscribe(self, streams: Sequence[str]) -> None:
        """Unsubscribe from data streams."""
        self._request(
            "unsubscribe",
            {
                "cortexToken": self._cortex_token,
                "session": self._require_session(),
                "streams": list(streams),
            },
        )
        logger.info("Unsubscribed from streams: %s", list(streams))

    def on(self, stream: str, handler: StreamHandler) -> None:
        """Register a handler for messages of one stream."""
        self._listeners.on(stream, handler)

    def remove_listener(self, stream: str, handler: StreamHandler) -> None:
        """Remove a handler registered with on()."""
        self._listeners.remove_listener(stream, handler)

    def _require_session(self) -> str:
        if not self._session_id:
            raise SessionError("No open session")
        return self._session_id

    # -------------------------------------------------------------------------
    # JSON-RPC plumbing
    # -------------------------------------------------------------------------

    def _request(self, method: str, params: Dict[str, Any]) -> Any:
        """Send a JSON-RPC request and block until its reply arrives.

        Returns:
            The ``result`` member of the reply.

        Raises:
            ConnectionError: If the socket is closed or no reply arrives
                within the request timeout.
            BCIError: The mapped Cortex error if the reply carries one.
        """
        with self._lock:
            request_id = self._next_id
            self._next_id += 1
            pending = _PendingRequest(method)
            self._pending[request_id] = pending

        try:
            self._send_request(method, params, request_id)
            if not pending.done.wait(self._request_timeout):
                raise ConnectionError(
                    f"Timed out after {self._request_timeout}s waiting for '{method}'"
                )
        finally:
            with self._lock:
                self._pending.pop(request_id, None)

        response = pending.response
        if "error" in response:
            raise self._api_error(response)
        return response.get("result")

    def _send_request(
        self,
        method: str,
        params: Dict[str, Any],
        request_id: int,
    ) -> None:
        """Send a JSON-RPC request to the Cortex API."""
        if self._ws is None:
            raise ConnectionError(f"Cannot send '{method}': WebSocket not connected")

        request = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": request_id,
        }

        logger.debug(f"Sending request: {method}")
        self._ws.send(json.dumps(request))

    def _fail_pending(self, reason: str) -> None:
        """Release every waiting request with a connection error reply."""
        with self._lock:
            pending = list(self._pending.values())
        for request in pending:
            request.response = {"error": {"code": "closed", "message": reason}}
            request.done.set()

    def _api_error(self, data: Dict[str, Any]) -> BCIError:
        """Map a Cortex error reply to an exception."""
        error = data.get("error", {})
        code = error.get("code", "unknown")
        message = error.get("message", "Unknown error")

        logger.error(f"Cortex API error [{code}]: {message}")

        if code in _JSONRPC_ERRORS:
            return ConnectionError(f"API error: {message}")
        if code in _AUTH_ERRORS:
            return AuthenticationError(message)
        if code in _HEADSET_ERRORS:
            return DeviceNotFoundError(message, device_type="Emotiv")
        if code in _SESSION_ERRORS:
            return SessionError(message, session_id=self._session_id)
        if code in _STREAM_ERRORS:
            return SubscriptionError(message)
        return ConnectionError(f"Cortex error [{code}]: {message}")

    # -------------------------------------------------------------------------
    # WebSocket Event Handlers
    # -------------------------------------------------------------------------

    def _on_ws_open(self, ws: websocket.WebSocket) -> None:
        """Handle WebSocket connection opened."""
        logger.info("WebSocket connected")
        self._state = CortexState.CONNECTED
        self._opened.set()

    def _on_ws_message(self, ws: websocket.WebSocket, message: str) -> None:
        """Route a reply to its waiting request, or a stream message to listeners."""
        try:
            data = json.loads(message)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse message: {e}")
            self._handle_error(ConnectionError(f"Invalid JSON from Cortex: {e}"))
            return

        request_id = data.get("id")
        if request_id is not None:
            with self._lock:
                pending = self._pending.get(request_id)
            if pending is None:
                logger.debug("Reply for unknown request id %s", request_id)
                return
            pending.response = data
            pending.done.set()
            return

        if "warning" in data:
            warning = data["warning"]
            logger.warning(
                "Cortex warning [%s]: %s", warning.get("code"), warning.get("message")
            )
            return

        self._listeners.emit(data)

    def _on_ws_error(self, ws: websocket.WebSocket, error: Exception) -> None:
        """Handle WebSocket error, including exceptions raised by listeners."""
        logger.error(f"WebSocket error: {error}")
        self._handle_error(ConnectionError(str(error), cause=error))

    def _on_ws_close(
        self,
        ws: websocket.WebSocket,
        close_status_code: Optional[int],
        close_msg: Optional[str],
    ) -> None:
        """Handle WebSocket connection closed."""
        logger.info(f"WebSocket closed: {close_status_code} - {close_msg}")

        with self._lock:
            self._state = CortexState.DISCONNECTED

        self._fail_pending(close_msg or "Connection closed")

    def _handle_error(self, error: Exception) -> None:
        """Update state and notify the error callback."""
        self._state = CortexState.ERROR

        if self.on_error:
            self.on_error(error)
        else:
            logger.error(f"Unhandled error: {error}")
