import asyncio
import json
import os
import threading
import time

import pytest
import websockets

from cortexevents.core.engine import watch_events
from cortexevents.core.events import StateSnapshot
from cortexevents.core.exceptions import AuthenticationError
from cortexevents.sources.emotiv import CortexClient, CortexCredentials, CortexState

# ====================================================================
#     FAKE CORTEX SERVER
# ====================================================================

FAC_COLS = ["eyeAct", "uAct", "uPow", "lAct", "lPow"]

RESULTS = {
    "requestAccess": {"accessGranted": True, "message": "approved"},
    "authorize": {"cortexToken": "FAKE_TOKEN"},
    "queryHeadsets": [{"id": "INSIGHT-FAKE", "status": "connected"}],
    "createSession": {"id": "fake-session", "status": "opened"},
    "subscribe": {
        "success": [
            {"streamName": "com", "cols": ["act", "pow"], "sid": "fake-session"},
            {"streamName": "fac", "cols": FAC_COLS, "sid": "fake-session"},
        ],
        "failure": [],
    },
    "unsubscribe": {"success": [], "failure": []},
    "updateSession": {"id": "fake-session", "status": "closed"},
}

# Sent after a "playback" request
STREAM_MESSAGES = [
    {"com": ["push", 0.2], "sid": "fake-session", "time": 1.0},
    {"com": ["push", 0.7], "sid": "fake-session", "time": 1.1},
    {"fac": ["lookL", "frown", 0.9, "smile", 0.1], "sid": "fake-session", "time": 1.2},
    {"fac": ["lookL", "frown", 0.9, "smile", 0.1], "sid": "fake-session", "time": 1.3},
]


async def fake_cortex_server(websocket, path=None):
    """
    Simulates the Cortex JSON-RPC service.
    Answers every known method and streams samples on "playback".
    """
    async for msg in websocket:
        data = json.loads(msg)
        method = data.get("method")
        mid = data.get("id")

        if method == "authorize" and data["params"].get("clientId") == "bad":
            await websocket.send(json.dumps({
                "id": mid,
                "error": {"code": -32021, "message": "Invalid client credentials"},
            }))

        elif method == "playback":
            await websocket.send(json.dumps({"id": mid, "result": "ok"}))
            for message in STREAM_MESSAGES:
                await websocket.send(json.dumps(message))

        else:
            await websocket.send(json.dumps({"id": mid, "result": RESULTS.get(method)}))


@pytest.fixture(scope="module")
def fake_server():
    """Starts the fake server on a free port and returns its URL."""
    ready = threading.Event()
    address = {}

    def run():
        async def serve():
            async with websockets.serve(fake_cortex_server, "127.0.0.1", 0) as server:
                address["port"] = server.sockets[0].getsockname()[1]
                ready.set()
                await asyncio.Future()

        asyncio.run(serve())

    threading.Thread(target=run, daemon=True).start()
    assert ready.wait(5), "Fake Cortex server did not start"
    return f"ws://127.0.0.1:{address['port']}"


def make_client(url, client_id="fake-id"):
    credentials = CortexCredentials(client_id=client_id, client_secret="fake-secret")
    return CortexClient(credentials, url=url, request_timeout=3.0)

# ====================================================================
#     UNIT TESTS (FAKE SERVER)
# ====================================================================

@pytest.mark.unit
def test_connect_and_init(fake_server):
    client = make_client(fake_server)

    client.connect()
    try:
        client.init()
        assert client.state is CortexState.READY
        assert client.headset_id == "INSIGHT-FAKE"
    finally:
        client.disconnect()

    assert client.state is CortexState.DISCONNECTED


@pytest.mark.unit
def test_bad_credentials(fake_server):
    client = make_client(fake_server, client_id="bad")

    client.connect()
    try:
        with pytest.raises(AuthenticationError):
            client.init()
    finally:
        client.disconnect()


@pytest.mark.unit
def test_watch_events_end_to_end(fake_server):
    client = make_client(fake_server)
    results = []

    client.connect()
    try:
        client.init()
        stop = watch_events(client, 0.5, results.append)

        client._request("playback", {})

        timeout = time.time() + 3
        while len(results) < 2 and time.time() < timeout:
            time.sleep(0.05)

        stop()
        assert client.session_id is None
    finally:
        client.disconnect()

    assert results == [
        StateSnapshot(command="push"),
        StateSnapshot(command="push", eyes="lookL", brows="frown", mouth="neutral"),
    ]


@pytest.mark.unit
def test_disconnect_twice(fake_server):
    client = make_client(fake_server)
    client.connect()
    client.disconnect()
    client.disconnect()
    assert client.state is CortexState.DISCONNECTED

# ====================================================================
#     TESTS AGAINST A REAL EMOTIV CORTEX (SKIPPED WITHOUT THE SERVICE)
# ====================================================================

CLIENT_ID = os.getenv("EMOTIV_CLIENT_ID")
CLIENT_SECRET = os.getenv("EMOTIV_CLIENT_SECRET")
EMOTIV_URL = "wss://127.0.0.1:6868"


def emotiv_is_running():
    """Quick check: try to open a socket; if it fails, there is no service."""
    try:
        import websocket
        ws = websocket.create_connection(EMOTIV_URL, timeout=1, sslopt={"cert_reqs": 0})
        ws.close()
        return True
    except Exception:
        return False


@pytest.mark.integration
def test_real_cortex_init():
    if not (CLIENT_ID and CLIENT_SECRET):
        pytest.skip("EMOTIV_CLIENT_ID and EMOTIV_CLIENT_SECRET are not set")

    if not emotiv_is_running():
        pytest.skip("Emotiv Cortex is not running")

    client = CortexClient(
        CortexCredentials(client_id=CLIENT_ID, client_secret=CLIENT_SECRET),
        url=EMOTIV_URL,
    )
    client.connect()
    try:
        client.init()
        assert client.headset_id
    finally:
        client.disconnect()
