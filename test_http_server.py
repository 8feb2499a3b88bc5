from unittest.mock import MagicMock

import anyio
import httpx
import pytest
from mcp.server.lowlevel import Server
from starlette.testclient import TestClient

from http_server import create_app
from sessions import SessionRegistry

PING = {"jsonrpc": "2.0", "id": 1, "method": "ping"}


@pytest.fixture
def registry():
    return SessionRegistry(MagicMock)


@pytest.fixture
def app(registry):
    return create_app(registry)


def test_health(app):
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "name": "movies-mcp", "version": "1.0.0"}


def test_message_for_unknown_session_is_404(app):
    client = TestClient(app)

    response = client.post("/message?sessionId=does-not-exist", json=PING)

    assert response.status_code == 404
    assert response.text == "Session not found"


def test_message_without_session_id_is_404(app):
    client = TestClient(app)

    response = client.post("/message", json=PING)

    assert response.status_code == 404


def test_message_endpoint_only_accepts_post(app):
    client = TestClient(app)

    assert client.get("/message?sessionId=x").status_code == 405


@pytest.mark.anyio
async def test_message_is_delivered_to_its_session(app, registry):
    first = registry.open()
    second = registry.open()

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        async with anyio.create_task_group() as tg:
            responses = []

            async def post():
                responses.append(await client.post(f"/message?sessionId={first.session_id}", json=PING))

            tg.start_soon(post)
            received = await first.read_stream.receive()

    assert responses[0].status_code == 202
    assert received.message.root.method == "ping"
    assert received.message.root.id == 1
    with pytest.raises(anyio.WouldBlock):
        second.read_stream.receive_nowait()


@pytest.mark.anyio
async def test_unparseable_message_is_400_and_reported_to_the_session(app, registry):
    session = registry.open()
    responses = []

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        async with anyio.create_task_group() as tg:
            async def post():
                responses.append(await client.post(f"/message?sessionId={session.session_id}", content=b"not json"))

            tg.start_soon(post)
            received = await session.read_stream.receive()

    assert responses[0].status_code == 400
    assert responses[0].text == "Could not parse message"
    assert isinstance(received, Exception)


def sse_scope():
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/sse",
        "raw_path": b"/sse",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"test"), (b"accept", b"text/event-stream")],
        "client": ("testclient", 50000),
        "server": ("test", 80),
    }


@pytest.mark.anyio
async def test_sse_announces_message_endpoint_and_closes_session_on_disconnect():
    registry = SessionRegistry(lambda: Server("movies-test"))
    app = create_app(registry)

    disconnected = anyio.Event()
    request_sent = False

    async def receive():
        nonlocal request_sent
        if not request_sent:
            request_sent = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await disconnected.wait()
        return {"type": "http.disconnect"}

    chunks_writer, chunks_reader = anyio.create_memory_object_stream(100)
    statuses = []

    async def send(message):
        if message["type"] == "http.response.start":
            statuses.append(message["status"])
        elif message["type"] == "http.response.body":
            await chunks_writer.send(message.get("body", b""))

    with anyio.fail_after(5):
        async with anyio.create_task_group() as tg:
            tg.start_soon(app, sse_scope(), receive, send)

            text = ""
            while "data:" not in text or not text.rstrip(" ").endswith(("\n\n", "\r\n\r\n")):
                text += (await chunks_reader.receive()).decode()

            assert "event: endpoint" in text
            data = next(line for line in text.splitlines() if line.startswith("data:"))[len("data:"):].strip()
            assert data.startswith("/message?sessionId=")
            session_id = data.split("=", 1)[1]
            assert session_id in registry
            assert len(registry) == 1

            disconnected.set()

    assert statuses == [200]
    assert session_id not in registry
    assert len(registry) == 0
