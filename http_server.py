"""
HTTP + SSE transport.

GET /sse opens a session and streams the server's messages back as events;
the first event tells the client where to POST its own messages.
"""
import logging
from typing import Any, Dict
from urllib.parse import quote

import anyio
import mcp.types as types
from mcp.shared.message import ServerMessageMetadata, SessionMessage
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from config import SERVER_NAME, SERVER_VERSION
from errors import SessionNotFoundError
from sessions import SessionRegistry

logger = logging.getLogger(__name__)

MESSAGE_PATH = "/message"


class SseEndpoint:
    """ASGI app behind GET /sse; lives as long as the client stays connected"""

    def __init__(self, registry: SessionRegistry, message_path: str = MESSAGE_PATH):
        self.registry = registry
        self.message_path = message_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        session = self.registry.open()
        root_path = scope.get("root_path", "").rstrip("/")
        endpoint = f"{quote(root_path + self.message_path)}?sessionId={session.session_id}"

        sse_stream_writer, sse_stream_reader = anyio.create_memory_object_stream[Dict[str, Any]](0)

        async def sse_writer():
            async with sse_stream_writer, session.write_stream_reader:
                await sse_stream_writer.send({"event": "endpoint", "data": endpoint})
                async for session_message in session.write_stream_reader:
                    await sse_stream_writer.send({
                        "event": "message",
                        "data": session_message.message.model_dump_json(by_alias=True, exclude_none=True),
                    })

        async def run_server():
            server = session.server
            await server.run(session.read_stream, session.write_stream, server.create_initialization_options())

        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(run_server)
                response = EventSourceResponse(content=sse_stream_reader, data_sender_callable=sse_writer)
                await response(scope, receive, send)
                # client disconnected; upstream calls already running in
                # worker threads finish on their own and are discarded
                tg.cancel_scope.cancel()
        finally:
            self.registry.close(session.session_id)


class MessageEndpoint:
    """ASGI app behind POST /message?sessionId=..."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.query_params.get("sessionId")

        if session_id not in self.registry:
            logger.info("Message for unknown session %s", session_id)
            response = PlainTextResponse("Session not found", status_code=404)
            await response(scope, receive, send)
            return

        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as err:
            logger.warning("Could not parse message for session %s: %s", session_id, err)
            response = PlainTextResponse("Could not parse message", status_code=400)
            await response(scope, receive, send)
            await self._deliver(session_id, err)
            return

        session_message = SessionMessage(message, metadata=ServerMessageMetadata(request_context=request))
        response = PlainTextResponse("Accepted", status_code=202)
        await response(scope, receive, send)
        await self._deliver(session_id, session_message)

    async def _deliver(self, session_id: str, payload) -> None:
        try:
            await self.registry.post(session_id, payload)
        except SessionNotFoundError:
            logger.info("Session %s closed before its message was delivered", session_id)


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "name": SERVER_NAME, "version": SERVER_VERSION})


def create_app(registry: SessionRegistry) -> Starlette:
    return Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/sse", SseEndpoint(registry), methods=["GET"]),
            Route(MESSAGE_PATH, MessageEndpoint(registry), methods=["POST"]),
        ],
        middleware=[
            Middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]),
        ],
    )
