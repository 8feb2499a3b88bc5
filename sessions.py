"""
Bookkeeping for SSE sessions: session id -> server instance and message streams.

The registry is only touched from the event loop (open on GET /sse, close on
disconnect, lookups on POST /message), so it needs no lock. Guard every
method with a mutex before using it from more than one thread.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Union
from uuid import uuid4

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp.server.lowlevel import Server
from mcp.shared.message import SessionMessage

from errors import SessionNotFoundError

logger = logging.getLogger(__name__)

InboundMessage = Union[SessionMessage, Exception]


@dataclass
class Session:
    """One open SSE connection.

    The server reads client messages from ``read_stream`` and writes its
    replies to ``write_stream``; the transport feeds ``read_stream_writer``
    and drains ``write_stream_reader``.
    """

    session_id: str
    server: Server
    read_stream: MemoryObjectReceiveStream = field(repr=False)
    read_stream_writer: MemoryObjectSendStream = field(repr=False)
    write_stream: MemoryObjectSendStream = field(repr=False)
    write_stream_reader: MemoryObjectReceiveStream = field(repr=False)

    def close(self) -> None:
        # closing the inbound writer ends the server's receive loop
        self.read_stream_writer.close()
        self.read_stream.close()
        self.write_stream.close()
        self.write_stream_reader.close()


class SessionRegistry:
    def __init__(self, server_factory: Callable[[], Server]):
        self._server_factory = server_factory
        self._sessions: Dict[str, Session] = {}

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self) -> Session:
        """Create a session with a fresh server instance and a new id"""
        session_id = uuid4().hex
        while session_id in self._sessions:
            session_id = uuid4().hex

        read_stream_writer, read_stream = anyio.create_memory_object_stream[InboundMessage](0)
        write_stream, write_stream_reader = anyio.create_memory_object_stream[SessionMessage](0)
        session = Session(
            session_id=session_id,
            server=self._server_factory(),
            read_stream=read_stream,
            read_stream_writer=read_stream_writer,
            write_stream=write_stream,
            write_stream_reader=write_stream_reader,
        )
        self._sessions[session_id] = session
        logger.info("Session %s opened (%d open)", session_id, len(self._sessions))
        return session

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.close()
        logger.info("Session %s closed (%d open)", session_id, len(self._sessions))

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    async def post(self, session_id: Optional[str], payload: InboundMessage) -> None:
        """Deliver a client message to the session's server.

        Raises SessionNotFoundError if no such session is open.
        """
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        try:
            await session.read_stream_writer.send(payload)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            # the connection went away while we were waiting to deliver
            raise SessionNotFoundError(session_id)
