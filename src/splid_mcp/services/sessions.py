"""Session tracking for protocol clients."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Protocol
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport

from splid_mcp.domain.errors import SessionError

_logger = logging.getLogger(__name__)


@dataclass
class Session:
    """A live client session and the transport serving it."""

    session_id: str
    transport: StreamableHTTPServerTransport


class SessionStore(Protocol):
    """Key-value store of live sessions."""

    def get(self, session_id: str) -> Session | None:
        """Return a session if present."""

    def add(self, session: Session) -> None:
        """Register a session under its id."""

    def remove(self, session_id: str) -> Session | None:
        """Remove and return a session, if present."""

    def __contains__(self, session_id: object) -> bool:
        """Return true when a session id is registered."""


@dataclass
class InMemorySessionStore(SessionStore):
    """Process-local session store for a single event loop."""

    _sessions: dict[str, Session]

    def __init__(self) -> None:
        self._sessions = {}

    def get(self, session_id: str) -> Session | None:
        """Return a session if present."""
        return self._sessions.get(session_id)

    def add(self, session: Session) -> None:
        """Register a session under its id."""
        self._sessions[session.session_id] = session

    def remove(self, session_id: str) -> Session | None:
        """Remove and return a session, if present."""
        return self._sessions.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


@dataclass
class SessionManager:
    """Open, look up and close client sessions.

    Each session gets its own transport and server instance, run as a task in
    the group entered by ``run()``.
    """

    store: SessionStore
    server_factory: Callable[[], Server]
    _task_group: TaskGroup | None = field(default=None, init=False, repr=False)

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Keep session servers running until the context exits."""
        async with anyio.create_task_group() as task_group:
            self._task_group = task_group
            try:
                yield
            finally:
                task_group.cancel_scope.cancel()
                self._task_group = None

    def get(self, session_id: str | None) -> Session:
        """Return a live session or raise SessionError."""
        session = self.store.get(session_id) if session_id else None
        if session is None:
            raise SessionError("No valid session ID provided")
        return session

    async def open(self) -> Session:
        """Register a new session and start its server."""
        if self._task_group is None:
            raise RuntimeError("Session manager is not running")
        session_id = self._new_session_id()
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id, is_json_response_enabled=True
        )
        session = Session(session_id=session_id, transport=transport)
        self.store.add(session)
        await self._task_group.start(self._serve, session)
        _logger.info("Session opened: %s", session_id)
        return session

    async def close(self, session_id: str) -> None:
        """Close a session; closing an unknown id is a no-op."""
        session = self.store.remove(session_id)
        if session is None:
            return
        if not session.transport.is_terminated:
            await session.transport.terminate()
        _logger.info("Session closed: %s", session_id)

    async def _serve(
        self,
        session: Session,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        server = self.server_factory()
        try:
            async with session.transport.connect() as (read_stream, write_stream):
                task_status.started()
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                    stateless=False,
                )
        except Exception:
            _logger.exception("Session %s crashed", session.session_id)
        finally:
            self.store.remove(session.session_id)

    def _new_session_id(self) -> str:
        session_id = str(uuid4())
        while session_id in self.store:
            session_id = str(uuid4())
        return session_id
