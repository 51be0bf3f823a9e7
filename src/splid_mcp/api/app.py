"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

from splid_mcp.app_logging import configure_logging
from splid_mcp.containers import AppContainer
from splid_mcp.domain.errors import SessionError
from splid_mcp.services.mcp_server import is_initialize_request
from splid_mcp.services.sessions import SessionManager

SESSION_HEADER = "Mcp-Session-Id"

_logger = logging.getLogger(__name__)


class McpEndpoint:
    """ASGI endpoint routing protocol traffic to per-session transports.

    A POST without a session header must carry an initialize request, which
    opens a new session. Every other request needs a live session id.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(SESSION_HEADER)

        if request.method == "POST" and not session_id:
            body = await request.body()
            if not is_initialize_request(body):
                await _no_session_response()(scope, receive, send)
                return
            session = await self.session_manager.open()
            await session.transport.handle_request(
                scope, _replay_body(body, receive), send
            )
            return

        try:
            session = self.session_manager.get(session_id)
        except SessionError:
            if request.method == "POST":
                response = _no_session_response()
            else:
                response = PlainTextResponse(
                    "Invalid or missing session ID",
                    status_code=status.HTTP_400_BAD_REQUEST,
                )
            await response(scope, receive, send)
            return

        await session.transport.handle_request(scope, receive, send)
        if request.method == "DELETE":
            await self.session_manager.close(session.session_id)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with app.state.container.session_manager.run():
            yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    @app.get("/health")
    async def health() -> dict[str, bool]:
        """Simple health check endpoint."""
        return {"ok": True}

    app.add_route(
        "/mcp",
        McpEndpoint(container.session_manager),
        methods=["GET", "POST", "DELETE"],
    )
    _logger.debug("Protocol endpoint mounted at /mcp")
    return app


def _no_session_response() -> JSONResponse:
    """Return the JSON-RPC client error for a request without a session."""
    return JSONResponse(
        {
            "jsonrpc": "2.0",
            "error": {
                "code": -32000,
                "message": "Bad Request: No valid session ID provided",
            },
            "id": None,
        },
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Return a receive callable that yields an already-read body first."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay
