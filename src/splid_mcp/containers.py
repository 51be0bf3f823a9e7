"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from splid_mcp.adapters.splid_client import HttpxSplidClient
from splid_mcp.config import Settings
from splid_mcp.services.groups import GroupService, SplidGroupService
from splid_mcp.services.mcp_server import build_mcp_server
from splid_mcp.services.sessions import InMemorySessionStore, SessionManager
from splid_mcp.services.tools import ToolRegistry, build_tool_registry


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    group_service: GroupService
    tool_registry: ToolRegistry
    session_manager: SessionManager
    close_resources: Callable[[], Awaitable[None]]


def build_session_manager(registry: ToolRegistry) -> SessionManager:
    """Create a session manager whose sessions share one tool registry."""
    return SessionManager(
        store=InMemorySessionStore(),
        server_factory=lambda: build_mcp_server(registry),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    splid_client = HttpxSplidClient.create(
        app_id=resolved_settings.splid_app_id,
        client_key=resolved_settings.splid_client_key,
        base_url=resolved_settings.splid_base_url,
    )
    group_service = SplidGroupService(
        client=splid_client, default_code=resolved_settings.splid_code
    )
    registry = build_tool_registry(group_service)

    async def close_resources() -> None:
        await splid_client.close()

    return AppContainer(
        settings=resolved_settings,
        group_service=group_service,
        tool_registry=registry,
        session_manager=build_session_manager(registry),
        close_resources=close_resources,
    )
