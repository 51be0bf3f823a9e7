"""MCP server exposing the tool registry."""

import logging
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from pydantic import ValidationError

from splid_mcp.domain.errors import ClientInputError, ToolError, UnknownTool
from splid_mcp.services.tools import ToolRegistry

SERVER_NAME = "splid-mcp"
SERVER_VERSION = "0.1.0"

_logger = logging.getLogger(__name__)


def is_initialize_request(body: bytes) -> bool:
    """Return true when a raw request body is a single initialize request."""
    try:
        message = types.JSONRPCMessage.model_validate_json(body)
    except ValidationError:
        return False
    root = message.root
    return isinstance(root, types.JSONRPCRequest) and root.method == "initialize"


def build_mcp_server(registry: ToolRegistry) -> Server:
    """Create a server whose tools are served from the registry.

    Anything raised while calling a tool is answered as an error result on
    that call, so the session stays usable.
    """
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return registry.describe()

    # Arguments are validated by the registry's pydantic models.
    @server.call_tool(validate_input=False)
    async def call_tool(
        name: str, arguments: dict[str, Any]
    ) -> list[types.TextContent]:
        try:
            result = await registry.call(name, arguments)
        except (ClientInputError, UnknownTool) as exc:
            _logger.warning("Rejected call to %s: %s", name, exc)
            raise
        except Exception:
            _logger.exception("Tool %s failed", name)
            raise
        if result.is_error:
            raise ToolError(result.text)
        return [types.TextContent(type="text", text=result.text)]

    return server
