"""ASGI entrypoint for the Splid MCP API."""

from splid_mcp.api.app import create_app
from splid_mcp.containers import build_container

app = create_app(build_container())
