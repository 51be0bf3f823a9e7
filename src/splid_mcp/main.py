"""Command-line entrypoint running the HTTP server."""

import uvicorn

from splid_mcp.config import Settings


def main() -> None:
    """Serve the ASGI app on the configured host and port."""
    settings = Settings()
    print(f"Splid MCP listening at http://localhost:{settings.port}/mcp")  # noqa: T201
    uvicorn.run("splid_mcp.api.asgi:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
