import logging
import os
import sys
from typing import Any, Optional

import uvicorn
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.types import ASGIApp

# Ensure we can import from backend dir
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from runtime_state import runtime_state

logger = logging.getLogger(__name__)


async def _health(request: Request) -> JSONResponse:
    health = runtime_state.connection.health()
    status_code = 200 if health.connected else 503
    return JSONResponse(status_code=status_code, content=health.to_dict())


def create_sse_app(server: Optional[Any] = None) -> ASGIApp:
    """SSE app for ``server`` (the FastMCP instance) plus a ``/health`` probe."""
    if server is None:
        from mcp_server import mcp as server
    app = server.sse_app("/sse")
    app.router.routes.append(Route("/health", _health, methods=["GET"]))
    return app


def serve(server: Optional[Any] = None) -> None:
    app = create_sse_app(server)

    http = runtime_state.config.mcp.server.http
    host = http.host
    port = int(http.port)

    logger.info("Starting SSE Server on http://%s:%s", host, port)
    logger.info("SSE Endpoint: http://%s:%s/sse", host, port)

    uvicorn.run(app, host=host, port=port)


def main():
    """
    Run the Hazelcast MCP server using SSE (Server-Sent Events) transport.
    This is required for clients that don't support stdio (like some web-based tools).
    """
    from mcp_server import configure_logging, startup

    configure_logging()
    logger.info("Initializing Hazelcast MCP SSE Server...")
    startup()
    try:
        serve()
    finally:
        runtime_state.shutdown()


if __name__ == "__main__":
    main()
