"""
MCP Server for Hazelcast

This module exposes Hazelcast distributed data structures to MCP clients:
maps, queues, lists, sets, multimaps, topics, ringbuffers, CP atomics and
(when the installed client provides it) vector collections.

Values cross the boundary through the value bridge:
- writes are stored as HazelcastJsonValue so any client can read them
- reads of JSON values, Compact records and primitives come back as JSON
- anything else comes back as a structured diagnostic, never an exception
"""

import logging
import os
import sys

from dotenv import find_dotenv, load_dotenv

# Ensure we can import from backend modules
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from mcp.server.fastmcp import FastMCP
from mcp_tools import ALL_TOOLS, PROMPTS, RESOURCES
from runtime_state import runtime_state

# Load environment variables
# Explicitly look for .env in the parent directory (project root)
current_dir = os.path.dirname(os.path.abspath(__file__))
root_dir = os.path.dirname(current_dir)
dotenv_path = os.path.join(root_dir, ".env")

if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
else:
    # Fallback to find_dotenv
    _dotenv_path = find_dotenv(usecwd=True)
    if _dotenv_path:
        load_dotenv(_dotenv_path)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("Hazelcast MCP Server")

# =============================================================================
# MCP Tools
# =============================================================================

for _tool in ALL_TOOLS:
    mcp.tool()(_tool)

# =============================================================================
# MCP Resources
# =============================================================================

for _uri, _name, _description, _reader in RESOURCES:
    mcp.resource(_uri, name=_name, description=_description, mime_type="application/json")(
        _reader
    )

# =============================================================================
# MCP Prompts
# =============================================================================

for _prompt_name, _prompt_description, _template in PROMPTS:
    mcp.prompt(name=_prompt_name, description=_prompt_description)(_template)


# =============================================================================
# Startup
# =============================================================================


def configure_logging() -> None:
    """Log to stderr; stdout carries the stdio protocol."""
    level_name = str(os.getenv("HAZELCAST_MCP_LOG_LEVEL") or "INFO").strip().upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def startup() -> None:
    """Connect to the cluster and resolve the vector capability."""
    config = runtime_state.config
    logger.info(
        "Starting %s v%s (transport: %s, access mode: %s)",
        config.mcp.server.name,
        config.mcp.server.version,
        config.mcp.server.transport,
        config.access.mode,
    )
    runtime_state.startup()


def main() -> None:
    configure_logging()
    startup()
    try:
        if runtime_state.config.mcp.server.transport == "sse":
            from run_sse import serve

            serve(mcp)
        else:
            mcp.run()
    finally:
        runtime_state.shutdown()


if __name__ == "__main__":
    main()
