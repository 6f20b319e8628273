"""
MCP tool, resource and prompt definitions, grouped by data structure.
"""

from . import (
    atomic_tools,
    cluster,
    collection_tools,
    map_tools,
    multimap_tools,
    prompts,
    queue_tools,
    ringbuffer_tools,
    sql_tools,
    topic_tools,
    vector_tools,
)

ALL_TOOLS = (
    map_tools.TOOLS
    + queue_tools.TOOLS
    + collection_tools.TOOLS
    + multimap_tools.TOOLS
    + atomic_tools.TOOLS
    + topic_tools.TOOLS
    + ringbuffer_tools.TOOLS
    + vector_tools.TOOLS
    + sql_tools.TOOLS
    + cluster.TOOLS
)

RESOURCES = cluster.RESOURCES

PROMPTS = prompts.PROMPTS

__all__ = ["ALL_TOOLS", "PROMPTS", "RESOURCES"]
