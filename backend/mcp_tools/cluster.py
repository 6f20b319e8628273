"""
Cluster resources and the ``server_status`` tool.
"""

import asyncio
import logging
from typing import Any, Dict, List

from hz import simple_type_name
from runtime_state import runtime_state

from .common import _to_json

logger = logging.getLogger(__name__)


def _member_info(member: Any) -> Dict[str, Any]:
    return {
        "address": str(getattr(member, "address", "")),
        "uuid": str(getattr(member, "uuid", "")),
        "liteMember": bool(getattr(member, "lite_member", False)),
    }


def _cluster_info() -> Dict[str, Any]:
    client = runtime_state.get_client()
    members = list(client.cluster_service.get_members())
    return {
        "clusterName": runtime_state.config.hazelcast.cluster.name,
        "memberCount": len(members),
        "members": [_member_info(member) for member in members],
        "connected": True,
    }


def _structure_size(client: Any, obj: Any) -> Any:
    if obj.service_name != "hz:impl:mapService":
        return None
    try:
        return client.get_map(obj.name).blocking().size()
    except Exception as exc:
        logger.debug("Could not size map '%s': %s", obj.name, exc)
        return "unknown"


def _structures() -> Dict[str, Any]:
    client = runtime_state.get_client()
    access = runtime_state.access
    structures: List[Dict[str, Any]] = []
    for obj in client.get_distributed_objects():
        if not access.is_visible(obj.service_name, obj.name):
            continue
        entry: Dict[str, Any] = {
            "name": obj.name,
            "serviceName": obj.service_name,
            "type": simple_type_name(obj.service_name),
        }
        size = _structure_size(client, obj)
        if size is not None:
            entry["size"] = size
        structures.append(entry)
    structures.sort(key=lambda item: (item["type"], item["name"]))
    return {"totalStructures": len(structures), "structures": structures}


async def cluster_info() -> str:
    """Hazelcast cluster name, member count, members and connection state."""
    try:
        return _to_json(await asyncio.to_thread(_cluster_info))
    except Exception as exc:
        logger.warning("cluster info resource failed: %s", exc)
        return _to_json({"connected": False, "error": str(exc)})


async def cluster_health() -> str:
    """Connection status, member count and response latency."""
    try:
        health = await asyncio.to_thread(runtime_state.connection.health)
        return _to_json(
            {
                "status": health.status,
                "connected": health.connected,
                "memberCount": health.member_count,
                "latencyMs": health.latency_ms,
            }
        )
    except Exception as exc:
        logger.warning("cluster health resource failed: %s", exc)
        return _to_json({"status": "ERROR", "connected": False, "error": str(exc)})


async def structures_list() -> str:
    """All distributed objects on the cluster with type (and size for maps)."""
    try:
        return _to_json(await asyncio.to_thread(_structures))
    except Exception as exc:
        logger.warning("structures resource failed: %s", exc)
        return _to_json({"error": str(exc)})


async def server_status() -> str:
    """
    Report server configuration, connection health, vector availability and
    a summary of recent tool calls.
    """
    status = await asyncio.to_thread(runtime_state.status)
    status["vector_available"] = runtime_state.vector_available()
    status["tool_calls"] = await runtime_state.tool_calls.summary()
    return _to_json({"ok": True, **status})


RESOURCES = [
    (
        "hazelcast://cluster/info",
        "Cluster Info",
        "Hazelcast cluster name, member count, members and connection state",
        cluster_info,
    ),
    (
        "hazelcast://cluster/health",
        "Cluster Health",
        "Health check showing connection status, member count and response latency",
        cluster_health,
    ),
    (
        "hazelcast://structures/list",
        "Data Structures",
        "List of all distributed objects in the cluster with type and size",
        structures_list,
    ),
]

TOOLS = [server_status]
