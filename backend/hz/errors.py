"""
Translate Hazelcast client exceptions into actionable MCP error messages.

Callers never see a raw traceback; only the operation name and a plain
description of what went wrong.
"""

import re
from typing import Any, Callable, Optional

SERVICE_TYPES = {
    "hz:impl:mapService": "IMap",
    "hz:impl:queueService": "IQueue",
    "hz:impl:topicService": "ITopic",
    "hz:impl:reliableTopicService": "ReliableTopic",
    "hz:impl:listService": "IList",
    "hz:impl:setService": "ISet",
    "hz:impl:multiMapService": "MultiMap",
    "hz:impl:replicatedMapService": "ReplicatedMap",
    "hz:impl:ringbufferService": "Ringbuffer",
    "hz:raft:atomicLongService": "AtomicLong",
    "hz:impl:atomicLongService": "AtomicLong",
    "hz:service:vector": "VectorCollection",
}

_QUOTED_NAME = re.compile(r"'([^']*)'")


def simple_type_name(service_name: str) -> str:
    return SERVICE_TYPES.get(service_name, "Unknown")


def available_structures(
    client: Optional[Any], visible: Optional[Callable[[Any], bool]] = None
) -> str:
    """Summarize distributed objects for not-found messages."""
    if client is None:
        return "(unable to list structures)"
    try:
        objects = client.get_distributed_objects()
    except Exception:
        return "(unable to list structures)"
    if visible is not None:
        objects = [obj for obj in objects if visible(obj)]
    if not objects:
        return "(no data structures found)"
    return ", ".join(sorted(f"{obj.name} ({obj.service_name})" for obj in objects))


def _extract_name(message: str) -> str:
    match = _QUOTED_NAME.search(message)
    return match.group(1) if match else "unknown"


def translate_error(
    exc: BaseException,
    context: str,
    client: Optional[Any] = None,
    visible: Optional[Callable[[Any], bool]] = None,
) -> str:
    message = str(exc).strip() or type(exc).__name__
    type_name = type(exc).__name__
    lowered = message.lower()

    if "does not exist" in lowered or "not found" in lowered:
        return (
            f"{context}: '{_extract_name(message)}' not found. "
            f"Available data structures: {available_structures(client, visible)}"
        )

    if (
        "not connected" in lowered
        or "connection refused" in lowered
        or "target disconnected" in lowered
        or type_name in {"HazelcastClientNotActiveError", "TargetDisconnectedError", "NotConnectedError"}
    ):
        return (
            f"{context}: Not connected to Hazelcast cluster. "
            "Check that the cluster is running and the connection configuration is correct."
        )

    if "serializ" in lowered or "compact" in lowered or type_name == "HazelcastSerializationError":
        return (
            f"{context}: Serialization error - {message}. "
            "Ensure the data is stored as HazelcastJsonValue or Compact format."
        )

    if "timeout" in lowered or "timed out" in lowered or type_name.endswith("TimeoutError"):
        return f"{context}: Operation timed out. The cluster may be under heavy load."

    return f"{context}: {message}"
