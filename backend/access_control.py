"""
Allow/deny policy for data structures and operation classes.
"""

from typing import List

from server_config import AccessConfig, StructureLists

CONFIG_FILE_HINT = "hazelcast-mcp.yaml"

STRUCTURE_KINDS = (
    "map",
    "vector",
    "queue",
    "list",
    "set",
    "multimap",
    "topic",
    "ringbuffer",
    "atomic",
)

_LIST_FIELDS = {
    "map": "maps",
    "vector": "vectors",
    "queue": "queues",
    "list": "lists",
    "set": "sets",
    "multimap": "multimaps",
    "topic": "topics",
    "ringbuffer": "ringbuffers",
    "atomic": "atomics",
}

SERVICE_KINDS = {
    "hz:impl:mapService": "map",
    "hz:impl:queueService": "queue",
    "hz:impl:topicService": "topic",
    "hz:impl:reliableTopicService": "topic",
    "hz:impl:listService": "list",
    "hz:impl:setService": "set",
    "hz:impl:multiMapService": "multimap",
    "hz:impl:ringbufferService": "ringbuffer",
    "hz:raft:atomicLongService": "atomic",
    "hz:impl:atomicLongService": "atomic",
    "hz:service:vector": "vector",
}

# Vector collections can only be restricted through the allowlist.
_DENYLIST_KINDS = set(STRUCTURE_KINDS) - {"vector"}

WRITE_OPERATIONS = {
    "put",
    "delete",
    "clear",
    "put_all",
    "put_if_absent",
    "replace",
    "offer",
    "poll",
    "drain",
    "add",
    "remove",
    "publish",
    "set",
    "increment",
    "decrement",
    "compare_and_set",
}


class AccessController:
    """Enforces the access section of the server configuration."""

    def __init__(self, access_config: AccessConfig) -> None:
        self.config = access_config

    def is_accessible(self, kind: str, name: str) -> bool:
        mode = (self.config.mode or "all").lower()

        if mode == "allowlist":
            allowed = self._names(self.config.allowlist, kind)
            return not allowed or name in allowed

        if mode == "denylist":
            if kind not in _DENYLIST_KINDS:
                return True
            return name not in self._names(self.config.denylist, kind)

        return True

    def is_visible(self, service_name: str, name: str) -> bool:
        """Whether a distributed object may appear in structure listings."""
        kind = SERVICE_KINDS.get(service_name)
        return kind is None or self.is_accessible(kind, name)

    def is_write_allowed(self) -> bool:
        return self.config.operations.write

    def is_sql_allowed(self) -> bool:
        return self.config.operations.sql

    def is_clear_allowed(self) -> bool:
        return self.config.operations.clear

    @staticmethod
    def is_write_operation(operation: str) -> bool:
        return operation in WRITE_OPERATIONS

    def denial_message(self, operation: str, structure_name: str) -> str:
        """Human-readable explanation of why an operation was refused."""
        if not self.is_write_allowed() and self.is_write_operation(operation):
            return (
                "Write operations are disabled in the server configuration. "
                f"Set 'access.operations.write: true' in {CONFIG_FILE_HINT} to enable writes."
            )
        if not self.is_sql_allowed() and operation == "sql":
            return (
                "SQL operations are disabled in the server configuration. "
                f"Set 'access.operations.sql: true' in {CONFIG_FILE_HINT} to enable SQL."
            )
        if not self.is_clear_allowed() and operation == "clear":
            return (
                "Destructive operations (clear) are disabled by default for safety. "
                f"Set 'access.operations.clear: true' in {CONFIG_FILE_HINT} to enable."
            )
        return (
            f"Access denied to '{structure_name}'. "
            f"Check the access control configuration in {CONFIG_FILE_HINT}."
        )

    @staticmethod
    def _names(lists: StructureLists, kind: str) -> List[str]:
        field_name = _LIST_FIELDS.get(kind)
        if field_name is None:
            return []
        return list(getattr(lists, field_name))
