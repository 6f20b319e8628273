"""
Process-wide runtime state for the Hazelcast MCP server.

This module provides:
1) Configuration, access policy and Hazelcast connection, created on first use.
2) The value bridge and the vector capability (resolved once per process).
3) Tool-call tracking for the ``server_status`` tool.
"""

from __future__ import annotations

import asyncio
import os
import threading
from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional

from access_control import AccessController
from bridge import (
    StubVectorCapability,
    ValueBridge,
    VectorCapability,
    create_vector_capability,
    get_value_bridge,
)
from hz import HazelcastConnectionManager
from server_config import ServerConfig, load_config


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(minimum, int(raw))
    except (TypeError, ValueError):
        return default


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class ToolCallEvent:
    timestamp: str
    tool: str
    ok: bool
    denied: bool
    error: str


class ToolCallTracker:
    """In-process observability tracker for tool outcomes."""

    def __init__(self) -> None:
        self._max_events = _env_int("HAZELCAST_MCP_TOOL_EVENT_LIMIT", 300, minimum=50)
        self._events: Deque[ToolCallEvent] = deque(maxlen=self._max_events)
        self._guard = asyncio.Lock()

    async def record_event(
        self,
        *,
        tool: str,
        ok: bool,
        denied: bool = False,
        error: Optional[str] = None,
    ) -> None:
        event = ToolCallEvent(
            timestamp=_utc_iso_now(),
            tool=(tool or "unknown").strip() or "unknown",
            ok=bool(ok),
            denied=bool(denied),
            error=(error or "").strip(),
        )
        async with self._guard:
            self._events.append(event)

    async def summary(self) -> Dict[str, Any]:
        async with self._guard:
            snapshot = list(self._events)

        if not snapshot:
            return {
                "window_size": self._max_events,
                "total_calls": 0,
                "failed_calls": 0,
                "denied_calls": 0,
                "tool_breakdown": {},
                "top_errors": [],
                "last_call_at": None,
            }

        tool_counter = Counter(item.tool for item in snapshot)
        error_counter = Counter(item.error for item in snapshot if item.error)

        return {
            "window_size": self._max_events,
            "total_calls": len(snapshot),
            "failed_calls": sum(1 for item in snapshot if not item.ok),
            "denied_calls": sum(1 for item in snapshot if item.denied),
            "tool_breakdown": dict(tool_counter),
            "top_errors": [
                {"error": error, "count": count}
                for error, count in error_counter.most_common(5)
            ],
            "last_call_at": snapshot[-1].timestamp,
        }


class RuntimeState:
    """
    Lazily-built collaborators shared by every tool.

    ``configure`` replaces the configuration (and everything derived from it);
    tests use it to install fakes.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._config: Optional[ServerConfig] = None
        self._access: Optional[AccessController] = None
        self._connection: Optional[HazelcastConnectionManager] = None
        self._vector: Optional[VectorCapability] = None
        self.bridge: ValueBridge = get_value_bridge()
        self.tool_calls = ToolCallTracker()

    def configure(
        self,
        config: Optional[ServerConfig] = None,
        *,
        connection: Optional[HazelcastConnectionManager] = None,
        vector: Optional[VectorCapability] = None,
    ) -> None:
        with self._lock:
            self._config = config
            self._access = AccessController(config.access) if config is not None else None
            self._connection = connection
            self._vector = vector

    @property
    def config(self) -> ServerConfig:
        with self._lock:
            if self._config is None:
                self._config = load_config()
            return self._config

    @property
    def access(self) -> AccessController:
        config = self.config
        with self._lock:
            if self._access is None:
                self._access = AccessController(config.access)
            return self._access

    @property
    def connection(self) -> HazelcastConnectionManager:
        config = self.config
        with self._lock:
            if self._connection is None:
                self._connection = HazelcastConnectionManager(config)
            return self._connection

    def get_client(self) -> Any:
        """Return the connected client, connecting on first use."""
        connection = self.connection
        if not connection.is_connected():
            connection.connect()
        return connection.get_client()

    def current_client(self) -> Optional[Any]:
        """Return the client if already connected, without connecting."""
        connection = self.connection
        return connection.get_client() if connection.is_connected() else None

    @property
    def vector(self) -> VectorCapability:
        """Vector capability; the module probe runs only on first access."""
        with self._lock:
            if self._vector is None:
                self._vector = create_vector_capability(self.get_client, bridge=self.bridge)
            return self._vector

    def vector_available(self) -> Optional[bool]:
        """None until the capability has been resolved."""
        with self._lock:
            vector = self._vector
        if vector is None:
            return None
        return not isinstance(vector, StubVectorCapability)

    def startup(self) -> None:
        """Connect and resolve the vector capability before serving calls."""
        self.get_client()
        _ = self.vector

    def shutdown(self) -> None:
        with self._lock:
            connection = self._connection
        if connection is not None:
            connection.close()

    def status(self) -> Dict[str, Any]:
        config = self.config
        connection = self.connection
        return {
            "server": config.mcp.server.name,
            "version": config.mcp.server.version,
            "transport": config.mcp.server.transport,
            "cluster": config.hazelcast.cluster.name,
            "members": list(config.hazelcast.cluster.members),
            "access_mode": config.access.mode,
            "write_allowed": config.access.operations.write,
            "clear_allowed": config.access.operations.clear,
            "connection": connection.health().to_dict(),
        }


runtime_state = RuntimeState()
