"""
Hazelcast client connection lifecycle: connect, health, shutdown.
"""

import logging
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

import hazelcast
from hazelcast.security import BasicTokenProvider

from server_config import ServerConfig

logger = logging.getLogger(__name__)


class NotConnectedError(RuntimeError):
    """Raised when the Hazelcast client is used before ``connect()``."""


@dataclass
class ConnectionHealth:
    connected: bool
    status: str
    member_count: int
    latency_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class HazelcastConnectionManager:
    """Owns the single Hazelcast client of this process."""

    def __init__(
        self,
        config: ServerConfig,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory or hazelcast.HazelcastClient
        self._client: Optional[Any] = None
        self._lock = threading.Lock()

    def client_options(self) -> Dict[str, Any]:
        cluster = self.config.hazelcast.cluster
        security = self.config.hazelcast.security
        options: Dict[str, Any] = {
            "cluster_name": cluster.name,
            "cluster_members": list(cluster.members),
            "cluster_connect_timeout": self.config.hazelcast.connect_timeout_seconds,
        }
        if security.username:
            options["creds_username"] = security.username
            options["creds_password"] = security.password
        elif security.token:
            options["token_provider"] = BasicTokenProvider(security.token)
        return options

    def connect(self) -> Any:
        """Connect to the cluster, reusing a running client."""
        with self._lock:
            if self._is_running(self._client):
                logger.debug("Already connected to Hazelcast cluster")
                return self._client

            cluster = self.config.hazelcast.cluster
            logger.info(
                "Connecting to Hazelcast cluster '%s' at %s",
                cluster.name,
                ", ".join(cluster.members),
            )
            self._client = self._client_factory(**self.client_options())
            logger.info("Connected to Hazelcast cluster '%s'", cluster.name)
            return self._client

    def get_client(self) -> Any:
        client = self._client
        if not self._is_running(client):
            raise NotConnectedError(
                "Not connected to Hazelcast cluster. Call connect() first."
            )
        return client

    def is_connected(self) -> bool:
        return self._is_running(self._client)

    def health(self) -> ConnectionHealth:
        if not self.is_connected():
            return ConnectionHealth(False, "DISCONNECTED", 0, -1)
        try:
            start = time.monotonic()
            member_count = len(self._client.cluster_service.get_members())
            latency_ms = int((time.monotonic() - start) * 1000)
            return ConnectionHealth(True, "CONNECTED", member_count, latency_ms)
        except Exception as exc:
            return ConnectionHealth(False, f"ERROR: {exc}", 0, -1)

    def close(self) -> None:
        with self._lock:
            if self._client is None:
                return
            logger.info("Shutting down Hazelcast client connection")
            try:
                self._client.shutdown()
            except Exception as exc:
                logger.warning("Error during Hazelcast client shutdown: %s", exc)
            self._client = None

    @staticmethod
    def _is_running(client: Optional[Any]) -> bool:
        if client is None:
            return False
        try:
            return bool(client.lifecycle_service.is_running())
        except Exception:
            return False

