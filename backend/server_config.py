"""
Configuration for the Hazelcast MCP Server.

Loaded from ``hazelcast-mcp.yaml`` (or the file named by
``HAZELCAST_MCP_CONFIG``), then overridden by ``HAZELCAST_MCP_*`` environment
variables. A ``.env`` file in the project root is honoured.

Example::

    hazelcast:
      cluster:
        name: dev
        members: ["127.0.0.1:5701"]
    access:
      mode: allowlist            # all | allowlist | denylist
      allowlist:
        maps: [customers]
      operations:
        write: true
        clear: false
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "hazelcast-mcp.yaml"
CONFIG_PATH_ENV = "HAZELCAST_MCP_CONFIG"
ENV_PREFIX = "HAZELCAST_MCP_"

ACCESS_MODES = {"all", "allowlist", "denylist"}
TRANSPORTS = {"stdio", "sse"}


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _string_list(value: Any) -> Any:
    """Accept ``a, b`` strings and strip list entries; anything else is left to validation."""
    if value is None:
        return []
    if isinstance(value, str):
        return _split_csv(value)
    if isinstance(value, list):
        items = [item.strip() if isinstance(item, str) else item for item in value]
        return [item for item in items if item != ""]
    return value


class _ConfigSection(BaseModel):
    # Unknown keys are reported; env overrides are validated on assignment.
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class ClusterConfig(_ConfigSection):
    name: str = "dev"
    members: List[str] = Field(default_factory=lambda: ["127.0.0.1:5701"])

    @field_validator("members", mode="before")
    @classmethod
    def _members(cls, value: Any) -> Any:
        return _string_list(value)


class SecurityConfig(_ConfigSection):
    username: str = ""
    password: str = ""
    token: str = ""


class HazelcastConfig(_ConfigSection):
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    connect_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias=AliasChoices("connect_timeout_seconds", "connectTimeoutSeconds"),
    )


class HttpConfig(_ConfigSection):
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=0, le=65535)


class ServerInfo(_ConfigSection):
    name: str = "hazelcast-mcp-server"
    version: str = "1.0.0"
    transport: str = "stdio"
    http: HttpConfig = Field(default_factory=HttpConfig)

    @field_validator("transport", mode="before")
    @classmethod
    def _transport(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        transport = value.strip().lower()
        if transport == "http":
            return "sse"
        if transport not in TRANSPORTS:
            logger.warning("Unknown transport '%s'; falling back to stdio", transport)
            return "stdio"
        return transport


class McpConfig(_ConfigSection):
    server: ServerInfo = Field(default_factory=ServerInfo)


class StructureLists(_ConfigSection):
    maps: List[str] = Field(default_factory=list)
    queues: List[str] = Field(default_factory=list)
    vectors: List[str] = Field(default_factory=list)
    lists: List[str] = Field(default_factory=list)
    sets: List[str] = Field(default_factory=list)
    multimaps: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    ringbuffers: List[str] = Field(default_factory=list)
    atomics: List[str] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _names(cls, value: Any) -> Any:
        return _string_list(value)


class OperationsConfig(_ConfigSection):
    sql: bool = True
    write: bool = True
    # Destructive operations are off unless explicitly enabled.
    clear: bool = False


class AccessConfig(_ConfigSection):
    mode: str = "all"
    allowlist: StructureLists = Field(default_factory=StructureLists)
    denylist: StructureLists = Field(default_factory=StructureLists)
    operations: OperationsConfig = Field(default_factory=OperationsConfig)

    @field_validator("mode", mode="before")
    @classmethod
    def _mode(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        mode = value.strip().lower()
        if mode not in ACCESS_MODES:
            logger.warning("Unknown access mode '%s'; all structures are accessible", mode)
        return mode


class ServerConfig(_ConfigSection):
    hazelcast: HazelcastConfig = Field(default_factory=HazelcastConfig)
    mcp: McpConfig = Field(default_factory=McpConfig)
    access: AccessConfig = Field(default_factory=AccessConfig)


def config_from_dict(data: Optional[Dict[str, Any]]) -> ServerConfig:
    """Validate a raw config mapping; raises ``pydantic.ValidationError`` naming the bad field."""
    return ServerConfig.model_validate(data or {})


# =============================================================================
# Loading
# =============================================================================


def _load_dotenv() -> None:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)


def _resolve_config_path(config_path: Optional[str]) -> Path:
    if config_path:
        return Path(config_path)
    from_env = os.getenv(CONFIG_PATH_ENV, "").strip()
    if from_env:
        return Path(from_env)
    return Path(DEFAULT_CONFIG_FILE)


def _read_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def apply_env_overrides(config: ServerConfig) -> ServerConfig:
    def _env(name: str) -> Optional[str]:
        return os.getenv(ENV_PREFIX + name)

    overrides = [
        ("CLUSTER_NAME", config.hazelcast.cluster, "name"),
        ("CLUSTER_MEMBERS", config.hazelcast.cluster, "members"),
        ("SECURITY_USERNAME", config.hazelcast.security, "username"),
        ("SECURITY_PASSWORD", config.hazelcast.security, "password"),
        ("SECURITY_TOKEN", config.hazelcast.security, "token"),
        ("TRANSPORT", config.mcp.server, "transport"),
        ("ACCESS_MODE", config.access, "mode"),
        ("HTTP_HOST", config.mcp.server.http, "host"),
        ("HTTP_PORT", config.mcp.server.http, "port"),
    ]
    for env_name, section, attribute in overrides:
        raw = _env(env_name)
        if raw is None:
            continue
        try:
            setattr(section, attribute, raw)
        except ValidationError as exc:
            logger.warning(
                "Ignoring invalid %s%s=%r: %s",
                ENV_PREFIX,
                env_name,
                raw,
                exc.errors()[0]["msg"],
            )
    return config


def load_config(config_path: Optional[str] = None) -> ServerConfig:
    """
    Load configuration from file, then apply environment variable overrides.

    A missing file means defaults; an unreadable or invalid file is logged
    with the offending fields and also falls back to defaults.
    """
    _load_dotenv()
    path = _resolve_config_path(config_path)

    config = ServerConfig()
    if path.exists():
        logger.info("Loading configuration from: %s", path.resolve())
        try:
            config = config_from_dict(_read_yaml(path))
        except (OSError, yaml.YAMLError, ValidationError) as exc:
            logger.warning("Failed to load configuration file, using defaults: %s", exc)
            config = ServerConfig()
    else:
        logger.info("No configuration file found at %s, using defaults", path)

    return apply_env_overrides(config)
