import pytest
from pydantic import ValidationError

import server_config
from server_config import ServerConfig, apply_env_overrides, config_from_dict, load_config

_ENV_NAMES = [
    "HAZELCAST_MCP_CONFIG",
    "HAZELCAST_MCP_CLUSTER_NAME",
    "HAZELCAST_MCP_CLUSTER_MEMBERS",
    "HAZELCAST_MCP_SECURITY_USERNAME",
    "HAZELCAST_MCP_SECURITY_PASSWORD",
    "HAZELCAST_MCP_SECURITY_TOKEN",
    "HAZELCAST_MCP_TRANSPORT",
    "HAZELCAST_MCP_ACCESS_MODE",
    "HAZELCAST_MCP_HTTP_HOST",
    "HAZELCAST_MCP_HTTP_PORT",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(server_config, "_load_dotenv", lambda: None)


def test_defaults() -> None:
    config = ServerConfig()
    assert config.hazelcast.cluster.name == "dev"
    assert config.hazelcast.cluster.members == ["127.0.0.1:5701"]
    assert config.mcp.server.transport == "stdio"
    assert config.access.mode == "all"
    assert config.access.operations.write is True
    assert config.access.operations.clear is False


def test_config_from_dict_reads_nested_sections() -> None:
    config = config_from_dict(
        {
            "hazelcast": {
                "cluster": {"name": "prod", "members": ["10.0.0.1:5701", " 10.0.0.2:5701 "]},
                "connectTimeoutSeconds": 5,
            },
            "mcp": {"server": {"transport": "SSE", "http": {"port": "9090"}}},
            "access": {
                "mode": "Allowlist",
                "allowlist": {"maps": ["customers"], "vectors": "docs, faq"},
                "operations": {"write": "false", "clear": True},
            },
        }
    )

    assert config.hazelcast.cluster.name == "prod"
    assert config.hazelcast.cluster.members == ["10.0.0.1:5701", "10.0.0.2:5701"]
    assert config.hazelcast.connect_timeout_seconds == 5.0
    assert config.mcp.server.transport == "sse"
    assert config.mcp.server.http.port == 9090
    assert config.access.mode == "allowlist"
    assert config.access.allowlist.maps == ["customers"]
    assert config.access.allowlist.vectors == ["docs", "faq"]
    assert config.access.operations.write is False
    assert config.access.operations.clear is True


def test_http_transport_is_served_over_sse() -> None:
    config = config_from_dict({"mcp": {"server": {"transport": "http"}}})
    assert config.mcp.server.transport == "sse"


def test_unknown_transport_falls_back_to_stdio() -> None:
    config = config_from_dict({"mcp": {"server": {"transport": "carrier-pigeon"}}})
    assert config.mcp.server.transport == "stdio"


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        config_from_dict({"hazelcast": {"cluster": {"name": "x", "colour": "blue"}}})
    assert excinfo.value.errors()[0]["loc"] == ("hazelcast", "cluster", "colour")


def test_misspelled_boolean_is_reported() -> None:
    with pytest.raises(ValidationError) as excinfo:
        config_from_dict({"access": {"operations": {"write": "ture"}}})
    assert excinfo.value.errors()[0]["loc"] == ("access", "operations", "write")


def test_scalar_members_are_reported() -> None:
    with pytest.raises(ValidationError) as excinfo:
        config_from_dict({"hazelcast": {"cluster": {"members": 5701}}})
    assert excinfo.value.errors()[0]["loc"] == ("hazelcast", "cluster", "members")


def test_section_must_be_mapping() -> None:
    with pytest.raises(ValidationError):
        config_from_dict({"access": ["all"]})


def test_env_overrides_take_precedence(monkeypatch) -> None:
    monkeypatch.setenv("HAZELCAST_MCP_CLUSTER_NAME", "from-env")
    monkeypatch.setenv("HAZELCAST_MCP_CLUSTER_MEMBERS", "a:1, b:2")
    monkeypatch.setenv("HAZELCAST_MCP_SECURITY_TOKEN", "secret")
    monkeypatch.setenv("HAZELCAST_MCP_ACCESS_MODE", "DENYLIST")
    monkeypatch.setenv("HAZELCAST_MCP_HTTP_PORT", "not-a-port")

    config = apply_env_overrides(config_from_dict({"hazelcast": {"cluster": {"name": "file"}}}))

    assert config.hazelcast.cluster.name == "from-env"
    assert config.hazelcast.cluster.members == ["a:1", "b:2"]
    assert config.hazelcast.security.token == "secret"
    assert config.access.mode == "denylist"
    assert config.mcp.server.http.port == 8080


def test_load_config_reads_yaml_file(tmp_path) -> None:
    path = tmp_path / "hazelcast-mcp.yaml"
    path.write_text(
        "hazelcast:\n"
        "  cluster:\n"
        "    name: staging\n"
        "access:\n"
        "  mode: denylist\n"
        "  denylist:\n"
        "    maps: [secrets]\n",
        encoding="utf-8",
    )

    config = load_config(str(path))

    assert config.hazelcast.cluster.name == "staging"
    assert config.access.denylist.maps == ["secrets"]


def test_load_config_uses_path_from_env(tmp_path, monkeypatch) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("hazelcast:\n  cluster:\n    name: env-path\n", encoding="utf-8")
    monkeypatch.setenv("HAZELCAST_MCP_CONFIG", str(path))

    assert load_config().hazelcast.cluster.name == "env-path"


def test_load_config_missing_file_uses_defaults(tmp_path) -> None:
    config = load_config(str(tmp_path / "absent.yaml"))
    assert config.hazelcast.cluster.name == "dev"


def test_load_config_invalid_yaml_uses_defaults(tmp_path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("hazelcast: [unclosed\n", encoding="utf-8")

    config = load_config(str(path))

    assert config.hazelcast.cluster.name == "dev"


def test_load_config_non_mapping_root_uses_defaults(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")

    assert load_config(str(path)).access.mode == "all"


def test_load_config_invalid_field_is_logged_and_uses_defaults(tmp_path, caplog) -> None:
    path = tmp_path / "typo.yaml"
    path.write_text("access:\n  mode: allowlist\n  operations:\n    write: ture\n", encoding="utf-8")

    with caplog.at_level("WARNING", logger="server_config"):
        config = load_config(str(path))

    assert config.access.mode == "all"
    assert "access.operations.write" in caplog.text


def test_env_override_with_invalid_port_keeps_file_value(monkeypatch) -> None:
    monkeypatch.setenv("HAZELCAST_MCP_HTTP_PORT", "70000")

    config = apply_env_overrides(config_from_dict({"mcp": {"server": {"http": {"port": 9000}}}}))

    assert config.mcp.server.http.port == 9000
