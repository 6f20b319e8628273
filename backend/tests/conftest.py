import pytest

from bridge import StubVectorCapability
from fakes import FakeHazelcastClient
from hz import HazelcastConnectionManager
from runtime_state import ToolCallTracker, runtime_state
from server_config import ServerConfig


@pytest.fixture
def fake_client() -> FakeHazelcastClient:
    return FakeHazelcastClient()


@pytest.fixture
def install_runtime(fake_client):
    """Point the process runtime state at a fake cluster."""

    def _install(config: ServerConfig = None, vector=None):
        config = config or ServerConfig()
        connection = HazelcastConnectionManager(config, client_factory=lambda **_: fake_client)
        runtime_state.configure(
            config,
            connection=connection,
            vector=vector or StubVectorCapability("test"),
        )
        runtime_state.tool_calls = ToolCallTracker()
        return fake_client

    yield _install
    runtime_state.configure(None)
