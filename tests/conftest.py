"""Shared fixtures for all tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from greeter.mcp.server import GreeterMCPServer, ServerConfig  # noqa: E402
from greeter.registry import CapabilityRegistry, create_default_resolver  # noqa: E402


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture
def resolver():
    return create_default_resolver()


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(name="TestGreeter", shutdown_timeout=1.0)


@pytest.fixture
def greeter_server(server_config: ServerConfig) -> GreeterMCPServer:
    return GreeterMCPServer(server_config)
