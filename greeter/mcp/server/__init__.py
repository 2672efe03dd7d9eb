from .base_server import BaseMCPServer, ResolverFastMCP, ServerConfig
from .greeter_server import GreeterMCPServer

__all__ = [
    "BaseMCPServer",
    "ResolverFastMCP",
    "ServerConfig",
    "GreeterMCPServer",
]
