import asyncio
import functools
import logging
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, Callable, Iterable, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.transport_security import TransportSecuritySettings
from mcp.shared.exceptions import McpError
from mcp.types import ErrorData
from pydantic import BaseModel, Field
from starlette.applications import Starlette

from greeter.errors import ResourceResolutionError
from greeter.registry import CapabilityRegistry, ResourceResolver, create_default_resolver
from greeter.typing import (
    Capability,
    CapabilityKind,
    NetworkTransport,
    ResolvedResource,
    ResourceCapability,
)

logger = logging.getLogger(__name__)


class ServerConfig(BaseModel):
    name: str = Field(default="greeter", min_length=1, max_length=50, description="Server name")
    instructions: Optional[str] = Field(default=None, description="Instructions sent to clients")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="FastMCP log level")
    stateless_http: bool = Field(default=True, description="Stateless streamable HTTP")
    shutdown_timeout: float = Field(default=5.0, gt=0, description="Shutdown timeout seconds")
    transport_security: Optional[TransportSecuritySettings] = Field(
        default=None,
        description="Host/Origin checks for HTTP transports; None keeps FastMCP's loopback default",
    )


def read_resource_capability(
    registry: CapabilityRegistry, capability: ResourceCapability
) -> ReadResourceContents:
    """Invoke a registered resource and wrap its result for the protocol layer."""
    result = registry.invoke(CapabilityKind.RESOURCE, capability.name)
    if isinstance(result, ResolvedResource):
        return ReadResourceContents(content=result.text, mime_type=result.mime_type)
    if not isinstance(result, (str, bytes)):
        result = str(result)
    return ReadResourceContents(content=result, mime_type=capability.mime_type)


class ResolverFastMCP(FastMCP):
    """FastMCP that serves resource reads from the registry and the resolver.

    A URI registered as a resource capability is read through
    ``registry.invoke``. Any other URI goes to the ``ResourceResolver``, so
    reads are not limited to listed resources. Resolution failures become
    protocol errors carrying the resolver's error code.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        resolver: ResourceResolver,
        **settings: Any,
    ):
        self.registry = registry
        self.resolver = resolver
        super().__init__(**settings)

    async def read_resource(self, uri: Any) -> Iterable[ReadResourceContents]:
        uri_text = str(uri)
        try:
            capability = self.registry.find_resource(uri_text)
            if capability is not None:
                return [read_resource_capability(self.registry, capability)]

            resolved = self.resolver.resolve(uri_text)
        except ResourceResolutionError as e:
            logger.warning(f"Resource read failed: {e}")
            raise McpError(ErrorData(**e.to_error_dict())) from e
        return [ReadResourceContents(content=resolved.text, mime_type=resolved.mime_type)]


class BaseMCPServer(ABC):
    """
    Base MCP server: a capability registry published through FastMCP.

    Subclasses register tools, prompts and resources in ``setup()``. They land
    in a ``CapabilityRegistry``; ``build()`` seals the registry and publishes
    every capability to FastMCP with a dispatcher that calls back into
    ``registry.invoke``. Transports are run by ``TransportSelector``.

    Usage:
        class HelloServer(BaseMCPServer):
            def setup(self):
                self.add_tool(say_hi, name="greet", description="say hi")
                self.add_resource("embedded:info", name="info")

        server = HelloServer(ServerConfig(name="hello"))
        await server.run_stdio()
    """

    def __init__(
        self,
        config: ServerConfig,
        registry: Optional[CapabilityRegistry] = None,
        resolver: Optional[ResourceResolver] = None,
    ):
        self.config = config
        self.server_id = str(uuid.uuid4())
        self.registry = registry if registry is not None else CapabilityRegistry()
        self.resolver = resolver if resolver is not None else create_default_resolver()
        self.logger = logging.getLogger(f"{__name__}.{config.name}")
        self._built = False

        self.mcp = ResolverFastMCP(
            self.registry,
            self.resolver,
            name=config.name,
            instructions=config.instructions,
            debug=config.debug,
            log_level=config.log_level,
            stateless_http=config.stateless_http,
            transport_security=config.transport_security,
        )

    # ============= Public API for Subclasses =============

    def add_tool(
        self,
        fn: Callable[..., Any],
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        """
        Register a tool. Its input schema comes from the function signature,
        including pydantic ``Field`` descriptions in ``Annotated`` parameters.
        """
        self.registry.register_tool(
            name or fn.__name__, fn, description=description or _first_line(fn)
        )

    def add_prompt(
        self,
        fn: Callable[..., Any],
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        """
        Register a prompt template. ``fn`` takes the prompt arguments as
        keyword arguments and returns a list of prompt messages.
        """
        self.registry.register_prompt(
            name or fn.__name__, fn, description=description or _first_line(fn)
        )

    def add_resource(
        self,
        uri: str,
        fn: Optional[Callable[[], Any]] = None,
        name: Optional[str] = None,
        mime_type: str = "text/plain",
        description: Optional[str] = None,
    ) -> None:
        """
        Register a static resource. Without ``fn`` the resource is read through
        the server's resolver.

        Example:
            self.add_resource("embedded:info", name="info", mime_type="text/plain")
        """
        handler = fn if fn is not None else functools.partial(self.resolver.resolve, uri)
        self.registry.register_resource(
            name or uri,
            uri,
            handler,
            mime_type=mime_type,
            description=description,
        )

    @abstractmethod
    def setup(self) -> None:
        """Register tools, resources and prompts. Called once by ``build()``."""
        pass

    async def cleanup(self) -> None:
        """Called after every transport has stopped."""
        pass

    # ============= Publishing =============

    def build(self) -> FastMCP:
        """Run ``setup()``, seal the registry and publish it. Idempotent."""
        if self._built:
            return self.mcp

        self.setup()
        self.registry.seal()

        for capability in self.registry.capabilities(CapabilityKind.TOOL):
            self.mcp.add_tool(
                self._dispatcher(capability),
                name=capability.name,
                description=capability.description,
            )

        for capability in self.registry.capabilities(CapabilityKind.PROMPT):
            self.mcp.prompt(name=capability.name, description=capability.description)(
                self._dispatcher(capability)
            )

        for capability in self.registry.capabilities(CapabilityKind.RESOURCE):
            self.mcp.resource(
                capability.uri,
                name=capability.name,
                description=capability.description,
                mime_type=capability.mime_type,
            )(self._resource_reader(capability))

        self._built = True
        self.logger.info(
            f"Published {len(self.registry)} capabilities for server "
            f"'{self.config.name}' (server_id={self.server_id})"
        )
        return self.mcp

    def _dispatcher(self, capability: Capability) -> Callable[..., Any]:
        # Keeps the handler's signature so FastMCP derives the same schema.
        registry = self.registry
        kind, name = capability.kind, capability.name

        @functools.wraps(capability.handler)
        def dispatch(**arguments: Any) -> Any:
            return registry.invoke(kind, name, arguments)

        return dispatch

    def _resource_reader(self, capability: ResourceCapability) -> Callable[[], Any]:
        # FastMCP needs a function per resource; reads go through read_resource.
        registry = self.registry

        def read() -> Any:
            return read_resource_capability(registry, capability).content

        read.__name__ = f"read_{capability.name}"
        return read

    # ============= Transports =============

    def http_app(self, transport: NetworkTransport) -> Starlette:
        """ASGI app serving ``transport``; streamable HTTP at /mcp, SSE at /sse."""
        self.build()
        if transport is NetworkTransport.STREAMABLE_HTTP:
            return self.mcp.streamable_http_app()
        return self.mcp.sse_app()

    async def run_stdio(self) -> None:
        """Serve on stdin/stdout until the input stream closes."""
        self.build()
        await self.mcp.run_stdio_async()

    @asynccontextmanager
    async def lifecycle(self):
        try:
            self.logger.info("Starting server initialization...")
            self.build()
            self.logger.info("Server initialization completed successfully")
            yield self
        finally:
            self.logger.info("Starting server cleanup...")
            try:
                await asyncio.wait_for(self.cleanup(), timeout=self.config.shutdown_timeout)
            except asyncio.TimeoutError:
                self.logger.warning("Cleanup timeout - forcing shutdown")
            self.logger.info("Server cleanup completed")


def _first_line(fn: Callable[..., Any]) -> Optional[str]:
    doc = (getattr(fn, "__doc__", None) or "").strip()
    return doc.splitlines()[0] if doc else None
