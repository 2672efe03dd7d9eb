import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from greeter.errors import DuplicateNameError, NotFoundError
from greeter.typing.capability import (
    Capability,
    CapabilityKind,
    PromptCapability,
    ResourceCapability,
    ToolCapability,
)

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Named tools, prompts and resources, dispatched by ``(kind, name)``.

    The registry is populated at startup and then sealed. After sealing it is
    only read, so one instance can be shared by concurrently running
    transports without locking.

    Usage:
        registry = CapabilityRegistry()
        registry.register_tool("greet", say_hi, description="say hi")
        registry.seal()

        registry.invoke(CapabilityKind.TOOL, "greet", {"name": "Ada"})
    """

    def __init__(self) -> None:
        self._capabilities: Dict[Tuple[CapabilityKind, str], Capability] = {}
        self._sealed = False

    def register(self, capability: Capability) -> Capability:
        """Add a capability.

        Raises:
            DuplicateNameError: If ``(kind, name)`` is already registered
            RuntimeError: If the registry has been sealed
        """
        if self._sealed:
            raise RuntimeError("Registry is sealed; register capabilities at startup")

        if capability.key in self._capabilities:
            raise DuplicateNameError(capability.kind.value, capability.name)

        self._capabilities[capability.key] = capability
        logger.debug(f"Registered {capability.kind.value} '{capability.name}'")
        return capability

    def register_tool(
        self,
        name: str,
        handler: Callable[..., Any],
        description: Optional[str] = None,
    ) -> ToolCapability:
        return self.register(
            ToolCapability(name=name, handler=handler, description=description)
        )

    def register_prompt(
        self,
        name: str,
        handler: Callable[..., Any],
        description: Optional[str] = None,
    ) -> PromptCapability:
        return self.register(
            PromptCapability(name=name, handler=handler, description=description)
        )

    def register_resource(
        self,
        name: str,
        uri: str,
        handler: Callable[[], Any],
        mime_type: str = "text/plain",
        description: Optional[str] = None,
    ) -> ResourceCapability:
        return self.register(
            ResourceCapability(
                name=name,
                uri=uri,
                handler=handler,
                mime_type=mime_type,
                description=description,
            )
        )

    def seal(self) -> None:
        """Reject any further registration."""
        self._sealed = True
        logger.info(
            f"Registry sealed with {len(self._capabilities)} capabilities: "
            f"{[f'{kind.value}:{name}' for kind, name in self._capabilities]}"
        )

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, kind: CapabilityKind, name: str) -> Capability:
        """Raises NotFoundError if ``(kind, name)`` is not registered."""
        kind = CapabilityKind(kind)
        try:
            return self._capabilities[(kind, name)]
        except KeyError:
            raise NotFoundError(kind.value, name) from None

    def capabilities(self, kind: CapabilityKind) -> List[Capability]:
        kind = CapabilityKind(kind)
        return [cap for (k, _), cap in self._capabilities.items() if k is kind]

    def find_resource(self, uri: str) -> Optional[ResourceCapability]:
        """Return the resource registered at ``uri``, or None."""
        for capability in self.capabilities(CapabilityKind.RESOURCE):
            if capability.uri == uri:
                return capability
        return None

    def invoke(
        self,
        kind: CapabilityKind,
        name: str,
        args: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Call the handler registered under ``(kind, name)`` with ``args``.

        The handler's return value and exceptions pass through unchanged.

        Raises:
            NotFoundError: If ``(kind, name)`` is not registered
        """
        capability = self.get(kind, name)
        return capability.handler(**dict(args or {}))

    def __contains__(self, key: object) -> bool:
        return key in self._capabilities

    def __iter__(self) -> Iterator[Capability]:
        return iter(list(self._capabilities.values()))

    def __len__(self) -> int:
        return len(self._capabilities)
