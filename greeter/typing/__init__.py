from .capability import (
    Capability,
    CapabilityKind,
    PromptCapability,
    ResourceCapability,
    ToolCapability,
    argument_schema,
)
from .resource import ResolvedResource, StoredResource
from .transport import (
    ListenAddress,
    Listener,
    NetworkTransport,
    TransportMode,
    TransportPlan,
    TransportState,
)

__all__ = [
    "Capability",
    "CapabilityKind",
    "ToolCapability",
    "PromptCapability",
    "ResourceCapability",
    "argument_schema",
    "StoredResource",
    "ResolvedResource",
    "ListenAddress",
    "Listener",
    "NetworkTransport",
    "TransportMode",
    "TransportPlan",
    "TransportState",
]
