from .capability_registry import CapabilityRegistry
from .resource_resolver import (
    EMBEDDED_SCHEME,
    EmbeddedResourceStore,
    ResourceResolver,
    create_default_resolver,
    parse_resource_uri,
)

__all__ = [
    "CapabilityRegistry",
    "ResourceResolver",
    "EmbeddedResourceStore",
    "EMBEDDED_SCHEME",
    "create_default_resolver",
    "parse_resource_uri",
]
