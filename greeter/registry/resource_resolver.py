"""
Resource resolution: ``scheme:opaque-key`` URIs to content.

Each scheme maps to a lookup function returning a ``StoredResource`` or
``None``. Only ``embedded`` is registered by default, backed by an in-memory
store, so resolution never touches the network or disk.
"""

import logging
import re
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from greeter.errors import (
    DuplicateNameError,
    InvalidURIError,
    UnknownResourceError,
    UnsupportedSchemeError,
)
from greeter.typing.resource import ResolvedResource, StoredResource

logger = logging.getLogger(__name__)

EMBEDDED_SCHEME = "embedded"

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")

Lookup = Callable[[str], Optional[StoredResource]]


def parse_resource_uri(uri: Any) -> Tuple[str, str]:
    """Split a URI into ``(scheme, opaque_key)``.

    The key is returned as written; hierarchical forms such as
    ``scheme://host/path`` have no opaque part and yield an empty key.

    Raises:
        InvalidURIError: If ``uri`` is not a well-formed URI with a scheme
    """
    if not isinstance(uri, str):
        raise InvalidURIError(uri, "URI must be a string")
    if not uri:
        raise InvalidURIError(uri, "URI is empty")
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in uri):
        raise InvalidURIError(uri, "URI contains whitespace or control characters")
    if not _SCHEME_PATTERN.match(uri):
        raise InvalidURIError(uri, "missing scheme")

    parts = urlsplit(uri)
    if parts.netloc or parts.path.startswith("/"):
        return parts.scheme, ""
    return parts.scheme, parts.path


class EmbeddedResourceStore:
    """Immutable in-memory store of literal resources keyed by name."""

    def __init__(self, resources: Mapping[str, StoredResource]):
        self._resources = MappingProxyType(dict(resources))

    @classmethod
    def from_texts(
        cls, texts: Mapping[str, str], mime_type: str = "text/plain"
    ) -> "EmbeddedResourceStore":
        return cls(
            {key: StoredResource(text=text, mime_type=mime_type) for key, text in texts.items()}
        )

    def lookup(self, key: str) -> Optional[StoredResource]:
        return self._resources.get(key)

    def keys(self):
        return self._resources.keys()

    def __len__(self) -> int:
        return len(self._resources)


DEFAULT_EMBEDDED_RESOURCES: Dict[str, str] = {
    "info": "This is the hello example server.",
}


class ResourceResolver:
    """Dispatches resource reads to the lookup registered for the URI scheme."""

    def __init__(self, lookups: Optional[Mapping[str, Lookup]] = None):
        self._lookups: Dict[str, Lookup] = {}
        for scheme, lookup in (lookups or {}).items():
            self.register_scheme(scheme, lookup)

    def register_scheme(self, scheme: str, lookup: Lookup) -> None:
        """
        Raises:
            DuplicateNameError: If the scheme already has a lookup
        """
        scheme = scheme.lower()
        if scheme in self._lookups:
            raise DuplicateNameError("scheme", scheme)
        self._lookups[scheme] = lookup
        logger.debug(f"Registered resource scheme '{scheme}'")

    @property
    def schemes(self) -> Tuple[str, ...]:
        return tuple(self._lookups)

    def resolve(self, uri: str) -> ResolvedResource:
        """Resolve ``uri`` to its content.

        Raises:
            InvalidURIError: If the URI cannot be parsed
            UnsupportedSchemeError: If no lookup is registered for its scheme
            UnknownResourceError: If the lookup has no entry for its key
        """
        scheme, key = parse_resource_uri(uri)

        lookup = self._lookups.get(scheme)
        if lookup is None:
            raise UnsupportedSchemeError(uri, scheme)

        stored = lookup(key)
        if stored is None:
            raise UnknownResourceError(uri, scheme, key)

        return ResolvedResource(uri=uri, text=stored.text, mime_type=stored.mime_type)


def create_default_resolver(
    store: Optional[EmbeddedResourceStore] = None,
) -> ResourceResolver:
    """Resolver with the ``embedded`` scheme backed by ``store``."""
    if store is None:
        store = EmbeddedResourceStore.from_texts(DEFAULT_EMBEDDED_RESOURCES)
    return ResourceResolver({EMBEDDED_SCHEME: store.lookup})
