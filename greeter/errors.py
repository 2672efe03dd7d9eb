"""
Exceptions raised by the greeter server.

Registry and resolver errors are request-level: they propagate to the MCP
layer, which turns them into protocol error responses. ``TransportError`` is
process-fatal.
"""

from typing import Any, Dict, Optional


class GreeterError(Exception):
    """Base exception for greeter errors."""

    def __init__(
        self,
        message: str,
        code: int = -32000,
        original_exception: Optional[BaseException] = None,
    ):
        self.message = message
        self.code = code
        self.original_exception = original_exception
        super().__init__(message)

    def to_error_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-RPC error object."""
        data: Dict[str, Any] = {"exception": self.__class__.__name__}
        if self.original_exception is not None:
            data["original_exception"] = repr(self.original_exception)
        return {"code": self.code, "message": self.message, "data": data}


class DuplicateNameError(GreeterError):
    """A capability or resolver scheme is already registered under this name."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' already registered", code=-32001)


class NotFoundError(GreeterError):
    """No capability is registered under the requested name."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"Unknown {kind}: '{name}'", code=-32601)


class ResourceResolutionError(GreeterError):
    """Base class for failures turning a URI into content."""

    def __init__(self, message: str, uri: Any, code: int = -32002):
        self.uri = uri
        super().__init__(message, code=code)


class InvalidURIError(ResourceResolutionError):
    def __init__(self, uri: Any, reason: str):
        self.reason = reason
        super().__init__(f"Invalid resource URI {uri!r}: {reason}", uri, code=-32602)


class UnsupportedSchemeError(ResourceResolutionError):
    def __init__(self, uri: str, scheme: str):
        self.scheme = scheme
        super().__init__(f"Unsupported resource scheme: {scheme!r}", uri)


class UnknownResourceError(ResourceResolutionError):
    def __init__(self, uri: str, scheme: str, key: str):
        self.scheme = scheme
        self.key = key
        super().__init__(f"No {scheme} resource named {key!r}", uri)


class TransportError(GreeterError):
    """A transport failed to bind or stopped serving."""

    def __init__(
        self,
        transport: str,
        message: str,
        original_exception: Optional[BaseException] = None,
    ):
        self.transport = transport
        super().__init__(
            f"{transport} transport failed: {message}",
            code=-32003,
            original_exception=original_exception,
        )
