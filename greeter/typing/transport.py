"""Transport configuration models."""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

ALL_INTERFACES = "0.0.0.0"


class TransportMode(str, Enum):
    STDIO = "stdio"
    NETWORK = "network"


class NetworkTransport(str, Enum):
    """Address-bound transports; both may run side by side."""

    STREAMABLE_HTTP = "streamable-http"
    SSE = "sse"


class TransportState(str, Enum):
    UNSTARTED = "unstarted"
    RUNNING = "running"
    STOPPED = "stopped"


class ListenAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = Field(default=ALL_INTERFACES, description="Bind host")
    port: int = Field(..., ge=0, le=65535, description="Bind port, 0 picks one")

    @classmethod
    def parse(cls, address: str) -> "ListenAddress":
        """Parse ``host:port``, ``[ipv6]:port`` or ``:port``.

        Raises:
            ValueError: If the address is empty or malformed
        """
        address = address.strip()
        if not address:
            raise ValueError("Listen address must be a non-empty string")

        host, sep, port_text = address.rpartition(":")
        if not sep:
            raise ValueError(f"Missing port in address {address!r}")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
        elif ":" in host:
            raise ValueError(f"Too many colons in address {address!r}")

        try:
            port = int(port_text)
        except ValueError:
            raise ValueError(f"Invalid port in address {address!r}") from None

        return cls(host=host or ALL_INTERFACES, port=port)

    @property
    def is_ipv6(self) -> bool:
        return ":" in self.host

    def __str__(self) -> str:
        host = f"[{self.host}]" if self.is_ipv6 else self.host
        return f"{host}:{self.port}"


class Listener(BaseModel):
    model_config = ConfigDict(frozen=True)

    transport: NetworkTransport
    address: ListenAddress


class TransportPlan(BaseModel):
    """Transport selection, resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    mode: TransportMode
    listeners: Tuple[Listener, ...] = ()

    @model_validator(mode="after")
    def _stdio_is_exclusive(self) -> "TransportPlan":
        if self.mode is TransportMode.STDIO and self.listeners:
            raise ValueError("stdio transport cannot be combined with listeners")
        return self

    @property
    def is_stdio(self) -> bool:
        return self.mode is TransportMode.STDIO
