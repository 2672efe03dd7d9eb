import logging
from typing import Optional

from mcp.server.transport_security import TransportSecuritySettings

from greeter.typing.transport import (
    ListenAddress,
    Listener,
    NetworkTransport,
    TransportMode,
    TransportPlan,
)

logger = logging.getLogger(__name__)


def resolve_transport_plan(
    use_stdio: bool,
    http_address: str = "",
    sse_address: str = "",
) -> TransportPlan:
    """Resolve startup flags into a single ``TransportPlan``.

    stdio takes exclusive control: when it is requested the network addresses
    are ignored. Otherwise every non-empty address becomes a listener.

    Raises:
        ValueError: If a non-empty address cannot be parsed
    """
    if use_stdio:
        if http_address or sse_address:
            logger.debug("stdio requested; ignoring network addresses")
        return TransportPlan(mode=TransportMode.STDIO)

    listeners = []
    for transport, address in (
        (NetworkTransport.STREAMABLE_HTTP, http_address),
        (NetworkTransport.SSE, sse_address),
    ):
        if address and address.strip():
            listeners.append(
                Listener(transport=transport, address=ListenAddress.parse(address))
            )

    return TransportPlan(mode=TransportMode.NETWORK, listeners=tuple(listeners))


_WILDCARD_HOSTS = {"0.0.0.0", "::", ""}
_LOOPBACK_ALLOWED_HOSTS = ["127.0.0.1:*", "localhost:*", "[::1]:*"]
_LOOPBACK_ALLOWED_ORIGINS = ["http://127.0.0.1:*", "http://localhost:*", "http://[::1]:*"]


_LOOPBACK_HOSTS = {"127.0.0.1", "localhost", "::1"}


def transport_security_for(plan: TransportPlan) -> Optional[TransportSecuritySettings]:
    """Host/Origin checks matching where the plan's listeners bind.

    Returns None for stdio, which serves no HTTP. Loopback listeners only
    accept loopback Host and Origin headers. A wildcard bind accepts any Host
    header, since clients may reach it under any name. A specific host is
    added to the loopback allow-list.
    """
    if plan.is_stdio or not plan.listeners:
        return None

    hosts = [listener.address.host for listener in plan.listeners]
    if any(host in _WILDCARD_HOSTS for host in hosts):
        logger.info("Listening on all interfaces; Host header checks disabled")
        return TransportSecuritySettings(enable_dns_rebinding_protection=False)

    allowed_hosts = list(_LOOPBACK_ALLOWED_HOSTS)
    allowed_origins = list(_LOOPBACK_ALLOWED_ORIGINS)
    for listener in plan.listeners:
        address = listener.address
        if address.host in _LOOPBACK_HOSTS:
            continue
        host = f"[{address.host}]" if address.is_ipv6 else address.host
        allowed_hosts.extend([host, f"{host}:{address.port}"])
        allowed_origins.append(f"http://{host}:{address.port}")

    return TransportSecuritySettings(
        enable_dns_rebinding_protection=True,
        allowed_hosts=allowed_hosts,
        allowed_origins=allowed_origins,
    )
