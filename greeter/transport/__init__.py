from .plan import resolve_transport_plan, transport_security_for
from .selector import ListenerServer, TransportSelector, bind_socket

__all__ = [
    "resolve_transport_plan",
    "transport_security_for",
    "TransportSelector",
    "ListenerServer",
    "bind_socket",
]
