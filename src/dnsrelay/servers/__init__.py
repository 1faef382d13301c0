"""UDP listener, dispatcher and upstream forwarder."""

from .forwarder import Forwarder, parse_upstream
from .udp_server import DNSServer, Dispatcher

__all__ = ["DNSServer", "Dispatcher", "Forwarder", "parse_upstream"]
