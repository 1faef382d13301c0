import logging
import socketserver
import threading
from typing import Optional, Tuple

from dnslib import QTYPE

from ..errors import DNSSocketError, MalformedPacket
from ..protocol.decoder import decode_query
from ..protocol.encoder import build_response
from ..zone.store import ZoneStore
from .forwarder import Forwarder

logger = logging.getLogger("dnsrelay.server")


def _qtype_name(qtype: Optional[int]) -> str:
    if qtype is None:
        return "?"
    return str(QTYPE.get(qtype, f"TYPE{qtype}"))


class Dispatcher:
    """Routes one datagram to a local answer or to the forwarder.

    Example use:
        >>> dispatcher = Dispatcher(zone, Forwarder(["8.8.8.8:53"]))
        >>> reply = dispatcher.resolve(query_wire)  # None means: send nothing
    """

    def __init__(self, zone: ZoneStore, forwarder: Forwarder) -> None:
        self.zone = zone
        self.forwarder = forwarder

    def resolve(self, data: bytes) -> Optional[bytes]:
        """
        Brief: Produce the reply datagram for a raw query, if any.

        Inputs:
          - data: raw request datagram

        Outputs:
          - bytes: authoritative response built from the zone, or the
            upstream's raw reply
          - None: when the datagram is malformed or every upstream failed
        """
        try:
            query = decode_query(data)
        except MalformedPacket as e:
            logger.debug("Dropping malformed packet: %s", e)
            return None

        record = self.zone.find(query.domain)
        if record is not None:
            logger.info(
                "Local answer %s %s -> %s",
                query.domain,
                _qtype_name(query.qtype),
                record.value,
            )
            return build_response(data, query.domain, record.value, query.qtype)

        logger.debug(
            "Forwarding %s %s (id=%d)",
            query.domain,
            _qtype_name(query.qtype),
            query.id,
        )
        return self.forwarder.forward(data)


class DNSUDPHandler(socketserver.BaseRequestHandler):
    """
    Handles one UDP datagram by delegating to the server's Dispatcher.

    Example use:
        This handler is used internally by DNSServer and is not
        typically instantiated directly by users.
    """

    def handle(self) -> None:
        data, sock = self.request
        wire = self.server.dispatcher.resolve(data)  # type: ignore[attr-defined]
        if wire is None:
            return
        try:
            sock.sendto(wire, self.client_address)
        except OSError as e:
            if self.server.closing:  # type: ignore[attr-defined]
                logger.debug(
                    "Reply to %s dropped; server stopped", self.client_address
                )
                return
            err = DNSSocketError(f"write to {self.client_address}: {e}")
            logger.warning("Reply not delivered: %s", err)


class _SequentialUDPServer(socketserver.UDPServer):
    """UDPServer that handles datagrams one at a time and logs failures."""

    allow_reuse_address = False
    max_packet_size = 4096

    def __init__(self, server_address: Tuple[str, int], dispatcher: Dispatcher):
        self.dispatcher = dispatcher
        self.closing = False
        super().__init__(server_address, DNSUDPHandler)

    def get_request(self):
        try:
            return super().get_request()
        except OSError as e:
            if not self.closing:
                err = DNSSocketError(str(e))
                logger.warning("Read from UDP socket failed: %s", err)
            raise

    def handle_error(self, request, client_address) -> None:
        logger.exception("Error while handling datagram from %s", client_address)


class DNSServer:
    """A sequential UDP DNS server.

    Example use:
        >>> import threading
        >>> server = DNSServer("127.0.0.1", 5353, dispatcher)
        >>> t = threading.Thread(target=server.serve_forever, daemon=True)
        >>> t.start()
        >>> server.stop()
    """

    def __init__(
        self,
        host: str,
        port: int,
        dispatcher: Dispatcher,
        poll_interval: float = 0.5,
    ) -> None:
        """Bind the listening socket.

        Inputs:
            host: The host to listen on.
            port: The port to listen on (0 picks a free port).
            dispatcher: Dispatcher that turns each datagram into a reply.
            poll_interval: Seconds between checks for a stop request.
        """
        try:
            self.server = _SequentialUDPServer((host, port), dispatcher)
        except PermissionError as e:
            logger.error(
                "Cannot bind %s:%d/udp: %s (ports below 1024 usually need "
                "root or CAP_NET_BIND_SERVICE)",
                host,
                port,
                e,
            )
            raise
        self.poll_interval = poll_interval
        self.server.timeout = poll_interval
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._stopped = False
        logger.debug("DNS UDP server bound to %s:%d", *self.address)

    @property
    def address(self) -> Tuple[str, int]:
        host, port = self.server.server_address[:2]
        return str(host), int(port)

    def serve_forever(self) -> None:
        """Read and answer datagrams until stop() is called.

        Each datagram, including any upstream round trip, is handled to
        completion before the next one is read. The stop request is checked
        every poll_interval seconds while idle.
        """
        if self._stop_event.is_set():
            return
        logger.info("Listening for DNS queries on %s:%d/udp", *self.address)
        try:
            while not self._stop_event.is_set():
                try:
                    self.server.handle_request()
                except (OSError, ValueError):
                    # stop() closed the socket while select() was waiting.
                    if self._stop_event.is_set():
                        break
                    raise
        except KeyboardInterrupt:
            pass

    def stop(self) -> None:
        """Stop reading and close the socket without waiting for in-flight work.

        A datagram still waiting on an upstream is abandoned: its reply, if
        one ever arrives, is dropped because the socket is already closed.

        Inputs:
          - None
        Outputs:
          - None; safe to call before serve_forever() or more than once.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
        self._stop_event.set()
        self.server.closing = True
        self.server.server_close()
        logger.info("DNS UDP server stopped")
