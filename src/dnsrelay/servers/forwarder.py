from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..errors import UpstreamUnavailable
from .transports import udp as udp_transport

logger = logging.getLogger("dnsrelay.forwarder")

DEFAULT_UPSTREAMS: List[Dict[str, Union[str, int]]] = [{"host": "8.8.8.8", "port": 53}]


def parse_upstream(spec: Union[str, Dict]) -> Dict[str, Union[str, int]]:
    """
    Brief: Normalize an upstream given as 'host:port' or a mapping.

    Inputs:
      - spec: 'host:port', 'host' (port 53), '[v6addr]:port', or
        {'host': str, 'port': int}

    Outputs:
      - dict: {'host': str, 'port': int}

    Example:
      >>> parse_upstream("8.8.8.8:53")
      {'host': '8.8.8.8', 'port': 53}
    """
    if isinstance(spec, dict):
        if "host" not in spec:
            raise ValueError("each upstream entry must include 'host'")
        return {"host": str(spec["host"]), "port": int(spec.get("port", 53))}

    text = str(spec).strip()
    if not text:
        raise ValueError("empty upstream address")
    if text.startswith("["):
        host, _, rest = text[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else "53"
    elif text.count(":") == 1:
        host, port = text.split(":", 1)
    else:
        host, port = text, "53"
    return {"host": host, "port": int(port)}


class Forwarder:
    """Relays raw queries to upstream resolvers, in order, until one answers.

    Example use:
        >>> fwd = Forwarder([{"host": "8.8.8.8", "port": 53}], timeout_ms=2000)
        >>> reply = fwd.forward(query_wire)  # None when every upstream failed
    """

    def __init__(
        self,
        upstreams: Optional[Sequence[Union[str, Dict]]] = None,
        timeout_ms: Optional[int] = 2000,
        recv_size: int = udp_transport.DEFAULT_RECV_SIZE,
    ) -> None:
        if upstreams is None:
            upstreams = DEFAULT_UPSTREAMS
        self.upstreams: List[Dict[str, Union[str, int]]] = [
            parse_upstream(u) for u in upstreams
        ]
        self.timeout_ms = timeout_ms
        self.recv_size = recv_size

    def forward_with_upstream(
        self, request: bytes
    ) -> Tuple[Optional[bytes], Optional[Dict]]:
        """
        Brief: Try each upstream in order and return the first reply.

        Inputs:
          - request: raw query datagram, forwarded byte-for-byte

        Outputs:
          - (reply, upstream): the raw reply and the upstream that produced
            it, or (None, None) when every upstream failed
        """
        if not self.upstreams:
            logger.warning("No upstreams configured; dropping query")
            return None, None

        for upstream in self.upstreams:
            host = str(upstream["host"])
            port = int(upstream["port"])
            try:
                reply = udp_transport.udp_query(
                    host,
                    port,
                    request,
                    timeout_ms=self.timeout_ms,
                    recv_size=self.recv_size,
                )
            except UpstreamUnavailable as e:
                logger.warning("Upstream %s:%d unavailable: %s", host, port, e)
                continue
            logger.debug("Upstream %s:%d replied with %d bytes", host, port, len(reply))
            return reply, upstream

        logger.warning("All %d upstreams failed; dropping query", len(self.upstreams))
        return None, None

    def forward(self, request: bytes) -> Optional[bytes]:
        reply, _ = self.forward_with_upstream(request)
        return reply
