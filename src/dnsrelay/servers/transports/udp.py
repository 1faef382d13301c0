import socket
from typing import Optional

from ...errors import UpstreamUnavailable

DEFAULT_RECV_SIZE = 4096


def udp_query(
    host: str,
    port: int,
    query: bytes,
    *,
    timeout_ms: Optional[int] = 2000,
    recv_size: int = DEFAULT_RECV_SIZE,
) -> bytes:
    """
    Brief: Send one datagram to an upstream resolver and read one reply.

    Inputs:
    - host: upstream resolver host/IP
    - port: upstream UDP port
    - query: wire-format DNS query bytes, sent unmodified
    - timeout_ms: per-attempt timeout in milliseconds; 0 or None blocks
      until a reply arrives
    - recv_size: size of the receive buffer

    Outputs:
    - bytes: the reply exactly as received

    Example:
        >>> try:
        ...     udp_query('127.0.0.1', 53, b'\x00\x01')
        ... except UpstreamUnavailable:
        ...     pass
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    try:
        s = socket.socket(family, socket.SOCK_DGRAM)
    except OSError as e:
        raise UpstreamUnavailable(f"{host}:{port}: socket: {e}") from e
    try:
        s.settimeout(timeout_ms / 1000.0 if timeout_ms else None)
        try:
            s.connect((host, int(port)))
        except OSError as e:
            raise UpstreamUnavailable(f"{host}:{port}: dial: {e}") from e
        try:
            s.send(query)
        except OSError as e:
            raise UpstreamUnavailable(f"{host}:{port}: write: {e}") from e
        try:
            return s.recv(recv_size)
        except socket.timeout as e:
            raise UpstreamUnavailable(
                f"{host}:{port}: read timed out after {timeout_ms}ms"
            ) from e
        except OSError as e:
            raise UpstreamUnavailable(f"{host}:{port}: read: {e}") from e
    finally:
        s.close()
