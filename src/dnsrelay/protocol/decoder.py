from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from dnslib import DNSHeader

from ..errors import MalformedPacket
from .header import HEADER_LEN, parse_header

logger = logging.getLogger(__name__)


@dataclass
class Query:
    """Decoded view of an incoming datagram.

    qtype and qclass are None when the datagram ends before them.
    """

    header: DNSHeader
    domain: str
    qtype: Optional[int] = None
    qclass: Optional[int] = None

    @property
    def id(self) -> int:
        return self.header.id


def decode_name(data: bytes, offset: int = HEADER_LEN) -> Tuple[str, int]:
    """
    Brief: Decode a length-prefixed QNAME into a dotted domain string.

    Inputs:
      - data: raw datagram bytes
      - offset: position of the first length octet (12 for the question)

    Outputs:
      - (domain, next_offset): the labels joined with '.', and the offset just
        past the zero-length terminator. When a label would run past the end
        of the buffer, decoding stops early and next_offset is len(data).

    Example:
      >>> decode_name(b"\\x07example\\x03com\\x00", 0)
      ('example.com', 13)
    """
    labels = []
    end = len(data)
    while offset < end:
        length = data[offset]
        if length == 0:
            return ".".join(labels), offset + 1
        if offset + 1 + length > end:
            logger.debug("QNAME label at offset %d runs past datagram end", offset)
            break
        label = data[offset + 1 : offset + 1 + length]
        labels.append(bytes(label).decode("ascii", errors="replace"))
        offset += 1 + length
    return ".".join(labels), end


def decode_query(data: bytes) -> Query:
    """Parse the header and first question of a datagram.

    Raises MalformedPacket when the datagram is shorter than the fixed header.
    """
    if len(data) < HEADER_LEN:
        raise MalformedPacket(
            f"datagram of {len(data)} bytes is shorter than "
            f"the {HEADER_LEN}-byte header"
        )

    header = parse_header(data)
    domain, offset = decode_name(data, HEADER_LEN)

    qtype: Optional[int] = None
    qclass: Optional[int] = None
    if offset + 4 <= len(data):
        qtype, qclass = struct.unpack_from("!HH", data, offset)

    return Query(header=header, domain=domain, qtype=qtype, qclass=qclass)
