from __future__ import annotations

import logging
import struct
from typing import List, Optional

from dnslib import CLASS, QTYPE

from .decoder import decode_query
from .header import HEADER_LEN, parse_header, response_header

logger = logging.getLogger(__name__)

# Fixed TTL for every locally synthesized answer.
ANSWER_TTL = 60

# TYPE/CLASS pairs emitted in the answer section, keyed by queried QTYPE.
_TYPE_CLASS = {
    QTYPE.A: struct.pack("!HH", QTYPE.A, CLASS.IN),
    QTYPE.CNAME: struct.pack("!HH", QTYPE.CNAME, CLASS.IN),
    QTYPE.AAAA: struct.pack("!HH", QTYPE.AAAA, CLASS.IN),
}


def encode_domain(domain: str) -> bytes:
    """
    Brief: Encode a dotted domain as length-prefixed labels plus a zero octet.

    Inputs:
      - domain: e.g. 'example.com' (a trailing dot is tolerated)

    Outputs:
      - bytes: wire-format QNAME

    Example:
      >>> encode_domain("example.com")
      b'\\x07example\\x03com\\x00'
    """
    out = bytearray()
    for label in domain.split("."):
        if not label:
            continue
        raw = label.encode("ascii", errors="replace")
        out.append(len(raw) & 0xFF)
        out += raw
    out.append(0)
    return bytes(out)


def type_class_bytes(qtype: Optional[int]) -> bytes:
    """Return the answer TYPE/CLASS pair for qtype, or b'' when unrecognized."""
    if qtype is None:
        return b""
    return _TYPE_CLASS.get(qtype, b"")


def encode_rdata(value: str) -> bytes:
    """Encode each dot-separated decimal component of value as one octet.

    Components are not range checked: out-of-range numbers wrap modulo 256
    and non-numeric components encode as zero.
    """
    octets: List[int] = []
    for part in value.split("."):
        try:
            octets.append(int(part) & 0xFF)
        except ValueError:
            octets.append(0)
    return bytes(octets)


def build_response(
    request: bytes, domain: str, value: str, qtype: Optional[int] = None
) -> bytes:
    """
    Brief: Build an authoritative response datagram for a local zone match.

    Inputs:
      - request: original request datagram (header is copied from it)
      - domain: the queried domain, re-encoded into question and answer
      - value: the matched zone record value, e.g. '192.168.1.1'
      - qtype: queried QTYPE; decoded from request when omitted

    Outputs:
      - bytes: header + one question + one answer record

    The header keeps the request's transaction ID; flags become a plain
    no-error response (0x8000), QDCOUNT/ANCOUNT are 1 and the authority and
    additional counts are zero since those sections are never emitted. An
    unrecognized qtype yields an answer with no TYPE/CLASS bytes.

    Example:
      >>> wire = build_response(query_wire, "example.com", "192.168.1.1")
    """
    head = bytes(request[:HEADER_LEN]).ljust(HEADER_LEN, b"\x00")
    qclass: Optional[int] = None
    if len(request) >= HEADER_LEN:
        query = decode_query(request)
        qclass = query.qclass
        if qtype is None:
            qtype = query.qtype

    answers = [_encode_answer(domain, value, qtype)]

    qname = encode_domain(domain)
    if qtype is not None and qclass is not None:
        question = qname + struct.pack("!HH", qtype, qclass)
    else:
        question = qname + type_class_bytes(qtype)

    if not type_class_bytes(qtype):
        logger.warning(
            "No TYPE/CLASS encoding for qtype %s; answer for %s will be malformed",
            qtype,
            domain,
        )

    header = response_header(parse_header(head).id, len(answers))
    return header + question + b"".join(answers)


def _encode_answer(domain: str, value: str, qtype: Optional[int]) -> bytes:
    rdata = encode_rdata(value)
    return (
        encode_domain(domain)
        + type_class_bytes(qtype)
        + struct.pack("!IH", ANSWER_TTL, len(rdata))
        + rdata
    )
