"""DNS message header (RFC 1035 section 4.1.1) helpers built on dnslib."""

from __future__ import annotations

from dnslib import OPCODE, RCODE, DNSHeader
from dnslib.label import DNSBuffer

HEADER_LEN = 12


def parse_header(data: bytes) -> DNSHeader:
    """
    Brief: Parse the fixed header at the start of a DNS message.

    Inputs:
      - data: bytes-like object at least HEADER_LEN long

    Outputs:
      - dnslib.DNSHeader with id, flag properties and the four section counts

    Raises dnslib.DNSError when data is too short; callers that accept
    untrusted input check the length first (see protocol.decoder).
    """
    return DNSHeader.parse(DNSBuffer(bytes(data[:HEADER_LEN])))


def response_header(request_id: int, ancount: int) -> bytes:
    """
    Brief: Pack the header of a locally answered response.

    Inputs:
      - request_id: transaction ID copied from the request
      - ancount: number of answer records that follow the question

    Outputs:
      - bytes: 12-byte header with flags 0x8000 (QR set, everything else
        clear), QDCOUNT 1 and zero authority/additional counts

    Example:
      >>> response_header(0x1234, 1)[:4]
      b'\\x124\\x80\\x00'
    """
    # bitmap=0 keeps dnslib from setting RD on a fresh header.
    header = DNSHeader(
        id=request_id & 0xFFFF,
        bitmap=0,
        qr=1,
        opcode=OPCODE.QUERY,
        rcode=RCODE.NOERROR,
        q=1,
        a=ancount,
    )
    buffer = DNSBuffer()
    header.pack(buffer)
    return bytes(buffer.data)
