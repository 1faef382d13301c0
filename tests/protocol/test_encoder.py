"""
Brief: Tests for dnsrelay.protocol.encoder authoritative responses.

Inputs:
  - None

Outputs:
  - None
"""

import struct

from dnslib import QTYPE, DNSRecord

from dnsrelay.protocol.encoder import (
    ANSWER_TTL,
    build_response,
    encode_domain,
    encode_rdata,
    type_class_bytes,
)
from dnsrelay.protocol.header import parse_header


def _query(name="example.com", qtype="A", qid=0x4242):
    q = DNSRecord.question(name, qtype)
    q.header.id = qid
    return q.pack()


def test_a_response_parses_with_expected_answer():
    wire = build_response(_query(), "example.com", "192.168.1.1")
    resp = DNSRecord.parse(wire)

    assert resp.header.qr == 1
    assert resp.header.rcode == 0
    assert len(resp.rr) == 1
    rr = resp.rr[0]
    assert str(rr.rname) == "example.com."
    assert rr.rtype == QTYPE.A
    assert rr.rclass == 1
    assert rr.ttl == ANSWER_TTL
    assert str(rr.rdata) == "192.168.1.1"
    assert wire[-4:] == bytes([192, 168, 1, 1])


def test_response_preserves_transaction_id():
    for qid in (0, 1, 0x8001, 0xFFFF):
        wire = build_response(_query(qid=qid), "example.com", "10.0.0.1")
        assert struct.unpack("!H", wire[:2])[0] == qid
        assert DNSRecord.parse(wire).header.id == qid


def test_response_flags_are_plain_noerror_response():
    wire = build_response(_query(), "example.com", "10.0.0.1")
    assert wire[2:4] == b"\x80\x00"


def test_answer_count_matches_answers_emitted():
    wire = build_response(_query(), "example.com", "10.0.0.1")
    header = parse_header(wire)
    assert header.q == 1
    assert header.a == 1
    assert header.auth == 0
    assert header.ar == 0
    assert len(DNSRecord.parse(wire).rr) == header.a


def test_question_section_matches_request():
    request = _query("joe", "A")
    wire = build_response(request, "joe", "10.0.0.7")
    assert wire[12 : 12 + len(request) - 12] == request[12:]
    resp = DNSRecord.parse(wire)
    assert str(resp.q.qname) == "joe."
    assert resp.q.qtype == QTYPE.A


def test_type_class_table():
    assert type_class_bytes(1) == b"\x00\x01\x00\x01"
    assert type_class_bytes(5) == b"\x00\x05\x00\x01"
    assert type_class_bytes(28) == b"\x00\x1c\x00\x01"
    assert type_class_bytes(15) == b""
    assert type_class_bytes(None) == b""


def test_aaaa_query_uses_aaaa_type_and_component_rdata():
    request = _query("example.com", "AAAA")
    wire = build_response(request, "example.com", "192.168.1.1")
    answer = wire[len(request) :]
    assert answer == (
        encode_domain("example.com")
        + b"\x00\x1c\x00\x01"
        + struct.pack("!IH", 60, 4)
        + bytes([192, 168, 1, 1])
    )


def test_unknown_qtype_answer_has_no_type_class_bytes():
    request = _query("example.com", "MX")
    wire = build_response(request, "example.com", "1.2.3.4")
    answer = wire[len(request) :]
    assert answer == encode_domain("example.com") + struct.pack("!IH", 60, 4) + b"\x01\x02\x03\x04"


def test_rdata_length_counts_components():
    wire = build_response(_query(), "example.com", "10.1")
    assert wire[-2:] == b"\x0a\x01"
    assert struct.unpack("!H", wire[-4:-2])[0] == 2


def test_encode_rdata_wraps_and_zeroes_bad_components():
    assert encode_rdata("192.168.1.1") == b"\xc0\xa8\x01\x01"
    assert encode_rdata("256.300.1.1") == b"\x00\x2c\x01\x01"
    assert encode_rdata("alias.example") == b"\x00\x00"
    assert encode_rdata("1..2") == b"\x01\x00\x02"


def test_encode_domain():
    assert encode_domain("example.com") == b"\x07example\x03com\x00"
    assert encode_domain("example.com.") == b"\x07example\x03com\x00"
    assert encode_domain("") == b"\x00"


def test_build_response_never_raises_on_short_request():
    wire = build_response(b"\x12", "example.com", "1.2.3.4")
    assert isinstance(wire, bytes)
    assert wire[:2] == b"\x12\x00"
