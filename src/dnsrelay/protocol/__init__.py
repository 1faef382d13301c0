"""DNS wire-format decoding and authoritative response encoding."""

from .decoder import Query, decode_name, decode_query
from .encoder import ANSWER_TTL, build_response, encode_domain

__all__ = [
    "ANSWER_TTL",
    "Query",
    "build_response",
    "decode_name",
    "decode_query",
    "encode_domain",
]
