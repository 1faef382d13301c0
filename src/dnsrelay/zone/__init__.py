"""Local zone table and zone file helpers."""

from .loader import append_record, load_zone_file, parse_zone_line
from .store import ZoneRecord, ZoneStore

__all__ = [
    "ZoneRecord",
    "ZoneStore",
    "append_record",
    "load_zone_file",
    "parse_zone_line",
]
