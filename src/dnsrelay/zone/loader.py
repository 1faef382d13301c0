"""Zone file reading and appending.

Format, one record per line:

    <name> <class> <type> <value>

Lines starting with ';' and blank lines are skipped, as are lines with fewer
than four whitespace-separated fields. The class column is ignored.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Iterator, List, Optional

from ..errors import ZoneLoadError
from .store import ZoneRecord, ZoneStore

logger = logging.getLogger(__name__)

DEFAULT_CLASS = "IN"


def parse_zone_line(line: str) -> Optional[ZoneRecord]:
    """
    Brief: Parse a single zone file line.

    Inputs:
      - line: raw text line (trailing newline allowed)

    Outputs:
      - ZoneRecord, or None for comments, blank lines and short lines

    Example:
      >>> parse_zone_line("example.com IN A 192.168.1.1")
      ZoneRecord(name='example.com', type='A', value='192.168.1.1')
      >>> parse_zone_line("; comment") is None
      True
    """
    if line.startswith(";") or not line.strip():
        return None
    parts = line.split()
    if len(parts) < 4:
        return None
    name, _cls, rtype, value = parts[:4]
    return ZoneRecord(name=name, type=rtype, value=value)


def iter_zone_records(lines: Iterable[str]) -> Iterator[ZoneRecord]:
    for lineno, line in enumerate(lines, start=1):
        record = parse_zone_line(line)
        if record is None:
            if line.strip() and not line.startswith(";"):
                logger.debug("Skipping short zone line %d: %r", lineno, line)
            continue
        yield record


def load_zone_file(path: str) -> ZoneStore:
    """
    Brief: Build a ZoneStore from a zone file, preserving file order.

    Inputs:
      - path: zone file path ('~' is expanded)

    Outputs:
      - ZoneStore populated with every valid record line

    Raises ZoneLoadError when the file cannot be opened or read.
    """
    full = os.path.expanduser(path)
    try:
        with open(full, "r", encoding="utf-8") as f:
            records: List[ZoneRecord] = list(iter_zone_records(f))
    except (OSError, UnicodeDecodeError) as e:
        raise ZoneLoadError(f"failed to load zone file {path}: {e}") from e

    logger.info("Loaded %d zone records from %s", len(records), full)
    return ZoneStore(records)


def format_zone_line(record: ZoneRecord, rclass: str = DEFAULT_CLASS) -> str:
    return f"{record.name} {rclass} {record.type} {record.value}"


def parse_admin_entry(text: str) -> Optional[ZoneRecord]:
    """Parse a record typed at the admin prompt.

    Accepts '<name> <type> <value>' or '<name> <class> <type> <value>'; the
    class is ignored. Returns None for anything else.
    """
    parts = text.split()
    if len(parts) == 3:
        name, rtype, value = parts
    elif len(parts) == 4:
        name, _cls, rtype, value = parts
    else:
        return None
    return ZoneRecord(name=name, type=rtype, value=value)


def append_record(path: str, record: ZoneRecord) -> None:
    """Append record to the zone file as a four-field line.

    Raises ZoneLoadError when the file cannot be opened for appending.
    """
    full = os.path.expanduser(path)
    try:
        with open(full, "a", encoding="utf-8") as f:
            f.write(format_zone_line(record) + "\n")
    except OSError as e:
        raise ZoneLoadError(f"failed to append to zone file {path}: {e}") from e
