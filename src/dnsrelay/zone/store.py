from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneRecord:
    """One local record: exact domain name, textual type, and value."""

    name: str
    type: str
    value: str


class ZoneStore:
    """In-memory, append-only table of locally authoritative records.

    Example use:
        >>> store = ZoneStore([ZoneRecord("example.com", "A", "192.168.1.1")])
        >>> store.lookup("example.com")
        '192.168.1.1'
        >>> store.lookup("other.test") is None
        True
    """

    def __init__(self, records: Optional[Iterable[ZoneRecord]] = None) -> None:
        # Appends arrive from the admin thread while the listener reads.
        self._lock = threading.RLock()
        self._records: List[ZoneRecord] = list(records or [])

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def records(self) -> Tuple[ZoneRecord, ...]:
        """Snapshot of the table in insertion order."""
        with self._lock:
            return tuple(self._records)

    def find(self, domain: str) -> Optional[ZoneRecord]:
        """
        Brief: Return the first record whose name equals domain exactly.

        Inputs:
          - domain: queried domain string (no case folding, no trailing-dot
            normalization)

        Outputs:
          - ZoneRecord or None when no record matches
        """
        with self._lock:
            for record in self._records:
                if record.name == domain:
                    return record
        return None

    def lookup(self, domain: str) -> Optional[str]:
        record = self.find(domain)
        return record.value if record is not None else None

    def append(self, record: ZoneRecord) -> None:
        """Add a record to the in-memory table.

        Mirroring the record to the backing zone file is the caller's job
        (see dnsrelay.zone.loader.append_record).
        """
        with self._lock:
            self._records.append(record)
        logger.info(
            "Added zone record %s %s %s", record.name, record.type, record.value
        )
