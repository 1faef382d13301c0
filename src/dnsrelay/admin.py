"""Line-based administrative menu.

Option 1 adds a zone record (appended to the zone file and to the live
ZoneStore); option 2 stops the listener and exits.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Optional, TextIO

from .errors import ZoneLoadError
from .zone.loader import append_record, parse_admin_entry
from .zone.store import ZoneStore

logger = logging.getLogger("dnsrelay.admin")

MENU = "DNS utility\n1. Add DNS record\n2. Exit\n"


class AdminConsole:
    """Interactive menu bound to one ZoneStore and its backing file.

    Example use:
        >>> console = AdminConsole(zone, "records.txt", on_exit=server.stop)
        >>> console.run()  # returns after option 2 or end of input
    """

    def __init__(
        self,
        zone: ZoneStore,
        zone_file: str,
        on_exit: Optional[Callable[[], None]] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.zone = zone
        self.zone_file = zone_file
        self.on_exit = on_exit
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()

    def _readline(self) -> Optional[str]:
        line = self.stdin.readline()
        if line == "":
            return None
        return line.strip()

    def add_record(self) -> bool:
        """
        Brief: Prompt for one record, persist it, then add it to the zone.

        Inputs:
          - None (reads one line from stdin)

        Outputs:
          - bool: True when the record was stored
        """
        self._write(
            "Enter a DNS record in the format:\n"
            "<name> <type> <value>\n"
            "Example: example.com A 192.168.1.1\n"
            "Record: "
        )
        line = self._readline()
        if line is None:
            return False
        record = parse_admin_entry(line)
        if record is None:
            self._write("Invalid record; expected <name> <type> <value>.\n")
            return False
        try:
            append_record(self.zone_file, record)
        except ZoneLoadError as e:
            logger.error("%s", e)
            self._write(f"Could not write record: {e}\n")
            return False
        self.zone.append(record)
        self._write("DNS record added.\n")
        return True

    def run(self) -> None:
        """Show the menu and dispatch options until exit or end of input."""
        self._write(MENU)
        while True:
            self._write("Choose an option: ")
            option = self._readline()
            if option is None or option == "2":
                break
            if option == "1":
                self.add_record()
            else:
                self._write("Invalid option. Please choose again.\n")

        logger.info("Admin console exiting")
        if self.on_exit is not None:
            self.on_exit()
