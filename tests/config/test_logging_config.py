"""
Brief: Tests for dnsrelay.config.logging_config.init_logging and formatters.

Inputs:
  - None

Outputs:
  - None
"""

import logging
import logging.handlers
from pathlib import Path

import pytest

from dnsrelay.config.logging_config import (
    BracketLevelFormatter,
    SyslogFormatter,
    init_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_init_logging_adds_stderr_handler():
    init_logging({"level": "debug"})
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


def test_init_logging_without_stderr_has_no_handlers():
    init_logging({"stderr": False, "level": "warn"})
    root = logging.getLogger()
    assert root.handlers == []
    assert root.level == logging.WARNING


def test_init_logging_file_handler_writes(tmp_path):
    log_path = tmp_path / "nested" / "dnsrelay.log"
    init_logging({"level": "info", "stderr": False, "file": str(log_path)})
    logging.getLogger("dnsrelay.test").info("file message")
    for h in logging.getLogger().handlers:
        h.flush()
    content = Path(log_path).read_text()
    assert "file message" in content
    assert "[info] dnsrelay.test:" in content


def test_unknown_level_defaults_to_info():
    init_logging({"level": "loud"})
    assert logging.getLogger().level == logging.INFO


def test_init_logging_syslog_dict(monkeypatch):
    created = {}

    class DummySysLogHandler(logging.Handler):
        LOG_USER = 8
        LOG_DAEMON = 24

        def __init__(self, address=None, facility=None):
            super().__init__()
            created["address"] = address
            created["facility"] = facility

        def emit(self, record):
            pass

    monkeypatch.setattr(logging.handlers, "SysLogHandler", DummySysLogHandler)
    init_logging({"stderr": False, "syslog": {"address": ["localhost", 514], "facility": "daemon"}})
    assert created == {"address": ("localhost", 514), "facility": 24}


def test_init_logging_syslog_failure_is_not_fatal(monkeypatch):
    class BrokenSysLogHandler:
        LOG_USER = 8

        def __init__(self, address=None, facility=None):
            raise OSError("no syslog here")

    monkeypatch.setattr(logging.handlers, "SysLogHandler", BrokenSysLogHandler)
    init_logging({"syslog": True})
    assert len(logging.getLogger().handlers) == 1


def test_formatters():
    record = logging.LogRecord("dnsrelay.x", logging.WARNING, __file__, 1, "hello %s", ("you",), None)
    line = BracketLevelFormatter("%(asctime)s %(level_tag)s %(name)s: %(message)s").format(record)
    assert line.endswith("[warn] dnsrelay.x: hello you")
    assert line[:20].endswith("Z")
    assert SyslogFormatter("relay").format(record) == "relay: [warn] dnsrelay.x: hello you"
