"""
Brief: Global pytest configuration: src/ import path, per-test timeout and
shared DNS fixtures.

Inputs:
  - None

Outputs:
  - None
"""

import os
import signal
import socket
import sys
import threading

import pytest

# Ensure 'src' is on sys.path so the 'dnsrelay' package is importable in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)


def _alarm_handler(signum, frame):
    """
    Brief: Signal handler that raises TimeoutError when alarm triggers.

    Inputs:
      - signum: signal number (int)
      - frame: current frame (ignored)

    Outputs:
      - None: Raises TimeoutError to fail the test
    """
    raise TimeoutError("Test exceeded 10 seconds")


if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        # Fallback: no-op on platforms without SIGALRM
        yield


class FakeUpstream:
    """UDP server on an ephemeral port that answers with a canned reply."""

    def __init__(self, reply_fn):
        self.reply_fn = reply_fn
        self.received = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(0.2)
        self.host, self.port = self.sock.getsockname()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self):
        while not self._stop.is_set():
            try:
                data, addr = self.sock.recvfrom(4096)
            except socket.timeout:
                continue
            except OSError:
                return
            self.received.append(data)
            reply = self.reply_fn(data)
            if reply is not None:
                self.sock.sendto(reply, addr)

    @property
    def address(self):
        return f"{self.host}:{self.port}"

    def close(self):
        self._stop.set()
        self._thread.join(timeout=1.0)
        self.sock.close()


@pytest.fixture
def fake_upstream():
    """
    Brief: Factory fixture starting FakeUpstream servers, closed on teardown.

    Inputs:
      - reply_fn: callable(query_bytes) -> reply bytes or None (no reply)

    Outputs:
      - callable returning a started FakeUpstream
    """
    started = []

    def _start(reply_fn):
        up = FakeUpstream(reply_fn)
        started.append(up)
        return up

    yield _start
    for up in started:
        up.close()


@pytest.fixture
def unused_udp_port():
    """Return a local UDP port with nothing listening on it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
