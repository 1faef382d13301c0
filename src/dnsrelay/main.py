from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import List

from .admin import AdminConsole
from .config.config_parser import load_config
from .config.logging_config import init_logging
from .errors import ConfigError, ZoneLoadError
from .servers.forwarder import Forwarder
from .servers.udp_server import DNSServer, Dispatcher
from .zone.loader import load_zone_file


def _port(text: str) -> int:
    port = int(text)
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port {port} is outside 0-65535")
    return port


def _wait_for_interrupt(thread: threading.Thread) -> None:
    try:
        while thread.is_alive():
            thread.join(timeout=1.0)
    except KeyboardInterrupt:
        logging.getLogger("dnsrelay.main").info("Interrupted; shutting down")


def main(argv: List[str] | None = None) -> int:
    """
    Main entry point for the DNS relay.
    Loads configuration and the zone file, binds the UDP listener and runs
    the admin menu until the operator exits.

    Args:
        argv: Command-line arguments.

    Returns:
        An exit code: 0 on clean shutdown, 1 on config, zone or bind errors.

    Example use:
        CLI:
            PYTHONPATH=src python -m dnsrelay.main --config config.yaml
    """
    parser = argparse.ArgumentParser(
        description="Authoritative-for-local-zone DNS relay"
    )
    parser.add_argument("--config", default=None, help="Path to YAML config")
    parser.add_argument("--zone", default=None, help="Zone file (overrides config)")
    parser.add_argument(
        "--host", default=None, help="Listen address (overrides config)"
    )
    parser.add_argument(
        "--port", type=_port, default=None, help="Listen UDP port (overrides config)"
    )
    parser.add_argument(
        "--no-admin",
        action="store_true",
        help="Serve until interrupted without the interactive menu",
    )
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    init_logging(cfg.logging.model_dump())
    logger = logging.getLogger("dnsrelay.main")
    if args.config:
        logger.info("Loaded config from %s", args.config)

    zone_path = args.zone or cfg.zone_file
    host = args.host or cfg.listen.host
    port = args.port if args.port is not None else cfg.listen.port

    # The zone must load before the socket is bound.
    try:
        zone = load_zone_file(zone_path)
    except ZoneLoadError as exc:
        logger.error("%s", exc)
        return 1

    forwarder = Forwarder(
        cfg.upstream_dicts(), timeout_ms=cfg.timeout_ms, recv_size=cfg.recv_size
    )
    logger.info(
        "Forwarding to %s (timeout_ms=%d)",
        ", ".join(f"{u['host']}:{u['port']}" for u in forwarder.upstreams),
        cfg.timeout_ms,
    )

    try:
        server = DNSServer(host, port, Dispatcher(zone, forwarder))
    except (OSError, OverflowError) as exc:
        logger.error("Failed to bind %s:%d/udp: %s", host, port, exc)
        return 1

    listener = threading.Thread(
        target=server.serve_forever, name="dnsrelay-udp", daemon=True
    )
    listener.start()

    try:
        if args.no_admin:
            _wait_for_interrupt(listener)
        else:
            AdminConsole(zone, zone_path, on_exit=server.stop).run()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        server.stop()
        listener.join(timeout=server.poll_interval + 1.0)

    return 0


if __name__ == "__main__":
    sys.exit(main())
