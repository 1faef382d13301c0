"""Exception types shared across dnsrelay.

Per-datagram failures (MalformedPacket, DNSSocketError, UpstreamUnavailable)
are contained by the listener; only ZoneLoadError and ConfigError stop
startup.
"""


class DNSRelayError(Exception):
    """Base class for all dnsrelay errors."""


class MalformedPacket(DNSRelayError):
    """
    Brief: Datagram too short to hold a DNS header.

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """


class DNSSocketError(DNSRelayError):
    """Read or write failure on the listening socket."""


class UpstreamUnavailable(DNSRelayError):
    """
    Brief: A single upstream resolver could not be dialed, written or read.

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """


class ZoneLoadError(DNSRelayError):
    """The zone file could not be opened or read."""


class ConfigError(DNSRelayError):
    """Invalid configuration file or value."""
