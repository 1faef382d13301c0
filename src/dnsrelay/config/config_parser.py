"""Configuration parsing and validation for dnsrelay.

Brief:
  Reads the YAML config file and validates it into typed pydantic models.
  Every key is optional; a missing file argument yields the defaults.

Inputs:
  - YAML config path (or None)

Outputs:
  - RelayConfig instance
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigError
from ..servers.forwarder import DEFAULT_UPSTREAMS, parse_upstream
from ..servers.transports.udp import DEFAULT_RECV_SIZE


class ListenConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    port: int = Field(default=53, ge=0, le=65535)


class UpstreamConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str
    port: int = Field(default=53, ge=1, le=65535)


class LoggingConfig(BaseModel):
    """Brief: Typed model for the 'logging' section.

    Inputs:
      - level: debug, info, warn, error or crit.
      - stderr: log to stderr.
      - file: optional log file path.
      - syslog: False, True, or a mapping with address/facility/tag.

    Outputs:
      - LoggingConfig instance; model_dump() feeds init_logging().
    """

    model_config = ConfigDict(extra="forbid")

    level: str = "info"
    stderr: bool = True
    file: Optional[str] = None
    syslog: Union[bool, Dict[str, Any]] = False


def _default_upstreams() -> List[UpstreamConfig]:
    return [UpstreamConfig(**u) for u in DEFAULT_UPSTREAMS]


class RelayConfig(BaseModel):
    """Top-level configuration.

    Example:
      >>> cfg = RelayConfig(upstream=["1.1.1.1:53"], timeout_ms=500)
      >>> cfg.upstream[0].host
      '1.1.1.1'
    """

    model_config = ConfigDict(extra="forbid")

    listen: ListenConfig = Field(default_factory=ListenConfig)
    zone_file: str = "records.txt"
    upstream: List[UpstreamConfig] = Field(default_factory=_default_upstreams)
    # Per-upstream attempt timeout; 0 waits indefinitely.
    timeout_ms: int = Field(default=2000, ge=0)
    recv_size: int = Field(default=DEFAULT_RECV_SIZE, ge=512, le=65535)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("upstream", mode="before")
    @classmethod
    def _normalize_upstreams(cls, value: Any) -> Any:
        """Accept 'host:port' strings, mappings, or a single entry."""
        if value is None:
            return _default_upstreams()
        if isinstance(value, (str, dict)):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("upstream must be a list of 'host:port' or mappings")
        return [parse_upstream(v) for v in value]

    def upstream_dicts(self) -> List[Dict[str, Union[str, int]]]:
        return [u.model_dump() for u in self.upstream]


def load_config(path: Optional[str]) -> RelayConfig:
    """
    Brief: Read and validate a YAML config file.

    Inputs:
      - path: YAML file path, or None for built-in defaults

    Outputs:
      - RelayConfig

    Raises ConfigError for unreadable files, invalid YAML, a non-mapping
    document, or values that fail validation.
    """
    if path is None:
        return RelayConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must be a mapping at the top level")

    try:
        return RelayConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {e}") from e
