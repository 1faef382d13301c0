"""Configuration loading and logging setup."""

from .config_parser import RelayConfig, load_config
from .logging_config import init_logging

__all__ = ["RelayConfig", "init_logging", "load_config"]
