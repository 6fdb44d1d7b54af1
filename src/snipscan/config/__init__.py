"""Config module exports."""

from snipscan.config.loader import SnipscanSettings, load_config
from snipscan.config.models import (
    LoggingConfig,
    LogOutputConfig,
    SnipscanConfig,
)

__all__ = [
    "load_config",
    "SnipscanConfig",
    "SnipscanSettings",
    "LoggingConfig",
    "LogOutputConfig",
]
