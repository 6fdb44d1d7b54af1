"""Core module exports."""

from snipscan.core.errors import (
    ConfigError,
    EncodingError,
    ErrorCode,
    ExtractionError,
    ParseError,
    SnipscanError,
    UnsupportedLanguageError,
)
from snipscan.core.logging import (
    clear_scan_id,
    configure_logging,
    get_logger,
    get_scan_id,
    new_scan_id,
    set_scan_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "EncodingError",
    "ErrorCode",
    "ExtractionError",
    "ParseError",
    "SnipscanError",
    "UnsupportedLanguageError",
    # Logging
    "clear_scan_id",
    "configure_logging",
    "get_logger",
    "get_scan_id",
    "new_scan_id",
    "set_scan_id",
]
