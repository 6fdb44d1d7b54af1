"""Snipscan error types with typed error codes.

Error code ranges:
- 1xxx: Language / grammar
- 2xxx: Config
- 3xxx: Parse
- 4xxx: Extraction
- 5xxx: Encoding
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Language (1xxx)
    UNSUPPORTED_LANGUAGE = 1001
    GRAMMAR_UNAVAILABLE = 1002

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_NO_TRANSFORMS = 2003
    CONFIG_FILE_NOT_FOUND = 2004
    HASH_BACKEND_UNAVAILABLE = 2005

    # Parse (3xxx)
    PARSE_NO_TREE = 3001
    PARSE_SYNTAX_ERROR = 3002

    # Extraction (4xxx)
    REGION_OUT_OF_BOUNDS = 4001
    REGION_DUPLICATE = 4002
    REGION_MALFORMED = 4003
    VARIANT_MISSING = 4004
    VARIANT_UNEXPECTED = 4005

    # Encoding (5xxx)
    INVALID_UTF8 = 5001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class SnipscanError(Exception):
    """Base error with structured context for callers and log lines."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PARSE_SYNTAX_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses and structured logs."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class UnsupportedLanguageError(SnipscanError):
    """The requested language is unknown or its capability is not enabled."""

    @classmethod
    def unknown(cls, name: str) -> "UnsupportedLanguageError":
        return cls(
            code=ErrorCode.UNSUPPORTED_LANGUAGE,
            message=f"Unknown language: {name}",
            details={"language": name},
        )

    @classmethod
    def not_enabled(cls, language: str, enabled: list[str]) -> "UnsupportedLanguageError":
        return cls(
            code=ErrorCode.UNSUPPORTED_LANGUAGE,
            message=f"Language '{language}' is not enabled in this registry",
            details={"language": language, "enabled": enabled},
        )

    @classmethod
    def grammar_unavailable(
        cls, language: str, module: str, package: str | None = None
    ) -> "UnsupportedLanguageError":
        hint = f"; install '{package}'" if package else ""
        return cls(
            code=ErrorCode.GRAMMAR_UNAVAILABLE,
            message=f"Grammar for '{language}' is not installed (module '{module}'){hint}",
            details={"language": language, "module": module, "package": package},
        )


class ConfigError(SnipscanError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def no_transforms(cls) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_NO_TRANSFORMS,
            message="At least one transform kind must be requested",
            details={"field": "transforms"},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def backend_unavailable(cls, backend: str, module: str) -> "ConfigError":
        return cls(
            code=ErrorCode.HASH_BACKEND_UNAVAILABLE,
            message=f"Hash backend '{backend}' requires the '{module}' module",
            details={"backend": backend, "module": module},
        )


class ParseError(SnipscanError):
    """The grammar could not produce a usable syntax tree."""

    @classmethod
    def no_tree(cls, language: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_NO_TREE,
            message=f"Parser produced no tree for {language} input",
            details={"language": language},
        )

    @classmethod
    def syntax_error(
        cls, language: str, error_count: int, first_error: dict[str, Any]
    ) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_SYNTAX_ERROR,
            message=(
                f"{error_count} syntax error(s) in {language} input, first at "
                f"line {first_error['line']}, column {first_error['column']}"
            ),
            details={"language": language, "error_count": error_count, "first": first_error},
        )


class ExtractionError(SnipscanError):
    """An invariant was violated while locating or assembling a region."""

    @classmethod
    def out_of_bounds(cls, start: int, end: int, length: int) -> "ExtractionError":
        return cls(
            code=ErrorCode.REGION_OUT_OF_BOUNDS,
            message=f"Range {start}..{end} is outside source of length {length}",
            details={"start": start, "end": end, "length": length},
        )

    @classmethod
    def duplicate(cls, kind: str, start: int, end: int) -> "ExtractionError":
        return cls(
            code=ErrorCode.REGION_DUPLICATE,
            message=f"Duplicate {kind} region at {start}..{end}",
            details={"kind": kind, "start": start, "end": end},
        )

    @classmethod
    def malformed(cls, node_type: str, start: int, end: int, reason: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.REGION_MALFORMED,
            message=f"Malformed {node_type} at {start}..{end}: {reason}",
            details={"node_type": node_type, "start": start, "end": end, "reason": reason},
        )

    @classmethod
    def variant_missing(cls, kinds: list[str], start: int, end: int) -> "ExtractionError":
        return cls(
            code=ErrorCode.VARIANT_MISSING,
            message=f"Region {start}..{end} is missing variant(s): {', '.join(kinds)}",
            details={"kinds": kinds, "start": start, "end": end},
        )

    @classmethod
    def variant_unexpected(cls, kinds: list[str], start: int, end: int) -> "ExtractionError":
        return cls(
            code=ErrorCode.VARIANT_UNEXPECTED,
            message=f"Region {start}..{end} has unrequested or repeated variant(s): "
            f"{', '.join(kinds)}",
            details={"kinds": kinds, "start": start, "end": end},
        )

    @classmethod
    def internal(cls, reason: str, **details: Any) -> "ExtractionError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )


class EncodingError(SnipscanError):
    """A text transform encountered bytes that are not valid UTF-8."""

    @classmethod
    def invalid_utf8(cls, transform: str, offset: int, reason: str) -> "EncodingError":
        return cls(
            code=ErrorCode.INVALID_UTF8,
            message=f"Transform '{transform}' requires UTF-8 text; invalid byte at {offset}",
            details={"transform": transform, "offset": offset, "reason": reason},
        )
