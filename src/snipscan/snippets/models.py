"""Data model for snippet extraction.

Value types flow leaves-first through the pipeline:

- ``SourceFile``: caller-owned language tag + immutable bytes
- ``SnippetRegion``: a located function-like range (transient)
- ``ContentVariant``: one rendering of a region (exact, normalized, ...)
- ``Fingerprint``: digest of a variant, with a fixed text encoding
- ``SnippetRecord``: the long-lived output handed back to the caller

``ExtractionOptions`` is the caller-facing knob set, validated with pydantic.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from snipscan.core.errors import ConfigError, ExtractionError, UnsupportedLanguageError

# ============================================================================
# ENUMS
# ============================================================================


class Language(str, Enum):
    """Closed set of languages snippets can be extracted from.

    C:   C99 TC3, via tree-sitter-c. Later standards parse the same way as far
         as function definitions are concerned.
    CPP: C++98, via tree-sitter-cpp. Member functions defined inside a class
         body are reported as methods.
    """

    C = "c"
    CPP = "cpp"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> Language:
        """Resolve a language name or alias (case-insensitive)."""
        normalized = name.strip().lower()
        resolved = _LANGUAGE_ALIASES.get(normalized)
        if resolved is None:
            raise UnsupportedLanguageError.unknown(name)
        return resolved

    @classmethod
    def from_path(cls, path: str | PurePath) -> Language:
        """Detect the language from a file extension."""
        suffix = PurePath(path).suffix.lower()
        resolved = _EXTENSION_LANGUAGES.get(suffix)
        if resolved is None:
            raise UnsupportedLanguageError.unknown(suffix or str(path))
        return resolved


_DISPLAY_NAMES = {
    Language.C: "c99_tc3",
    Language.CPP: "cpp_98",
}

_LANGUAGE_ALIASES = {
    "c": Language.C,
    "c99": Language.C,
    "c99_tc3": Language.C,
    "cpp": Language.CPP,
    "c++": Language.CPP,
    "cxx": Language.CPP,
    "cpp_98": Language.CPP,
}

_EXTENSION_LANGUAGES = {
    ".c": Language.C,
    ".h": Language.C,
    ".cc": Language.CPP,
    ".cpp": Language.CPP,
    ".cxx": Language.CPP,
    ".hh": Language.CPP,
    ".hpp": Language.CPP,
    ".hxx": Language.CPP,
}


class RegionKind(str, Enum):
    """The kind of syntactic unit a region represents."""

    FUNCTION = "function"
    METHOD = "method"

    @property
    def order(self) -> int:
        return _REGION_ORDER[self]


_REGION_ORDER = {kind: idx for idx, kind in enumerate(RegionKind)}


class TransformKind(str, Enum):
    """How a region is rendered before hashing.

    FULL:             exact bytes of the region
    NORMALIZED:       tokens joined by single spaces, comments dropped
    SIGNATURE:        declaration part only, normalized like NORMALIZED
    BODY:             body part only, normalized like NORMALIZED
    COMMENT_STRIPPED: exact bytes with comment bytes removed
    SPACE_COLLAPSED:  exact text with whitespace runs collapsed to one space
    """

    FULL = "full"
    NORMALIZED = "normalized"
    SIGNATURE = "signature"
    BODY = "body"
    COMMENT_STRIPPED = "comment_stripped"
    SPACE_COLLAPSED = "space_collapsed"

    @property
    def order(self) -> int:
        return _TRANSFORM_ORDER[self]

    @property
    def requires_text(self) -> bool:
        return self not in (TransformKind.FULL, TransformKind.COMMENT_STRIPPED)


_TRANSFORM_ORDER = {kind: idx for idx, kind in enumerate(TransformKind)}


class HashAlgorithm(str, Enum):
    """Digest algorithms. The value is the wire tag and never changes."""

    SHA_256 = "sha_256"
    SHA_512 = "sha_512"

    @property
    def digest_size(self) -> int:
        return 32 if self is HashAlgorithm.SHA_256 else 64


class HashBackend(str, Enum):
    """Concrete implementations of the digest algorithms.

    HASHLIB uses OpenSSL (CPU-accelerated where the platform supports it).
    PYCRYPTODOME is a portable reference implementation. Both must produce
    identical digests; the choice only affects speed.
    """

    HASHLIB = "hashlib"
    PYCRYPTODOME = "pycryptodome"


class RegionErrorPolicy(str, Enum):
    """What the pipeline does when a single region fails."""

    ABORT = "abort"  # surface the error and end the file's stream
    SKIP = "skip"  # log the error and continue with the next region


# ============================================================================
# VALUE TYPES
# ============================================================================


@dataclass(frozen=True, slots=True, order=True)
class ByteRange:
    """Half-open byte range ``[start, end)`` into a source buffer."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ExtractionError.malformed(
                "range", self.start, self.end, "start must be >= 0 and <= end"
            )

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        # Inclusive form, e.g. "20..=29" for the ten bytes starting at 20.
        return f"{self.start}..={max(self.end - 1, self.start)}"

    def slice(self, buffer: bytes) -> bytes:
        return buffer[self.start : self.end]

    def contains(self, other: ByteRange) -> bool:
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A language tag and the raw bytes of one source file.

    ``path`` is identity only; the pipeline never reads from it.
    """

    language: Language
    content: bytes = field(repr=False)
    path: str | None = None

    @classmethod
    def from_text(cls, language: Language, text: str, path: str | None = None) -> SourceFile:
        return cls(language=language, content=text.encode("utf-8"), path=path)

    def __len__(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class SnippetRegion:
    """A located snippet: kind, full range and optional sub-ranges."""

    kind: RegionKind
    range: ByteRange
    signature: ByteRange | None = None
    body: ByteRange | None = None
    depth: int = 0
    name: str | None = None

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.range.start, self.kind.order, self.depth)


@dataclass(frozen=True, slots=True)
class ContentVariant:
    """One rendering of a region, ready for hashing."""

    kind: TransformKind
    content: bytes = field(repr=False)
    range: ByteRange

    def display(self) -> str:
        """UTF-8 text if the content is text, unpadded base64 otherwise."""
        try:
            return self.content.decode("utf-8")
        except UnicodeDecodeError:
            return _b64encode(self.content)


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """Digest of a content variant, tagged with its algorithm.

    The text encoding is RFC 4648 standard base64 without padding.
    """

    algorithm: HashAlgorithm
    digest: bytes

    @property
    def encoded(self) -> str:
        return _b64encode(self.digest)

    @property
    def hex(self) -> str:
        return self.digest.hex()

    @classmethod
    def decode(cls, algorithm: HashAlgorithm, text: str) -> Fingerprint:
        """Reverse ``encoded``. Raises ValueError on malformed input."""
        try:
            digest = base64.b64decode(text + "=" * (-len(text) % 4), validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid fingerprint encoding: {text!r}") from e
        if len(digest) != algorithm.digest_size:
            raise ValueError(
                f"Expected {algorithm.digest_size} digest bytes for {algorithm.value}, "
                f"got {len(digest)}"
            )
        return cls(algorithm=algorithm, digest=digest)

    def __str__(self) -> str:
        return f"{self.algorithm.value}:{self.encoded}"


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).rstrip(b"=").decode("ascii")


@dataclass(frozen=True, slots=True)
class SnippetRecord:
    """A region, its source identity, and every requested variant + fingerprint.

    Holds a reference to the caller's ``SourceFile``; variant bytes and
    digests are owned copies.
    """

    source: SourceFile = field(repr=False)
    region: SnippetRegion
    variants: tuple[tuple[ContentVariant, Fingerprint], ...]

    @property
    def language(self) -> Language:
        return self.source.language

    @property
    def kinds(self) -> tuple[TransformKind, ...]:
        return tuple(variant.kind for variant, _ in self.variants)

    def variant(self, kind: TransformKind) -> ContentVariant:
        for variant, _ in self.variants:
            if variant.kind is kind:
                return variant
        raise KeyError(kind)

    def fingerprint(self, kind: TransformKind) -> Fingerprint:
        for variant, fp in self.variants:
            if variant.kind is kind:
                return fp
        raise KeyError(kind)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict view for downstream re-serialization."""

        def _range(r: ByteRange | None) -> dict[str, int] | None:
            return None if r is None else {"start": r.start, "end": r.end}

        return {
            "language": self.language.value,
            "path": self.source.path,
            "kind": self.region.kind.value,
            "name": self.region.name,
            "range": _range(self.region.range),
            "signature": _range(self.region.signature),
            "body": _range(self.region.body),
            "variants": [
                {
                    "kind": variant.kind.value,
                    "range": _range(variant.range),
                    "text": variant.display(),
                    "fingerprint": {"algorithm": fp.algorithm.value, "digest": fp.encoded},
                }
                for variant, fp in self.variants
            ],
        }

    def __str__(self) -> str:
        return f"{self.language.display_name}:{self.region.kind.value}/{self.region.range}"


# ============================================================================
# OPTIONS
# ============================================================================

DEFAULT_TRANSFORMS: tuple[TransformKind, ...] = (
    TransformKind.FULL,
    TransformKind.NORMALIZED,
    TransformKind.SIGNATURE,
)


class ExtractionOptions(BaseModel):
    """Options for one extraction call.

    Transforms are stored in canonical order, so two option sets that request
    the same kinds produce identical record layouts.
    """

    model_config = ConfigDict(frozen=True)

    transforms: tuple[TransformKind, ...] = DEFAULT_TRANSFORMS
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA_256
    hash_backend: HashBackend = HashBackend.HASHLIB
    allow_partial_parse: bool = False
    on_region_error: RegionErrorPolicy = RegionErrorPolicy.ABORT

    @field_validator("transforms")
    @classmethod
    def validate_transforms(cls, v: tuple[TransformKind, ...]) -> tuple[TransformKind, ...]:
        if not v:
            # Not a ValueError, so pydantic lets it through unwrapped
            raise ConfigError.no_transforms()
        if len(set(v)) != len(v):
            raise ValueError("transform kinds must not repeat")
        return tuple(sorted(v, key=lambda kind: kind.order))

    @classmethod
    def build(cls, **kwargs: Any) -> ExtractionOptions:
        """Validate options, reporting misuse as ConfigError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            err = e.errors()[0]
            field_name = ".".join(str(loc) for loc in err["loc"])
            raise ConfigError.invalid_value(field_name, err.get("input"), err["msg"]) from e
