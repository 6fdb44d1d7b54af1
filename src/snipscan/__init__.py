"""snipscan - function-level snippet extraction and fingerprinting for C and C++.

Usage::

    from snipscan import Language, SourceFile, TransformKind, extract

    source = SourceFile.from_text(Language.C, "int add(int a,int b){return a+b;}")
    for record in extract(source):
        print(record.region.range, record.fingerprint(TransformKind.FULL))
"""

from snipscan.core.errors import (
    ConfigError,
    EncodingError,
    ErrorCode,
    ExtractionError,
    ParseError,
    SnipscanError,
    UnsupportedLanguageError,
)
from snipscan.snippets import (
    ByteRange,
    ContentVariant,
    ExtractionOptions,
    ExtractionOutcome,
    Fingerprint,
    GrammarRegistry,
    HashAlgorithm,
    HashBackend,
    Language,
    RegionErrorPolicy,
    RegionKind,
    SnippetRecord,
    SnippetRegion,
    SnippetStream,
    SourceFile,
    TransformKind,
    default_registry,
    extract,
    extract_many,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Operations
    "extract",
    "extract_many",
    "ExtractionOutcome",
    "SnippetStream",
    "GrammarRegistry",
    "default_registry",
    # Models
    "ByteRange",
    "ContentVariant",
    "ExtractionOptions",
    "Fingerprint",
    "HashAlgorithm",
    "HashBackend",
    "Language",
    "RegionErrorPolicy",
    "RegionKind",
    "SnippetRecord",
    "SnippetRegion",
    "SourceFile",
    "TransformKind",
    # Errors
    "ConfigError",
    "EncodingError",
    "ErrorCode",
    "ExtractionError",
    "ParseError",
    "SnipscanError",
    "UnsupportedLanguageError",
]
