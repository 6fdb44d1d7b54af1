"""Snippets module - function-level extraction and fingerprinting.

Public API is in `snipscan.snippets.ops`:
- extract: lazy record stream for one file
- extract_many: per-file outcomes for a batch

Internal implementations (grammars, syntax adapter, locator, transforms,
fingerprinter, assembly) are in `snipscan.snippets._internal/`.
"""

from snipscan.snippets._internal.grammars import (
    GrammarRegistry,
    default_registry,
    is_grammar_installed,
)
from snipscan.snippets.models import (
    ByteRange,
    ContentVariant,
    ExtractionOptions,
    Fingerprint,
    HashAlgorithm,
    HashBackend,
    Language,
    RegionErrorPolicy,
    RegionKind,
    SnippetRecord,
    SnippetRegion,
    SourceFile,
    TransformKind,
)
from snipscan.snippets.ops import ExtractionOutcome, SnippetStream, extract, extract_many

__all__ = [
    # Operations
    "extract",
    "extract_many",
    "ExtractionOutcome",
    "SnippetStream",
    # Grammars
    "GrammarRegistry",
    "default_registry",
    "is_grammar_installed",
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
]
