"""Snippet record assembly."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from snipscan.core.errors import ExtractionError
from snipscan.snippets.models import (
    ContentVariant,
    Fingerprint,
    SnippetRecord,
    SnippetRegion,
    SourceFile,
    TransformKind,
)


def assemble_record(
    source: SourceFile,
    region: SnippetRegion,
    kinds: Sequence[TransformKind],
    pairs: Sequence[tuple[ContentVariant, Fingerprint]],
) -> SnippetRecord:
    """Combine a region with its (variant, fingerprint) pairs.

    Every requested kind must be present exactly once and nothing else may be.

    Raises:
        ExtractionError: A requested variant is missing, repeated, or an
            unrequested one is present.
    """
    produced = Counter(variant.kind for variant, _ in pairs)
    requested = set(kinds)

    missing = [kind.value for kind in kinds if produced[kind] == 0]
    if missing:
        raise ExtractionError.variant_missing(missing, region.range.start, region.range.end)

    unexpected = [
        kind.value
        for kind, count in produced.items()
        if kind not in requested or count > 1
    ]
    if unexpected:
        raise ExtractionError.variant_unexpected(
            sorted(unexpected), region.range.start, region.range.end
        )

    ordered = tuple(sorted(pairs, key=lambda pair: pair[0].kind.order))
    return SnippetRecord(source=source, region=region, variants=ordered)
