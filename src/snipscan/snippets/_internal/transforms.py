"""Content transforms: render a located region into hashable variants.

All transforms are pure functions of (region, tree, kind). Token-based
transforms walk the tree's leaf spans, so they never re-tokenize text
themselves and never reorder or respell tokens.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import tree_sitter

from snipscan.core.errors import EncodingError, ExtractionError
from snipscan.snippets._internal.packs import LanguagePack
from snipscan.snippets._internal.syntax import NodeKind, SyntaxTree, parse_source
from snipscan.snippets.models import (
    ByteRange,
    ContentVariant,
    SnippetRegion,
    SourceFile,
    TransformKind,
)

_SKIPPED_BY_NORMALIZE = (NodeKind.TRIVIA, NodeKind.COMMENT)

# Atomic spans whose inner whitespace is layout, unlike string and char literals.
_COLLAPSED_ATOMICS = frozenset({"preproc_arg"})


def _decode(data: bytes, kind: TransformKind, base: int) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError.invalid_utf8(kind.value, base + e.start, e.reason) from e


def _normalized(tree: SyntaxTree, rng: ByteRange, kind: TransformKind) -> str:
    # Validate the whole range first so the error offset is exact.
    _decode(rng.slice(tree.source), kind, rng.start)
    tokens: list[str] = []
    for span in tree.leaf_spans(rng):
        if span.kind in _SKIPPED_BY_NORMALIZE:
            continue
        token = span.range.slice(tree.source).decode("utf-8").strip()
        if span.node_type in _COLLAPSED_ATOMICS:
            token = " ".join(token.split())
        if token:
            tokens.append(token)
    return " ".join(tokens)


def _render_full(region: SnippetRegion, tree: SyntaxTree) -> tuple[bytes, ByteRange]:
    return region.range.slice(tree.source), region.range


def _render_normalized(region: SnippetRegion, tree: SyntaxTree) -> tuple[bytes, ByteRange]:
    text = _normalized(tree, region.range, TransformKind.NORMALIZED)
    return text.encode("utf-8"), region.range


def _render_signature(region: SnippetRegion, tree: SyntaxTree) -> tuple[bytes, ByteRange]:
    if region.signature is None:
        raise ExtractionError.malformed(
            region.kind.value, region.range.start, region.range.end, "no signature range"
        )
    text = _normalized(tree, region.signature, TransformKind.SIGNATURE)
    return text.encode("utf-8"), region.signature


def _render_body(region: SnippetRegion, tree: SyntaxTree) -> tuple[bytes, ByteRange]:
    if region.body is None:
        raise ExtractionError.malformed(
            region.kind.value, region.range.start, region.range.end, "no body range"
        )
    text = _normalized(tree, region.body, TransformKind.BODY)
    return text.encode("utf-8"), region.body


def _render_comment_stripped(region: SnippetRegion, tree: SyntaxTree) -> tuple[bytes, ByteRange]:
    kept = [
        span.range.slice(tree.source)
        for span in tree.leaf_spans(region.range)
        if span.kind is not NodeKind.COMMENT
    ]
    return b"".join(kept), region.range


def _render_space_collapsed(region: SnippetRegion, tree: SyntaxTree) -> tuple[bytes, ByteRange]:
    text = _decode(region.range.slice(tree.source), TransformKind.SPACE_COLLAPSED, region.range.start)
    return " ".join(text.split()).encode("utf-8"), region.range


_RENDERERS: dict[TransformKind, Callable[[SnippetRegion, SyntaxTree], tuple[bytes, ByteRange]]] = {
    TransformKind.FULL: _render_full,
    TransformKind.NORMALIZED: _render_normalized,
    TransformKind.SIGNATURE: _render_signature,
    TransformKind.BODY: _render_body,
    TransformKind.COMMENT_STRIPPED: _render_comment_stripped,
    TransformKind.SPACE_COLLAPSED: _render_space_collapsed,
}


def transform(region: SnippetRegion, tree: SyntaxTree, kind: TransformKind) -> ContentVariant:
    """Render one variant of a region.

    Raises:
        EncodingError: A text-based kind met bytes that are not valid UTF-8.
        ExtractionError: The region lacks the sub-range the kind needs.
    """
    content, rng = _RENDERERS[kind](region, tree)
    return ContentVariant(kind=kind, content=content, range=rng)


def transform_all(
    region: SnippetRegion, tree: SyntaxTree, kinds: Iterable[TransformKind]
) -> list[ContentVariant]:
    return [transform(region, tree, kind) for kind in kinds]


def normalize_text(text: str, grammar: tree_sitter.Language, pack: LanguagePack) -> str:
    """Apply NORMALIZED rules to free text in the pack's language.

    Syntax errors are tolerated: the text need not be a complete unit.
    """
    source = SourceFile.from_text(pack.language, text)
    tree = parse_source(source, grammar, allow_partial=True)
    return _normalized(tree, ByteRange(0, len(source.content)), TransformKind.NORMALIZED)
