"""Tests for record assembly."""

from __future__ import annotations

import hashlib

import pytest

from snipscan.core.errors import ErrorCode, ExtractionError
from snipscan.snippets._internal.assembly import assemble_record
from snipscan.snippets.models import (
    ByteRange,
    ContentVariant,
    Fingerprint,
    HashAlgorithm,
    Language,
    RegionKind,
    SnippetRegion,
    SourceFile,
    TransformKind,
)

SOURCE = SourceFile.from_text(Language.C, "int f(void){}")
REGION = SnippetRegion(
    kind=RegionKind.FUNCTION,
    range=ByteRange(0, 13),
    signature=ByteRange(0, 11),
    body=ByteRange(11, 13),
)


def _pair(kind: TransformKind, content: bytes) -> tuple[ContentVariant, Fingerprint]:
    variant = ContentVariant(kind, content, REGION.range)
    return variant, Fingerprint(HashAlgorithm.SHA_256, hashlib.sha256(content).digest())


class TestAssembleRecord:
    def test_pairs_are_ordered_canonically(self) -> None:
        # Given - pairs arriving out of order
        kinds = [TransformKind.FULL, TransformKind.NORMALIZED, TransformKind.SIGNATURE]
        pairs = [
            _pair(TransformKind.SIGNATURE, b"int f ( void )"),
            _pair(TransformKind.FULL, b"int f(void){}"),
            _pair(TransformKind.NORMALIZED, b"int f ( void ) { }"),
        ]

        # When
        record = assemble_record(SOURCE, REGION, kinds, pairs)

        # Then
        assert record.kinds == tuple(kinds)
        assert record.region is REGION
        assert record.source is SOURCE

    def test_missing_kind(self) -> None:
        kinds = [TransformKind.FULL, TransformKind.BODY]

        with pytest.raises(ExtractionError) as exc_info:
            assemble_record(SOURCE, REGION, kinds, [_pair(TransformKind.FULL, b"x")])

        assert exc_info.value.code == ErrorCode.VARIANT_MISSING
        assert exc_info.value.details["kinds"] == ["body"]

    def test_unrequested_kind(self) -> None:
        pairs = [_pair(TransformKind.FULL, b"x"), _pair(TransformKind.SPACE_COLLAPSED, b"x")]

        with pytest.raises(ExtractionError) as exc_info:
            assemble_record(SOURCE, REGION, [TransformKind.FULL], pairs)

        assert exc_info.value.code == ErrorCode.VARIANT_UNEXPECTED
        assert exc_info.value.details["kinds"] == ["space_collapsed"]

    def test_repeated_kind(self) -> None:
        pairs = [_pair(TransformKind.FULL, b"x"), _pair(TransformKind.FULL, b"y")]

        with pytest.raises(ExtractionError) as exc_info:
            assemble_record(SOURCE, REGION, [TransformKind.FULL], pairs)

        assert exc_info.value.code == ErrorCode.VARIANT_UNEXPECTED
        assert exc_info.value.details["kinds"] == ["full"]
