"""Tests for the extraction pipeline (extract / extract_many).

Tests cover:
- Record content and fingerprints for simple files
- Determinism and layout-insensitive fingerprints
- Eager vs lazy errors
- Region error policy (abort / skip) and internal error wrapping
- Batch isolation
"""

from __future__ import annotations

import hashlib
from unittest.mock import patch

import pytest

from snipscan.core.errors import (
    ConfigError,
    EncodingError,
    ErrorCode,
    ExtractionError,
    ParseError,
    UnsupportedLanguageError,
)
from snipscan.core.logging import clear_scan_id, set_scan_id
from snipscan.snippets import (
    ExtractionOptions,
    Language,
    RegionErrorPolicy,
    RegionKind,
    SourceFile,
    TransformKind,
    extract,
    extract_many,
)

BAD_FIRST = b"int a(void) { return 0; /* \xff */ }\nint b(void) { return 1; }\n"
BAD_SECOND = b"int a(void) { return 0; }\nint b(void) { return 1; /* \xff */ }\n"


def _c(text: str | bytes, path: str | None = None) -> SourceFile:
    content = text.encode("utf-8") if isinstance(text, str) else text
    return SourceFile(language=Language.C, content=content, path=path)


class TestExtract:
    """Happy-path extraction."""

    def test_single_function_record(self, registry, samples) -> None:
        # Given
        source = _c(samples.ADD_C, path="add.c")

        # When
        (record,) = list(extract(source, registry=registry))

        # Then
        assert record.region.kind is RegionKind.FUNCTION
        assert record.kinds == (
            TransformKind.FULL,
            TransformKind.NORMALIZED,
            TransformKind.SIGNATURE,
        )
        assert record.variant(TransformKind.FULL).content == source.content
        assert record.fingerprint(TransformKind.FULL).digest == hashlib.sha256(
            source.content
        ).digest()
        assert record.source is source

    def test_empty_source_has_no_records(self, registry) -> None:
        assert list(extract(_c(b""), registry=registry)) == []

    def test_file_without_functions(self, registry) -> None:
        assert list(extract(_c("int counter;\n"), registry=registry)) == []

    def test_one_record_per_region_in_order(self, registry) -> None:
        source = _c("void b(void) {}\nvoid a(void) {}\n")

        names = [r.region.name for r in extract(source, registry=registry)]

        assert names == ["b", "a"]

    def test_cpp_methods(self, registry, samples) -> None:
        source = SourceFile.from_text(Language.CPP, samples.CLASS_CPP)

        records = list(extract(source, registry=registry))

        assert len(records) == 5
        assert {r.region.kind for r in records} == {RegionKind.FUNCTION, RegionKind.METHOD}

    def test_all_transforms_and_sha512(self, registry, samples) -> None:
        options = ExtractionOptions.build(
            transforms=list(TransformKind), hash_algorithm="sha_512"
        )

        (record,) = list(extract(_c(samples.COMMENTED_C), options, registry=registry))

        assert record.kinds == tuple(TransformKind)
        assert all(len(fp.digest) == 64 for _, fp in record.variants)


class TestFingerprintStability:
    def test_repeated_runs_are_identical(self, registry, samples) -> None:
        source = SourceFile.from_text(Language.CPP, samples.CLASS_CPP)

        first = [r.to_dict() for r in extract(source, registry=registry)]
        second = [r.to_dict() for r in extract(source, registry=registry)]

        assert first == second

    def test_same_function_in_two_files(self, registry, samples) -> None:
        # Given - the same function at different offsets and layouts
        one = _c(samples.ADD_C, path="one.c")
        two = _c("int other(void) { return 0; }\n\n" + samples.ADD_C_SPACED, path="two.c")

        # When
        (a,) = list(extract(one, registry=registry))
        b = [r for r in extract(two, registry=registry) if r.region.name == "add"][0]

        # Then
        assert a.fingerprint(TransformKind.NORMALIZED) == b.fingerprint(TransformKind.NORMALIZED)
        assert a.fingerprint(TransformKind.SIGNATURE) == b.fingerprint(TransformKind.SIGNATURE)
        assert a.fingerprint(TransformKind.FULL) != b.fingerprint(TransformKind.FULL)

    def test_comment_edit_only_changes_full(self, registry) -> None:
        before = _c("int f(void) { return 1; }")
        after = _c("int f(void) { /* one */ return 1; }")

        (a,) = list(extract(before, registry=registry))
        (b,) = list(extract(after, registry=registry))

        assert a.fingerprint(TransformKind.NORMALIZED) == b.fingerprint(TransformKind.NORMALIZED)
        assert a.fingerprint(TransformKind.FULL) != b.fingerprint(TransformKind.FULL)


class TestEagerErrors:
    """Errors raised by extract() itself, before any parsing."""

    def test_language_not_enabled(self, c_registry, samples) -> None:
        source = SourceFile.from_text(Language.CPP, samples.CLASS_CPP)

        with pytest.raises(UnsupportedLanguageError):
            extract(source, registry=c_registry)

    def test_no_transforms(self, registry, samples) -> None:
        options = ExtractionOptions.model_construct(transforms=())

        with pytest.raises(ConfigError) as exc_info:
            extract(_c(samples.ADD_C), options, registry=registry)

        assert exc_info.value.code == ErrorCode.CONFIG_NO_TRANSFORMS

    def test_missing_hash_backend(self, registry, samples) -> None:
        options = ExtractionOptions.build(hash_backend="pycryptodome")

        with (
            patch("snipscan.snippets._internal.fingerprint.find_spec", return_value=None),
            pytest.raises(ConfigError) as exc_info,
        ):
            extract(_c(samples.ADD_C), options, registry=registry)

        assert exc_info.value.code == ErrorCode.HASH_BACKEND_UNAVAILABLE


class TestParsePolicy:
    def test_syntax_error_raised_on_first_next(self, registry) -> None:
        # Given
        stream = extract(_c("int f(void) { return 1 +"), registry=registry)

        # When / Then - nothing is parsed until the stream is consumed
        with pytest.raises(ParseError) as exc_info:
            next(stream)

        assert exc_info.value.code == ErrorCode.PARSE_SYNTAX_ERROR

    def test_partial_parse_keeps_good_regions(self, registry) -> None:
        options = ExtractionOptions(allow_partial_parse=True)
        source = _c("int f(void) { return 1; }\nint g(void) { return 1 +")

        names = [r.region.name for r in extract(source, options, registry=registry).drain().records]

        assert "f" in names


class TestRegionErrorPolicy:
    def test_abort_stops_at_failing_region(self, registry) -> None:
        options = ExtractionOptions(allow_partial_parse=True)
        stream = extract(_c(BAD_FIRST), options, registry=registry)

        with pytest.raises(EncodingError) as exc_info:
            next(stream)

        assert exc_info.value.details["offset"] == BAD_FIRST.index(b"\xff")
        with pytest.raises(StopIteration):
            next(stream)

    def test_abort_keeps_earlier_records(self, registry) -> None:
        options = ExtractionOptions(allow_partial_parse=True)

        outcome = extract(_c(BAD_SECOND), options, registry=registry).drain()

        assert [r.region.name for r in outcome.records] == ["a"]
        assert isinstance(outcome.error, EncodingError)
        assert not outcome.ok

    def test_skip_continues_past_failing_region(self, registry) -> None:
        options = ExtractionOptions(
            allow_partial_parse=True, on_region_error=RegionErrorPolicy.SKIP
        )

        outcome = extract(_c(BAD_FIRST), options, registry=registry).drain()

        assert outcome.ok
        assert [r.region.name for r in outcome.records] == ["b"]

    def test_byte_only_transforms_accept_invalid_utf8(self, registry) -> None:
        options = ExtractionOptions(
            transforms=(TransformKind.FULL, TransformKind.COMMENT_STRIPPED),
            allow_partial_parse=True,
        )

        records = list(extract(_c(BAD_FIRST), options, registry=registry))

        assert len(records) == 2

    def test_unexpected_failure_is_wrapped(self, registry, samples) -> None:
        with (
            patch("snipscan.snippets.ops.transform_all", side_effect=RuntimeError("boom")),
            pytest.raises(ExtractionError) as exc_info,
        ):
            list(extract(_c(samples.ADD_C), registry=registry))

        assert exc_info.value.code == ErrorCode.INTERNAL_ERROR
        assert exc_info.value.details["exception"] == "RuntimeError"
        assert exc_info.value.details["start"] == 0


class TestSnippetStream:
    def test_scan_id_is_explicit_or_contextual(self, registry, samples) -> None:
        assert extract(_c(samples.ADD_C), registry=registry, scan_id="abc").scan_id == "abc"

        set_scan_id("ctx-1")
        try:
            assert extract(_c(samples.ADD_C), registry=registry).scan_id == "ctx-1"
        finally:
            clear_scan_id()

    def test_close_ends_stream(self, registry) -> None:
        stream = extract(_c("void a(void) {}\nvoid b(void) {}\n"), registry=registry)

        next(stream)
        stream.close()

        with pytest.raises(StopIteration):
            next(stream)

    def test_context_manager(self, registry, samples) -> None:
        with extract(_c(samples.ADD_C), registry=registry) as stream:
            records = list(stream)

        assert len(records) == 1


class TestExtractMany:
    def test_failures_are_isolated_per_file(self, registry, samples) -> None:
        # Given
        sources = [
            _c(samples.ADD_C, path="ok.c"),
            _c("int f(void) { return 1 +", path="broken.c"),
            SourceFile.from_text(Language.CPP, samples.CLASS_CPP, path="point.cpp"),
        ]

        # When
        results = list(extract_many(sources, registry=registry))

        # Then
        assert [src.path for src, _ in results] == ["ok.c", "broken.c", "point.cpp"]
        ok, broken, point = (outcome for _, outcome in results)
        assert ok.ok and len(ok.records) == 1
        assert isinstance(broken.error, ParseError) and broken.records == []
        assert point.ok and len(point.records) == 5

    def test_eager_error_becomes_outcome(self, c_registry, samples) -> None:
        sources = [SourceFile.from_text(Language.CPP, samples.CLASS_CPP)]

        ((_, outcome),) = list(extract_many(sources, registry=c_registry))

        assert isinstance(outcome.error, UnsupportedLanguageError)
        assert outcome.records == []
