"""Extraction pipeline: the public entry point for snippet fingerprinting.

``extract()`` checks everything that can be checked without parsing
(language capability, options, hash backend) and raises those errors
immediately. It returns a lazy ``SnippetStream``; the source is parsed on
the first ``next()`` and each region is transformed, fingerprinted and
assembled only when its record is requested.

Pipeline per file:
    parse -> locate -> (transform -> fingerprint -> assemble) per region
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from snipscan.core.errors import ConfigError, ExtractionError, SnipscanError
from snipscan.core.logging import get_logger, get_scan_id, new_scan_id
from snipscan.snippets._internal.assembly import assemble_record
from snipscan.snippets._internal.fingerprint import Fingerprinter
from snipscan.snippets._internal.grammars import GrammarRegistry, default_registry
from snipscan.snippets._internal.locator import locate
from snipscan.snippets._internal.packs import get_pack
from snipscan.snippets._internal.syntax import SyntaxTree, parse_source
from snipscan.snippets._internal.transforms import transform_all
from snipscan.snippets.models import (
    ExtractionOptions,
    RegionErrorPolicy,
    SnippetRecord,
    SnippetRegion,
    SourceFile,
)

log = get_logger("snippets.ops")


@dataclass
class ExtractionOutcome:
    """Everything a stream produced, plus the error that ended it (if any)."""

    records: list[SnippetRecord] = field(default_factory=list)
    error: SnipscanError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SnippetStream:
    """Finite, ordered, non-restartable iterator of SnippetRecord.

    A failing region raises its error from ``next()``; records already
    yielded stay valid and the stream is exhausted afterwards. Closing the
    stream (or leaving a ``with`` block) releases the parsed tree.
    """

    __slots__ = ("source", "scan_id", "_records")

    def __init__(self, source: SourceFile, scan_id: str, records: Iterator[SnippetRecord]) -> None:
        self.source = source
        self.scan_id = scan_id
        self._records = records

    def __iter__(self) -> SnippetStream:
        return self

    def __next__(self) -> SnippetRecord:
        return next(self._records)

    def close(self) -> None:
        close = getattr(self._records, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> SnippetStream:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def drain(self) -> ExtractionOutcome:
        """Consume the rest of the stream without raising pipeline errors."""
        outcome = ExtractionOutcome()
        try:
            for record in self:
                outcome.records.append(record)
        except SnipscanError as e:
            outcome.error = e
        return outcome


def _build_record(
    source: SourceFile,
    region: SnippetRegion,
    tree: SyntaxTree,
    options: ExtractionOptions,
    fingerprinter: Fingerprinter,
) -> SnippetRecord:
    variants = transform_all(region, tree, options.transforms)
    pairs = [(variant, fingerprinter.fingerprint(variant.content)) for variant in variants]
    return assemble_record(source, region, options.transforms, pairs)


def _records(
    source: SourceFile,
    grammar: Any,
    options: ExtractionOptions,
    fingerprinter: Fingerprinter,
    logger: Any,
) -> Iterator[SnippetRecord]:
    if not source.content:
        logger.debug("empty_source")
        return

    tree = parse_source(source, grammar, allow_partial=options.allow_partial_parse)
    pack = get_pack(source.language)
    emitted = 0
    skipped = 0

    for item in locate(tree, pack):
        region_error: SnipscanError | None = None
        record: SnippetRecord | None = None
        if isinstance(item, ExtractionError):
            region_error = item
        else:
            try:
                record = _build_record(source, item, tree, options, fingerprinter)
            except SnipscanError as e:
                region_error = e
            except Exception as e:
                region_error = ExtractionError.internal(
                    str(e),
                    exception=type(e).__name__,
                    start=item.range.start,
                    end=item.range.end,
                )

        if region_error is not None:
            if options.on_region_error is RegionErrorPolicy.SKIP:
                skipped += 1
                logger.warning(
                    "region_skipped", error=region_error.error_name, reason=region_error.message
                )
                continue
            logger.warning(
                "region_failed", error=region_error.error_name, reason=region_error.message
            )
            raise region_error

        if record is not None:
            emitted += 1
            yield record

    logger.info("extraction_complete", records=emitted, skipped=skipped)


def extract(
    source: SourceFile,
    options: ExtractionOptions | None = None,
    *,
    registry: GrammarRegistry | None = None,
    scan_id: str | None = None,
) -> SnippetStream:
    """Extract snippet records from one source file.

    Args:
        source: Language tag and file bytes. Never modified.
        options: Transforms, hash and error policy. Defaults to
            FULL + NORMALIZED + SIGNATURE with SHA-256.
        registry: Grammar registry to use. Defaults to the process-wide one.
        scan_id: Correlation ID for log lines. Defaults to the current
            context's scan ID, or a new one.

    Returns:
        A lazy stream of one record per located region.

    Raises:
        UnsupportedLanguageError: The language is not enabled or installed.
        ConfigError: No transforms requested, or the hash backend is missing.
    """
    options = options or ExtractionOptions()
    if not options.transforms:
        raise ConfigError.no_transforms()

    grammar = (registry or default_registry()).grammar(source.language)
    fingerprinter = Fingerprinter(options.hash_algorithm, options.hash_backend)

    sid = scan_id or get_scan_id() or new_scan_id()
    logger = log.bind(scan_id=sid, language=source.language.value, path=source.path)
    logger.debug(
        "extraction_started",
        size=len(source.content),
        transforms=[kind.value for kind in options.transforms],
        algorithm=options.hash_algorithm.value,
        backend=options.hash_backend.value,
    )
    return SnippetStream(source, sid, _records(source, grammar, options, fingerprinter, logger))


def extract_many(
    sources: Iterable[SourceFile],
    options: ExtractionOptions | None = None,
    *,
    registry: GrammarRegistry | None = None,
) -> Iterator[tuple[SourceFile, ExtractionOutcome]]:
    """Extract from several files, isolating failures per file.

    All files share one scan ID. A file that fails (eagerly or mid-stream)
    yields an outcome carrying the error and whatever records preceded it.
    """
    sid = get_scan_id() or new_scan_id()
    files = 0
    failed = 0
    for source in sources:
        files += 1
        try:
            outcome = extract(source, options, registry=registry, scan_id=sid).drain()
        except SnipscanError as e:
            outcome = ExtractionOutcome(error=e)
        if not outcome.ok:
            failed += 1
        yield source, outcome
    log.info("batch_complete", scan_id=sid, files=files, failed=failed)
