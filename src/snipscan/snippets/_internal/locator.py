"""Snippet locator: finds function-like regions in an adapted syntax tree.

A node is snippet-worthy when its type is one of the pack's function types
and it has a body. Defaulted, deleted and pure-virtual definitions carry a
clause instead of a body and are not snippets.
"""

from __future__ import annotations

from snipscan.core.errors import ExtractionError
from snipscan.core.logging import get_logger
from snipscan.snippets._internal.packs import LanguagePack
from snipscan.snippets._internal.syntax import NodeKind, SyntaxNode, SyntaxTree
from snipscan.snippets.models import ByteRange, RegionKind, SnippetRegion

log = get_logger("snippets.locator")


def _region_kind(node: SyntaxNode) -> RegionKind:
    # Nearest enclosing class body wins over an enclosing function.
    for ancestor in node.ancestors():
        if ancestor.kind is NodeKind.CLASS_BODY:
            return RegionKind.METHOD
        if ancestor.kind is NodeKind.FUNCTION:
            return RegionKind.FUNCTION
    return RegionKind.FUNCTION


def _function_depth(node: SyntaxNode) -> int:
    return sum(1 for ancestor in node.ancestors() if ancestor.kind is NodeKind.FUNCTION)


def _find_parameters(declarator: SyntaxNode, tree: SyntaxTree) -> SyntaxNode | None:
    for node in tree.walk(declarator):
        if node.kind is NodeKind.PARAMETERS:
            return node
    return None


def _declared_name(declarator: SyntaxNode, tree: SyntaxTree, pack: LanguagePack) -> str | None:
    node: SyntaxNode | None = declarator
    while node is not None:
        if node.type in pack.name_types:
            return tree.text(node).decode("utf-8", errors="replace")
        node = node.field(pack.declarator_field)
    return None


def _has_no_body_clause(node: SyntaxNode, pack: LanguagePack) -> bool:
    return any(child.type in pack.no_body_types for child in node.children)


def _region_for(node: SyntaxNode, tree: SyntaxTree, pack: LanguagePack) -> SnippetRegion:
    start, end = node.range.start, node.range.end
    if end > len(tree.source):
        raise ExtractionError.out_of_bounds(start, end, len(tree.source))

    body = node.field(pack.body_field)
    if body is None:
        raise ExtractionError.malformed(node.type, start, end, "no body")
    declarator = node.field(pack.declarator_field)
    if declarator is None:
        raise ExtractionError.malformed(node.type, start, end, "no declarator")
    if _find_parameters(declarator, tree) is None:
        raise ExtractionError.malformed(node.type, start, end, "no parameter list")

    return SnippetRegion(
        kind=_region_kind(node),
        range=node.range,
        signature=ByteRange(start, declarator.range.end),
        body=body.range,
        depth=_function_depth(node),
        name=_declared_name(declarator, tree, pack),
    )


def locate(tree: SyntaxTree, pack: LanguagePack) -> list[SnippetRegion | ExtractionError]:
    """Locate every region, keeping per-region failures in position.

    Returns regions and errors ordered by start offset ascending, then region
    kind, then depth (outer first). Callers decide whether an error ends the
    scan or is skipped.
    """
    located: list[tuple[tuple[int, int, int], SnippetRegion | ExtractionError]] = []
    seen: set[tuple[RegionKind, ByteRange]] = set()

    for node in tree.walk():
        if node.kind is not NodeKind.FUNCTION or _has_no_body_clause(node, pack):
            continue
        try:
            region = _region_for(node, tree, pack)
        except ExtractionError as e:
            log.debug("region_rejected", node_type=node.type, error=e.error_name)
            located.append(((node.range.start, 0, _function_depth(node)), e))
            continue

        identity = (region.kind, region.range)
        if identity in seen:
            err = ExtractionError.duplicate(region.kind.value, region.range.start, region.range.end)
            located.append((region.sort_key, err))
            continue
        seen.add(identity)
        log.debug(
            "region_located",
            kind=region.kind.value,
            name=region.name,
            location=str(region.range),
            depth=region.depth,
        )
        located.append((region.sort_key, region))

    located.sort(key=lambda item: item[0])
    return [item for _, item in located]


def locate_regions(tree: SyntaxTree, pack: LanguagePack) -> list[SnippetRegion]:
    """Locate every region, failing on the first one that cannot be computed.

    Raises:
        ExtractionError: A function definition is malformed, out of bounds,
            or duplicates another region.
    """
    regions: list[SnippetRegion] = []
    for item in locate(tree, pack):
        if isinstance(item, ExtractionError):
            raise item
        regions.append(item)
    return regions
