"""Syntax tree adapter over tree-sitter.

Tree-sitter nodes are re-read into plain ``SyntaxNode`` objects once per
parse. Each node carries its grammar tag plus a shared ``NodeKind`` drawn
from the language pack, so the locator and transforms never branch on
grammar-specific strings themselves.

Children are owned by their parent; the parent link is a weak reference used
for upward queries only. Holding the ``SyntaxTree`` keeps every node alive.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import tree_sitter

from snipscan.core.errors import ParseError
from snipscan.core.logging import get_logger
from snipscan.snippets._internal.packs import LanguagePack, get_pack
from snipscan.snippets.models import ByteRange, Language, SourceFile

log = get_logger("snippets.syntax")


class NodeKind(str, Enum):
    """Grammar-independent role of a node."""

    FUNCTION = "function"
    DECLARATOR = "declarator"
    PARAMETERS = "parameters"
    BODY = "body"
    CLASS_BODY = "class_body"
    COMMENT = "comment"
    ATOMIC = "atomic"  # multi-token literal kept whole (strings, chars)
    ERROR = "error"  # ERROR or MISSING node produced by recovery
    TOKEN = "token"  # any other leaf
    OTHER = "other"
    TRIVIA = "trivia"  # synthetic span between tokens; never a node kind


class SyntaxNode:
    """A node of the adapted tree."""

    __slots__ = (
        "type",
        "kind",
        "range",
        "children",
        "field_name",
        "is_named",
        "is_missing",
        "start_point",
        "_parent",
        "__weakref__",
    )

    def __init__(
        self,
        type: str,
        kind: NodeKind,
        range: ByteRange,
        *,
        field_name: str | None = None,
        is_named: bool = True,
        is_missing: bool = False,
        start_point: tuple[int, int] = (0, 0),
        parent: SyntaxNode | None = None,
    ) -> None:
        self.type = type
        self.kind = kind
        self.range = range
        self.children: list[SyntaxNode] = []
        self.field_name = field_name
        self.is_named = is_named
        self.is_missing = is_missing
        self.start_point = start_point
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> SyntaxNode | None:
        return self._parent() if self._parent is not None else None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.ancestors())

    def ancestors(self) -> Iterator[SyntaxNode]:
        """Yield enclosing nodes, nearest first."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def field(self, name: str) -> SyntaxNode | None:
        for child in self.children:
            if child.field_name == name:
                return child
        return None

    def __repr__(self) -> str:
        return f"SyntaxNode({self.type!r}, {self.kind.value}, {self.range})"


@dataclass(frozen=True, slots=True)
class LeafSpan:
    """A leaf-level slice of the source: a token, a comment, or the trivia between."""

    kind: NodeKind
    range: ByteRange
    node_type: str | None = None


@dataclass
class SyntaxTree:
    """An adapted parse of one source buffer."""

    root: SyntaxNode
    source: bytes = field(repr=False)
    language: Language
    errors: list[SyntaxNode] = field(default_factory=list, repr=False)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def text(self, node: SyntaxNode) -> bytes:
        return node.range.slice(self.source)

    def walk(self, start: SyntaxNode | None = None) -> Iterator[SyntaxNode]:
        """Deterministic pre-order traversal from ``start`` (default: root)."""
        stack = [start or self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def leaf_spans(
        self, within: ByteRange | None = None, start: SyntaxNode | None = None
    ) -> Iterator[LeafSpan]:
        """Cover ``within`` (default: the whole source) with leaf-level spans.

        Tokens, comments and atomic literals become spans of their own kind;
        every byte not inside one becomes TRIVIA. Spans are yielded in order
        and never overlap, including for trees with recovered errors.
        """
        bounds = within or ByteRange(0, len(self.source))
        pos = bounds.start
        stack = [start or self.root]
        while stack:
            node = stack.pop()
            if node.range.end <= pos or node.range.start >= bounds.end:
                continue
            if node.children and node.kind not in (NodeKind.ATOMIC, NodeKind.COMMENT):
                stack.extend(reversed(node.children))
                continue
            span_start = max(node.range.start, pos)
            span_end = min(node.range.end, bounds.end)
            if span_end <= span_start:
                continue
            if span_start > pos:
                yield LeafSpan(NodeKind.TRIVIA, ByteRange(pos, span_start))
            yield LeafSpan(node.kind, ByteRange(span_start, span_end), node.type)
            pos = span_end
        if pos < bounds.end:
            yield LeafSpan(NodeKind.TRIVIA, ByteRange(pos, bounds.end))


def _classify(
    ts_node: Any, field_name: str | None, parent: SyntaxNode | None, pack: LanguagePack
) -> NodeKind:
    node_type = ts_node.type
    if node_type == "ERROR" or ts_node.is_missing:
        return NodeKind.ERROR
    if node_type in pack.comment_types:
        return NodeKind.COMMENT
    if node_type in pack.function_types:
        return NodeKind.FUNCTION
    if node_type in pack.class_body_types:
        return NodeKind.CLASS_BODY
    if node_type == pack.parameters_type:
        return NodeKind.PARAMETERS
    if parent is not None and parent.kind is NodeKind.FUNCTION:
        if field_name == pack.body_field:
            return NodeKind.BODY
        if field_name == pack.declarator_field:
            return NodeKind.DECLARATOR
    if node_type in pack.atomic_types:
        return NodeKind.ATOMIC
    if ts_node.child_count == 0:
        return NodeKind.TOKEN
    return NodeKind.OTHER


def _adapt(
    ts_node: Any, field_name: str | None, parent: SyntaxNode | None, pack: LanguagePack
) -> SyntaxNode:
    point = ts_node.start_point
    return SyntaxNode(
        ts_node.type,
        _classify(ts_node, field_name, parent, pack),
        ByteRange(ts_node.start_byte, ts_node.end_byte),
        field_name=field_name,
        is_named=ts_node.is_named,
        is_missing=ts_node.is_missing,
        start_point=(point[0], point[1]),
        parent=parent,
    )


def _build(ts_tree: tree_sitter.Tree, pack: LanguagePack) -> tuple[SyntaxNode, list[SyntaxNode]]:
    """Adapt a tree-sitter tree iteratively with a cursor."""
    cursor = ts_tree.walk()
    root = _adapt(cursor.node, None, None, pack)
    errors: list[SyntaxNode] = [root] if root.kind is NodeKind.ERROR else []
    current = root

    while True:
        if cursor.goto_first_child():
            parent = current
        else:
            while not cursor.goto_next_sibling():
                if not cursor.goto_parent():
                    return root, errors
                current = current.parent  # type: ignore[assignment]
            parent = current.parent  # type: ignore[assignment]
        node = _adapt(cursor.node, cursor.field_name, parent, pack)
        parent.children.append(node)
        if node.kind is NodeKind.ERROR:
            errors.append(node)
        current = node


def _error_location(node: SyntaxNode) -> dict[str, Any]:
    return {
        "line": node.start_point[0] + 1,
        "column": node.start_point[1] + 1,
        "byte": node.range.start,
        "missing": node.is_missing,
    }


def parse_source(
    source: SourceFile, grammar: tree_sitter.Language, *, allow_partial: bool = False
) -> SyntaxTree:
    """Parse a source file into an adapted syntax tree.

    Args:
        source: Language tag and bytes to parse.
        grammar: The compiled grammar for ``source.language``.
        allow_partial: Accept trees with ERROR/MISSING nodes, logging each
            one as a warning. When False any such node is a ParseError.

    Raises:
        ParseError: No tree was produced, or the tree has syntax errors and
            ``allow_partial`` is False.
    """
    pack = get_pack(source.language)
    parser = tree_sitter.Parser()
    parser.language = grammar
    ts_tree = parser.parse(source.content)
    if ts_tree is None or ts_tree.root_node is None:
        raise ParseError.no_tree(source.language.value)

    root, errors = _build(ts_tree, pack)
    tree = SyntaxTree(root=root, source=source.content, language=source.language, errors=errors)

    if errors:
        if not allow_partial:
            raise ParseError.syntax_error(
                source.language.value, len(errors), _error_location(errors[0])
            )
        for node in errors:
            log.warning(
                "syntax_error_recovered",
                language=source.language.value,
                path=source.path,
                **_error_location(node),
            )

    log.debug(
        "source_parsed",
        language=source.language.value,
        size=len(source.content),
        error_count=len(errors),
    )
    return tree
