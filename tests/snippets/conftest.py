"""Shared fixtures for snippet extraction tests."""

from __future__ import annotations

import pytest

from snipscan.snippets._internal.grammars import GrammarRegistry
from snipscan.snippets._internal.packs import C_PACK, CPP_PACK, LanguagePack
from snipscan.snippets._internal.syntax import SyntaxTree, parse_source
from snipscan.snippets.models import Language, SourceFile

ADD_C = "int add(int a,int b){return a+b;}"

ADD_C_SPACED = """\
int add(int a, int b)
{

    return a + b;
}
"""

COMMENTED_C = "int f(void) { /* hi */ return 1; // x\n}"

CLASS_CPP = """\
class Point {
public:
    Point() : x_(0) {}
    Point(const Point&) = default;
    int x() const { return x_; }
    virtual void draw() = 0;
private:
    int x_;
};

int Point::y() const { return 0; }

int outer(int v) {
    struct Local { int get() { return 1; } };
    return v;
}
"""


class Samples:
    """Sample sources shared across snippet tests."""

    ADD_C = ADD_C
    ADD_C_SPACED = ADD_C_SPACED
    COMMENTED_C = COMMENTED_C
    CLASS_CPP = CLASS_CPP


@pytest.fixture
def samples() -> type[Samples]:
    return Samples


@pytest.fixture(scope="session")
def c_registry() -> GrammarRegistry:
    pytest.importorskip("tree_sitter_c")
    return GrammarRegistry(enabled=[Language.C])


@pytest.fixture(scope="session")
def cpp_registry() -> GrammarRegistry:
    pytest.importorskip("tree_sitter_cpp")
    return GrammarRegistry(enabled=[Language.CPP])


@pytest.fixture(scope="session")
def registry() -> GrammarRegistry:
    pytest.importorskip("tree_sitter_c")
    pytest.importorskip("tree_sitter_cpp")
    return GrammarRegistry(enabled=[Language.C, Language.CPP])


@pytest.fixture
def parse_c(c_registry: GrammarRegistry):
    """Parse C text (strict unless allow_partial is passed)."""

    def _parse(text: str | bytes, *, allow_partial: bool = False) -> SyntaxTree:
        content = text.encode("utf-8") if isinstance(text, str) else text
        source = SourceFile(language=Language.C, content=content)
        return parse_source(source, c_registry.grammar(Language.C), allow_partial=allow_partial)

    return _parse


@pytest.fixture
def parse_cpp(cpp_registry: GrammarRegistry):
    def _parse(text: str, *, allow_partial: bool = False) -> SyntaxTree:
        source = SourceFile.from_text(Language.CPP, text)
        return parse_source(
            source, cpp_registry.grammar(Language.CPP), allow_partial=allow_partial
        )

    return _parse


@pytest.fixture
def c_pack() -> LanguagePack:
    return C_PACK


@pytest.fixture
def cpp_pack() -> LanguagePack:
    return CPP_PACK
