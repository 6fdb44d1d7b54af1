"""LanguagePack: the per-language rule table for snippet extraction.

Each supported language has exactly ONE LanguagePack consolidating:
- Grammar install metadata (package, module, loader function)
- Node types that define snippet-worthy regions
- Node types that scope methods (class bodies)
- Comment and atomic token node types used by the transforms

The PACKS registry is the canonical lookup: ``PACKS[Language.C]``.
"""

from __future__ import annotations

from dataclasses import dataclass

from snipscan.snippets.models import Language

# =========================================================================
# Dataclass
# =========================================================================


@dataclass(frozen=True)
class LanguagePack:
    """Complete tree-sitter configuration for a single language."""

    # -- Identity --
    language: Language

    # -- Grammar install --
    grammar_package: str  # PyPI package ("tree-sitter-c")
    grammar_module: str  # Python import ("tree_sitter_c")
    language_func: str = "language"

    # -- Region location --
    function_types: frozenset[str] = frozenset({"function_definition"})
    class_body_types: frozenset[str] = frozenset()
    # A definition whose children include one of these has no body (= default etc.)
    no_body_types: frozenset[str] = frozenset()
    declarator_field: str = "declarator"
    body_field: str = "body"
    parameters_type: str = "parameter_list"
    # Types that wrap another declarator in their own `declarator` field
    name_types: frozenset[str] = frozenset({"identifier", "field_identifier"})

    # -- Transforms --
    comment_types: frozenset[str] = frozenset({"comment"})
    # Kept as one token by NORMALIZED even though the grammar splits them
    atomic_types: frozenset[str] = frozenset(
        {
            "string_literal",
            "char_literal",
            "system_lib_string",
            "preproc_arg",
        }
    )


# =========================================================================
# C / C++
# =========================================================================

C_PACK = LanguagePack(
    language=Language.C,
    grammar_package="tree-sitter-c",
    grammar_module="tree_sitter_c",
)

CPP_PACK = LanguagePack(
    language=Language.CPP,
    grammar_package="tree-sitter-cpp",
    grammar_module="tree_sitter_cpp",
    class_body_types=frozenset({"field_declaration_list"}),
    no_body_types=frozenset(
        {"default_method_clause", "delete_method_clause", "pure_virtual_clause"}
    ),
    name_types=frozenset(
        {
            "identifier",
            "field_identifier",
            "qualified_identifier",
            "destructor_name",
            "operator_name",
            "template_function",
        }
    ),
    atomic_types=frozenset(
        {
            "string_literal",
            "char_literal",
            "raw_string_literal",
            "system_lib_string",
            "preproc_arg",
        }
    ),
)

_ALL_PACKS: tuple[LanguagePack, ...] = (C_PACK, CPP_PACK)

PACKS: dict[Language, LanguagePack] = {pack.language: pack for pack in _ALL_PACKS}


# =========================================================================
# Public API
# =========================================================================


def get_pack(language: Language) -> LanguagePack:
    """Get the LanguagePack for a language. Every Language has one."""
    return PACKS[language]
