"""Tree-sitter grammar registry.

Grammars ship as separate distributions (``tree-sitter-c``, ``tree-sitter-cpp``)
selected through package extras, so the set a process can parse is fixed at
install time. A registry intersects that set with an explicit capability set
and loads each grammar once; afterwards it is read-only and may be shared.
"""

from __future__ import annotations

import importlib
from collections.abc import Iterable
from functools import cache
from importlib.util import find_spec

import tree_sitter

from snipscan.core.errors import UnsupportedLanguageError
from snipscan.core.logging import get_logger
from snipscan.snippets._internal.packs import PACKS, LanguagePack
from snipscan.snippets.models import Language

log = get_logger("snippets.grammars")


def is_grammar_installed(language: Language) -> bool:
    """Check if the grammar package for a language is installed."""
    return find_spec(PACKS[language].grammar_module) is not None


def installed_languages() -> list[Language]:
    return [lang for lang in Language if is_grammar_installed(lang)]


def _load_grammar(pack: LanguagePack) -> tree_sitter.Language:
    try:
        module = importlib.import_module(pack.grammar_module)
        language_fn = getattr(module, pack.language_func)
    except (ImportError, AttributeError) as err:
        raise UnsupportedLanguageError.grammar_unavailable(
            pack.language.value, pack.grammar_module, pack.grammar_package
        ) from err
    return tree_sitter.Language(language_fn())


class GrammarRegistry:
    """Maps a Language to its compiled tree-sitter grammar.

    Usage::

        registry = GrammarRegistry(enabled=[Language.C])
        grammar = registry.grammar(Language.C)

    Args:
        enabled: Languages this registry may serve. None means every
            language whose grammar package is installed. Naming a language
            whose grammar is missing is an error at construction time.
    """

    __slots__ = ("_grammars",)

    def __init__(self, enabled: Iterable[Language] | None = None) -> None:
        languages = installed_languages() if enabled is None else list(dict.fromkeys(enabled))
        grammars: dict[Language, tree_sitter.Language] = {}
        for language in languages:
            grammars[language] = _load_grammar(PACKS[language])
        self._grammars = grammars
        log.debug("grammar_registry_ready", languages=[lang.value for lang in grammars])

    @property
    def languages(self) -> list[Language]:
        return list(self._grammars)

    def supports(self, language: Language) -> bool:
        return language in self._grammars

    def grammar(self, language: Language) -> tree_sitter.Language:
        """Return the grammar for a language.

        Raises:
            UnsupportedLanguageError: The language is disabled in this registry
                or its grammar is not installed.
        """
        grammar = self._grammars.get(language)
        if grammar is None:
            pack = PACKS[language]
            if not is_grammar_installed(language):
                raise UnsupportedLanguageError.grammar_unavailable(
                    language.value, pack.grammar_module, pack.grammar_package
                )
            raise UnsupportedLanguageError.not_enabled(
                language.value, [lang.value for lang in self._grammars]
            )
        return grammar

    def __repr__(self) -> str:
        return f"GrammarRegistry(enabled={[lang.value for lang in self._grammars]})"


@cache
def default_registry() -> GrammarRegistry:
    """Process-wide registry with every installed grammar, built on first use."""
    return GrammarRegistry()
