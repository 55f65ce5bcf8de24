"""
VeloxI18n — Named translators.

Each translator serves one namespace (``main``, ``routes``, ...) of
``key -> {language -> text}`` entries. A per-application
``TranslatorRegistry`` hands them out by name.

Lookup rules:

- ``%``-style arguments are applied to the text
- output is HTML-escaped unless the key ends in ``:html``
- a missing key raises ``MissingTranslationError`` in debug mode and
  returns the key itself otherwise
"""

from __future__ import annotations

import html
import logging
from typing import Any, Dict, Iterator, Mapping, Optional

from velox.faults import MissingTranslationError

logger = logging.getLogger("velox.i18n")

HTML_SUFFIX = ":html"

TranslationTable = Dict[str, Dict[Any, str]]


class Translator:
    """Translations of one namespace in the current language."""

    def __init__(
        self,
        name: str,
        translations: Optional[Mapping[str, Mapping[Any, str]]] = None,
        language: Any = 1,
        debug: bool = False,
    ):
        self.name = name
        self.language = language
        self.debug = debug
        self._translations: TranslationTable = {}
        self.add_translations(translations or {})

    def add_translations(self, translations: Mapping[str, Mapping[Any, str]]) -> None:
        for key, languages in translations.items():
            self._translations.setdefault(key, {}).update(languages)

    def set_language(self, language: Any) -> None:
        self.language = language

    def _lookup(self, key: str, language: Any = None) -> Optional[str]:
        languages = self._translations.get(key)
        if not languages:
            return None
        language = self.language if language is None else language
        if language in languages:
            return languages[language]
        # YAML/JSON/env sources may key languages as strings
        return languages.get(str(language))

    def translation_exists(self, key: str, language: Any = None) -> bool:
        if key.endswith(HTML_SUFFIX):
            key = key[: -len(HTML_SUFFIX)]
        return self._lookup(key, language) is not None

    def translate(self, key: str, *args: Any) -> str:
        raw = key.endswith(HTML_SUFFIX)
        lookup_key = key[: -len(HTML_SUFFIX)] if raw else key

        text = self._lookup(lookup_key)
        if text is None:
            if self.debug:
                raise MissingTranslationError(self.name, lookup_key)
            logger.debug(f"Missing translation '{lookup_key}' in '{self.name}'")
            return key

        if args:
            text = text % args
        return text if raw else html.escape(text)

    __call__ = translate

    def get_if_exists(self, key: str, *args: Any) -> Optional[str]:
        """Translated text, or ``None`` instead of the missing-key behaviour."""
        if not self.translation_exists(key):
            return None
        return self.translate(key, *args)

    def __contains__(self, key: str) -> bool:
        return self.translation_exists(key)

    def __repr__(self) -> str:
        return f"<Translator {self.name} language={self.language!r} keys={len(self._translations)}>"


class TranslatorRegistry:
    """
    Per-application set of named translators.

    Unknown names yield an empty translator so lookups degrade to the
    missing-key behaviour instead of failing.
    """

    MAIN = "main"
    ROUTES = "routes"

    def __init__(
        self,
        translations: Optional[Mapping[str, Mapping[str, Mapping[Any, str]]]] = None,
        language: Any = 1,
        debug: bool = False,
    ):
        self.language = language
        self.debug = debug
        self._translators: Dict[str, Translator] = {}
        for name, table in (translations or {}).items():
            self.add(Translator(name, table, language, debug))

    def add(self, translator: Translator) -> Translator:
        self._translators[translator.name] = translator
        return translator

    def get(self, name: str) -> Translator:
        translator = self._translators.get(name)
        if translator is None:
            translator = self.add(Translator(name, language=self.language, debug=self.debug))
        return translator

    __getitem__ = get

    @property
    def main(self) -> Translator:
        return self.get(self.MAIN)

    @property
    def routes(self) -> Translator:
        return self.get(self.ROUTES)

    def set_language(self, language: Any) -> None:
        self.language = language
        for translator in self._translators.values():
            translator.set_language(language)

    def __contains__(self, name: str) -> bool:
        return name in self._translators

    def __iter__(self) -> Iterator[Translator]:
        return iter(list(self._translators.values()))
