"""Translation lookup and multilingual text helpers."""
from __future__ import annotations

import logging
import re
from typing import Any, Callable

log = logging.getLogger("quizdesk.i18n")

LANGUAGES = ("en", "ar", "ku")

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

# t(key, fallback, **variables) -> str
TranslateFn = Callable[..., str]


def interpolate(template: str, values: dict[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders; unknown names are left as-is."""
    if not isinstance(template, str):
        return template

    def _sub(m: re.Match) -> str:
        key = m.group(1)
        return str(values[key]) if key in values else m.group(0)

    return _PLACEHOLDER.sub(_sub, template)


def localized_text(value: Any, language: str = "en", fallback: str = "") -> str:
    """Resolve a plain string or a ``{lang: text}`` mapping for *language*."""
    if not value:
        return fallback
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for lang in (language, *LANGUAGES):
            text = value.get(lang)
            if isinstance(text, str) and text:
                return text
    return fallback


class Translator:
    def __init__(self, table: dict[str, str] | None = None, language: str = "en"):
        self.table = dict(table or {})
        self.language = language

    @classmethod
    def from_response(cls, data: Any, language: str = "en") -> Translator:
        """Build from either ``{key: text}`` or ``[{key, translations}]``."""
        table: dict[str, str] = {}
        if isinstance(data, dict):
            table = {k: v for k, v in data.items() if isinstance(v, str)}
        elif isinstance(data, list):
            for item in data:
                if not isinstance(item, dict):
                    continue
                key = item.get("key")
                translations = item.get("translations")
                if not key or not isinstance(translations, dict):
                    continue
                table[key] = translations.get(language) or translations.get("en") or key
        else:
            log.warning("Unexpected translation payload: %s", type(data).__name__)
        log.info("Loaded %d translations for %s", len(table), language)
        return cls(table, language)

    def t(self, key: str, fallback: str | None = None, **variables: Any) -> str:
        text = self.table.get(key)
        if not text:
            log.debug("Translation missing for key: %s", key)
            text = key if fallback is None else fallback
        return interpolate(text, variables)

    __call__ = t
