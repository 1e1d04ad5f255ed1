from __future__ import annotations

from typing import Dict, Optional

from .base import TextProvider

# Messages the engine itself emits. Host applications stack their own
# catalogs on top with ``StackedTextProvider``.


_BUILTIN_TEXTS: Dict[str, Dict[str, str]] = {
    "en": {
        "internal.error-encountered": "An internal error occurred while running the command.",
        "internal.low-authority": "You do not have permission to use this command.",
    },
    "zh": {
        "internal.error-encountered": "发生未知错误。",
        "internal.low-authority": "权限不足。",
    },
}


class BuiltinTextProvider(TextProvider):
    """In-repo catalog of the engine's own messages."""

    def __init__(self, *, texts: Optional[Dict[str, Dict[str, str]]] = None, version_id: str = "builtin-v1") -> None:
        self._texts = texts or _BUILTIN_TEXTS
        self._version = version_id

    def get(self, path: str, locale: str = "en") -> str:
        bucket = self._texts.get(locale) or {}
        try:
            return bucket[path]
        except KeyError as exc:
            raise KeyError(f"text not found: locale={locale!r} path={path!r}") from exc

    def version(self) -> str:
        return self._version


class StackedTextProvider(TextProvider):
    """Chains providers with fallback semantics.

    Typically used as ``StackedTextProvider(app_texts, BuiltinTextProvider())``
    so application catalogs override the builtin messages while keeping them
    as a baseline.
    """

    def __init__(self, primary: TextProvider, fallback: TextProvider) -> None:
        self._primary = primary
        self._fallback = fallback

    def get(self, path: str, locale: str = "en") -> str:
        try:
            return self._primary.get(path, locale=locale)
        except KeyError:
            return self._fallback.get(path, locale=locale)

    def version(self) -> str:
        return f"stacked:{self._primary.version()}+{self._fallback.version()}"
