"""Core TextProvider protocol used for user-facing messages.

This module defines :class:`TextProvider`, the localization collaborator of
the engine. Session errors and the generic internal-error message are looked
up through it by dotted path (e.g. ``"internal.error-encountered"``).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextProvider(Protocol):
    """Protocol for localized text providers.

    - **Keyed access**: texts are addressed by a stable dotted path plus a
      locale.
    - **Versioning**: ``version()`` returns a short identifier of the catalog
      set, useful in logs.
    """

    def get(self, path: str, locale: str = "en") -> str:
        """Return the text template for ``path`` in ``locale``.

        Implementations should raise ``KeyError`` when the path is unknown.
        """

        ...

    def version(self) -> str:
        """Return a version identifier for this provider."""

        ...
