"""Localized text facade.

Re-exports the types callers are expected to use:

- ``TextProvider`` – protocol describing the minimal catalog API.
- ``BuiltinTextProvider`` – the engine's own messages (``en``, ``zh``).
- ``StackedTextProvider`` – composition helper for application+builtin stacks.
- ``render`` – locale fallback and parameter interpolation.
"""

from .base import TextProvider
from .builtin import BuiltinTextProvider, StackedTextProvider
from .render import render

__all__ = [
    "TextProvider",
    "BuiltinTextProvider",
    "StackedTextProvider",
    "render",
]
