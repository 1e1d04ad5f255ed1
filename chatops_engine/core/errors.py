"""Error types for the command engine.

Defines a small hierarchy of exceptions raised while building commands,
running the execution pipeline, and rendering user-facing failures.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ChatOpsError(Exception):
    """Base error for all engine exceptions."""


class ConstructionError(ChatOpsError):
    """Raised when a command tree cannot be built as declared."""


class DuplicateCommandError(ConstructionError):
    """Raised when an alias is already owned by a different command."""

    def __init__(self, name: str) -> None:
        super().__init__(f'duplicate command names: "{name}"')
        self.name = name


class CommandNotFoundError(ChatOpsError, KeyError):
    """Raised when a lookup targets a command that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown command: {name}")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class DepthExceededError(ChatOpsError):
    """Raised when ``next`` grows the continuation queue past its limit.

    This signals a caller bug (runaway recursive ``next`` usage) and is never
    recovered by the pipeline.
    """

    def __init__(self, limit: int) -> None:
        super().__init__(f"middleware stack exceeded {limit}")
        self.limit = limit


class SessionError(ChatOpsError):
    """A recoverable, user-facing failure rendered as localized text.

    Attributes:
        path: Text path looked up through the session's text provider.
        params: Parameters interpolated into the looked-up text.
    """

    def __init__(self, path: str, params: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(path)
        self.path = path
        self.params = params or {}
