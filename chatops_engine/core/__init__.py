"""Ambient infrastructure: settings, logging, errors, events and helpers."""

from .config import Settings, get_settings
from .errors import (
    ChatOpsError,
    CommandNotFoundError,
    ConstructionError,
    DepthExceededError,
    DuplicateCommandError,
    SessionError,
)
from .events import EventBus

__all__ = [
    "Settings",
    "get_settings",
    "ChatOpsError",
    "CommandNotFoundError",
    "ConstructionError",
    "DepthExceededError",
    "DuplicateCommandError",
    "SessionError",
    "EventBus",
]
