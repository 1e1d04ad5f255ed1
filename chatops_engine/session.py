"""Invocation context records supplied by transport adapters.

A ``Session`` describes who sent a message, where, and through which bot. The
engine only reads it: the authority number of the ``User``, the capability
names the session already holds, and the locales used to render text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Iterable, List, Optional, Protocol, Set, Union, runtime_checkable

from .i18n import BuiltinTextProvider, TextProvider, render
from .i18n.render import Params


@dataclass
class User:
    """An authenticated actor. ``authority`` gates commands and options."""

    id: str
    authority: int = 1
    locales: List[str] = field(default_factory=list)


@dataclass
class Channel:
    """The conversation a message was posted in."""

    id: str
    locales: List[str] = field(default_factory=list)


@runtime_checkable
class Bot(Protocol):
    """The transport actor delivering a session."""

    def supports(self, name: str, session: "Session") -> Union[bool, Awaitable[bool]]:
        """Return whether the transport implements the capability ``name``."""
        ...


@dataclass
class Session:
    """
    The invoking context of a command.

    Attributes:
        user: The authenticated actor, if any. No user means unrestricted authority.
        channel: The conversation the message came from.
        bot: The transport actor, consulted by ``bot.*`` capability checks.
        permissions: Capability names explicitly held by this session.
        locales: Preferred locales, most preferred first.
        content: Raw message text, kept for logging.
        i18n: Text catalog used by ``text``.
        default_locale: Locale tried after every preferred one.
    """

    user: Optional[User] = None
    channel: Optional[Channel] = None
    bot: Optional[Bot] = None
    permissions: Set[str] = field(default_factory=set)
    locales: List[str] = field(default_factory=list)
    content: str = ""
    i18n: TextProvider = field(default_factory=BuiltinTextProvider)
    default_locale: str = "en"

    def resolve(self, value: Any) -> Any:
        """Evaluate a computed value: callables receive the session, anything else is returned as-is."""
        if callable(value):
            return value(self)
        return value

    def preferred_locales(self) -> List[str]:
        """Session locales first, then the user's, then the channel's."""
        merged: Iterable[str] = [
            *self.locales,
            *(self.user.locales if self.user else []),
            *(self.channel.locales if self.channel else []),
        ]
        return list(dict.fromkeys(merged))

    def text(self, path: str, params: Params = None) -> str:
        """Render the localized text at ``path`` for this session."""
        return render(self.i18n, path, params, self.preferred_locales(), self.default_locale)
