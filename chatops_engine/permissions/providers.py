"""Capability provider registry.

The registry maps capability-name patterns to predicate functions and answers
"does this session satisfy capability X". A pattern is either an exact name
(``"admin.ban"``) or a prefix wildcard ending in ``*`` (``"authority.*"``).

Notes:
    - Lookup is closed-world: a name no provider matches is denied.
    - Exact matches are evaluated first, then wildcard patterns in
      registration order. Every matching predicate must pass.
    - Predicates may be sync or async. A predicate raising an exception makes
      the check fail; the exception is logged, never propagated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Union

from ..core.utils import Disposer, maybe_await

if TYPE_CHECKING:
    from ..session import Session

logger = logging.getLogger(__name__)

ProvideCallback = Callable[[str, "Session"], Union[bool, Awaitable[bool]]]

AUTHORITY_PREFIX = "authority."
BOT_PREFIX = "bot."


def _authority_provider(name: str, session: "Session") -> bool:
    user = session.user
    if user is None:
        return True
    suffix = name[len(AUTHORITY_PREFIX):].strip()
    # an empty level reads as 0
    try:
        required = float(suffix) if suffix else 0.0
    except ValueError:
        return False
    return user.authority >= required


async def _bot_provider(name: str, session: "Session") -> bool:
    if session.bot is None:
        return False
    return bool(await maybe_await(session.bot.supports(name[len(BOT_PREFIX):], session)))


class ProviderRegistry:
    """In-memory mapping of capability patterns to predicates."""

    def __init__(self) -> None:
        self._providers: Dict[str, ProvideCallback] = {}

    def seed_builtins(self) -> None:
        """Register the ``authority.*`` and ``bot.*`` providers."""
        self.provide(AUTHORITY_PREFIX + "*", _authority_provider)
        self.provide(BOT_PREFIX + "*", _bot_provider)

    def provide(self, pattern: str, callback: ProvideCallback) -> Disposer:
        """
        Register or replace the predicate for ``pattern``.

        Args:
            pattern: Exact capability name or a prefix ending with ``*``.
            callback: Predicate ``(name, session) -> bool``, sync or async.

        Returns:
            A disposer removing the registration, if it was not replaced since.
        """
        self._providers[pattern] = callback

        def dispose() -> None:
            if self._providers.get(pattern) is callback:
                del self._providers[pattern]

        return dispose

    def has(self, pattern: str) -> bool:
        return pattern in self._providers

    def patterns(self) -> List[str]:
        return list(self._providers)

    def matching(self, name: str) -> List[ProvideCallback]:
        """Return the predicates whose pattern matches ``name``, exact match first."""
        snapshot = list(self._providers.items())
        exact = [callback for pattern, callback in snapshot if pattern == name]
        wildcard = [
            callback
            for pattern, callback in snapshot
            if pattern != name and pattern.endswith("*") and name.startswith(pattern[:-1])
        ]
        return exact + wildcard

    async def check(self, name: str, session: "Session") -> bool:
        """
        Decide whether ``session`` satisfies the capability ``name``.

        Predicates run sequentially and evaluation stops at the first failure.

        Returns:
            ``True`` only when at least one predicate matches and all pass.
        """
        callbacks = self.matching(name)
        if not callbacks:
            return False
        try:
            for callback in callbacks:
                if not await maybe_await(callback(name, session)):
                    return False
            return True
        except Exception as e:
            logger.warning(f"Permission provider failed for '{name}': {e!r}")
            return False
