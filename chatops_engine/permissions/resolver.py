"""Permission resolution over the inherit and depend graphs.

``Permissions`` owns two independent graphs and a provider registry:

- ``inherit(child, parent)``: holders of ``child`` also hold ``parent``.
  ``authority(3, "command.echo")`` is ``inherit("authority.3", "command.echo")``.
- ``depend(dependent, dependency)``: exercising ``dependent`` also requires
  ``dependency``.

``test(held, required, session)`` is the closure query: every capability the
required names transitively depend on must be granted, either because the
session holds something that inherits it, or because a provider grants one of
its grantors.

Every topology change emits ``internal/permission`` on the event bus.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from ..core.events import EventBus
from ..core.utils import Disposer
from .graph import Computed, PermissionGraph
from .providers import ProvideCallback, ProviderRegistry

if TYPE_CHECKING:
    from ..session import Session

logger = logging.getLogger(__name__)

TOPOLOGY_EVENT = "internal/permission"


class Permissions:
    """Capability resolver composed of two graphs and a provider registry."""

    def __init__(self, events: Optional[EventBus] = None) -> None:
        self._events = events or EventBus()
        self._inherits = PermissionGraph()
        self._depends = PermissionGraph()
        self._providers = ProviderRegistry()
        self._providers.seed_builtins()

    @property
    def inherits(self) -> PermissionGraph:
        return self._inherits

    @property
    def depends(self) -> PermissionGraph:
        return self._depends

    @property
    def providers(self) -> ProviderRegistry:
        return self._providers

    def provide(self, pattern: str, callback: ProvideCallback) -> Disposer:
        """Register a capability predicate. See ``ProviderRegistry.provide``."""
        return self._providers.provide(pattern, callback)

    async def check(self, name: str, session: "Session") -> bool:
        """Ask the providers whether ``session`` satisfies ``name``."""
        return await self._providers.check(name, session)

    def authority(self, value: object, name: str) -> Optional[Disposer]:
        """
        Grant ``name`` to everyone meeting authority level ``value``.

        A non-numeric ``value`` is ignored and ``None`` is returned.
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return self.inherit(f"authority.{value}", name)

    def inherit(self, child: str, parent: str, condition: Computed = True) -> Disposer:
        """
        Let holders of ``child`` hold ``parent`` while ``condition`` resolves true.

        Returns:
            A disposer unlinking exactly this condition.
        """
        return self._mutate(self._inherits, parent, child, condition)

    def depend(self, dependent: str, dependency: str, condition: Computed = True) -> Disposer:
        """
        Require ``dependency`` whenever ``dependent`` is exercised and ``condition`` resolves true.

        Returns:
            A disposer unlinking exactly this condition.
        """
        return self._mutate(self._depends, dependent, dependency, condition)

    def _mutate(self, graph: PermissionGraph, source: str, target: str, condition: Computed) -> Disposer:
        graph.link(source, target, condition)
        logger.debug(f"Linked permission edge {source} -> {target}")
        self._events.emit(TOPOLOGY_EVENT)

        def dispose() -> None:
            if graph.unlink(source, target, condition):
                logger.debug(f"Unlinked permission edge {source} -> {target}")
                self._events.emit(TOPOLOGY_EVENT)

        return dispose

    def list(self) -> List[str]:
        """Return every name that appears as an edge source in either graph."""
        return list(dict.fromkeys([*self._inherits.sources(), *self._depends.sources()]))

    async def test(
        self,
        held: Iterable[str],
        required: Iterable[str],
        session: Optional["Session"] = None,
    ) -> bool:
        """
        Decide whether ``held`` (plus provider grants) satisfies ``required``.

        For each capability in the depend-closure of ``required``, the
        inherit-closure of that capability lists its grantors. The capability
        is satisfied when a grantor is held, or when any grantor's provider
        check passes. Provider checks are shared across capabilities within
        one call. The first unsatisfied capability ends the test.

        Args:
            held: Capability names the session explicitly holds.
            required: Capability names needed for the operation.
            session: Context conditions and providers are evaluated against.

        Returns:
            True when every dependency is satisfied.
        """
        if session is None:
            from ..session import Session

            session = Session()
        held_set = set(held)
        cache: Dict[str, "asyncio.Future[bool]"] = {}
        for name in self._depends.subgraph(required, session):
            grantors = self._inherits.subgraph([name], session)
            if not grantors.isdisjoint(held_set):
                continue
            for grantor in grantors:
                if grantor not in cache:
                    cache[grantor] = asyncio.ensure_future(self.check(grantor, session))
            results = await asyncio.gather(*(cache[grantor] for grantor in grantors))
            if any(results):
                continue
            return False
        return True
