"""Labeled directed graph over capability names.

Each edge ``source -> target`` carries a list of conditions. A condition is a
computed boolean: a static ``bool`` or a predicate evaluated against the
session. The edge is traversable when at least one condition resolves true.

An edge whose conditions have all been unlinked stays in the graph but is
never traversable until a new condition is linked.

Any string is a valid node; there is no node set beyond the edge map.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Set, Union

from ..core.utils import remove_item

if TYPE_CHECKING:
    from ..session import Session

Computed = Union[bool, Callable[["Session"], bool]]


class PermissionGraph:
    """Adjacency map ``source -> {target: [conditions]}``."""

    def __init__(self) -> None:
        self._store: Dict[str, Dict[str, List[Computed]]] = {}

    def link(self, source: str, target: str, condition: Computed = True) -> None:
        """Append ``condition`` to the ``source -> target`` edge, creating it if absent."""
        self._store.setdefault(source, {}).setdefault(target, []).append(condition)

    def unlink(self, source: str, target: str, condition: Computed) -> bool:
        """
        Remove one instance of ``condition`` from the ``source -> target`` edge.

        The edge itself is kept even when its last condition goes away.

        Returns:
            True if a condition was removed.
        """
        conditions = self._store.get(source, {}).get(target)
        if conditions is None:
            return False
        return remove_item(conditions, condition)

    def conditions(self, source: str, target: str) -> Optional[List[Computed]]:
        """Return a copy of the edge's conditions, or ``None`` when there is no edge."""
        conditions = self._store.get(source, {}).get(target)
        return None if conditions is None else list(conditions)

    def sources(self) -> List[str]:
        return list(self._store)

    @staticmethod
    def traversable(conditions: List[Computed], session: "Session") -> bool:
        # an emptied edge is inactive, not vacuously true
        if not conditions:
            return False
        return any(session.resolve(condition) for condition in conditions)

    def subgraph(self, start: Iterable[str], session: "Session") -> Set[str]:
        """
        Collect every node reachable from ``start`` through traversable edges.

        Breadth-first; conditions are evaluated lazily on each call and nodes
        are visited once, so cycles terminate.

        Args:
            start: Starting nodes, included in the result.
            session: Context the edge conditions are resolved against.

        Returns:
            The visited set.
        """
        visited: Set[str] = set()
        queue: List[str] = list(start)
        while queue:
            node = queue.pop(0)
            if node in visited:
                continue
            visited.add(node)
            edges = self._store.get(node)
            if not edges:
                continue
            for target, conditions in list(edges.items()):
                if self.traversable(list(conditions), session):
                    queue.append(target)
        return visited
