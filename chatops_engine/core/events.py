"""In-process event bus.

``EventBus`` is the notification collaborator of the engine. Commands emit
``command-added``, ``command-removed`` and ``command-error``; the permission
resolver emits ``internal/permission`` whenever the capability topology
changes; the pipeline asks ``command/before-execute`` listeners, in order, for
a short-circuit result.

Listeners are plain callables. ``emit`` never lets a listener failure escape:
the error is logged and the remaining listeners still run.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List

from .utils import Disposer, maybe_await, remove_item

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventBus:
    """Named fan-out of listeners, one ordered list per event name."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, name: str, listener: Listener, prepend: bool = False) -> Disposer:
        """
        Register ``listener`` for ``name``.

        Args:
            name: Event name.
            listener: Callable invoked with the emitted arguments.
            prepend: Run this listener ahead of the already registered ones.

        Returns:
            A disposer removing exactly this registration.
        """
        listeners = self._listeners.setdefault(name, [])
        if prepend:
            listeners.insert(0, listener)
        else:
            listeners.append(listener)

        def dispose() -> None:
            remove_item(self._listeners.get(name, []), listener)

        return dispose

    def listeners(self, name: str) -> List[Listener]:
        """Return a snapshot of the listeners registered for ``name``."""
        return list(self._listeners.get(name, []))

    def emit(self, name: str, *args: Any) -> None:
        """
        Notify every listener of ``name`` synchronously.

        Awaitables returned by listeners are scheduled on the running event loop
        when there is one; otherwise they are closed unawaited.
        """
        for listener in self.listeners(name):
            try:
                result = listener(*args)
            except Exception as e:
                logger.warning(f"Listener for '{name}' failed: {e!r}")
                continue
            if inspect.isawaitable(result):
                self._schedule(name, result)

    async def serial(self, name: str, *args: Any) -> Any:
        """
        Await listeners of ``name`` one by one.

        Returns:
            The first result that is not ``None``, or ``None`` when every
            listener returned ``None``. Listener errors propagate to the caller.
        """
        for listener in self.listeners(name):
            result = await maybe_await(listener(*args))
            if result is not None:
                return result
        return None

    def clear(self) -> None:
        """Drop every registered listener."""
        self._listeners.clear()

    @staticmethod
    def _schedule(name: str, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"Async listener for '{name}' dropped: no running event loop")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = asyncio.ensure_future(awaitable, loop=loop)

        def _report(done: "asyncio.Future[Any]") -> None:
            if not done.cancelled() and done.exception() is not None:
                logger.warning(f"Async listener for '{name}' failed: {done.exception()!r}")

        task.add_done_callback(_report)
