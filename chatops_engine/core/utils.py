"""Small helpers shared by the permission and command subsystems."""

from __future__ import annotations

import inspect
import traceback
from typing import Any, Callable, List

Disposer = Callable[[], None]


async def maybe_await(value: Any) -> Any:
    """Return ``value``, awaiting it first when it is awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def remove_item(items: List[Any], item: Any) -> bool:
    """Remove the first element identical to ``item`` (identity, not equality)."""
    for index, candidate in enumerate(items):
        if candidate is item:
            del items[index]
            return True
    return False


def render_error(error: BaseException) -> str:
    """Render an exception with its traceback for log output."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
