from __future__ import annotations

"""Command execution pipeline.

``ExecutionPipeline`` runs one invocation of a command:

1. **Checking**: every checker runs in registration order with ``(argv,
   *args)``. The first result that is not ``None`` is returned as the final
   output and no action runs.
2. **Acting**: actions become a queue of continuations followed by the
   caller's terminal fallback. Only the first action is started; the
   following continuations run when a continuation calls ``argv.next``.
   ``argv.next`` advances the cursor from inside a continuation;
   ``argv.next(callback)`` first inserts ``callback`` as an extra continuation
   ahead of the fallback. The queue may not grow past ``max_depth``.
3. **Recovery**: an exception raised while the cursor is still inside the
   static action list is converted according to the command's
   ``handle_error`` policy. Exceptions from queued callbacks or from the
   fallback always propagate, as does ``DepthExceededError``.

A command without actions returns ``""`` right after checking, without
touching the queue or the fallback.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from ..core.errors import DepthExceededError, SessionError
from ..core.utils import maybe_await, render_error
from .models import Argv

if TYPE_CHECKING:
    from .command import Command

logger = logging.getLogger(__name__)

ERROR_EVENT = "command-error"
GENERIC_ERROR_TEXT = "internal.error-encountered"

Continuation = Callable[[Any], Any]


class Next:
    """Continuation helpers shared by pipelines."""

    MAX_DEPTH = 64

    @staticmethod
    async def compose(callback: Any, next: Optional[Callable[..., Any]] = None) -> Any:
        """Run ``callback(next)`` when callable, otherwise return ``callback`` itself as the result."""
        if callable(callback):
            return await maybe_await(callback(next))
        return callback

    @staticmethod
    async def terminal(next: Optional[Callable[..., Any]] = None) -> Any:  # noqa: ARG004
        """Default fallback: produce no output."""
        return None


class PipelineState(str, Enum):
    gating = "gating"
    checking = "checking"
    acting = "acting"
    completed = "completed"
    failed = "failed"


class ExecutionPipeline:
    """Per-invocation runner threading ``argv`` through checkers, actions and the fallback."""

    def __init__(
        self,
        command: "Command",
        argv: Argv,
        fallback: Optional[Continuation] = None,
        *,
        max_depth: Optional[int] = None,
    ) -> None:
        self.command = command
        self.argv = argv
        self.fallback: Continuation = fallback or Next.terminal
        self.max_depth = Next.MAX_DEPTH if max_depth is None else max_depth
        self.state = PipelineState.gating
        self._queue: List[Continuation] = []
        self._cursor = 0
        self._fallback_index = 0
        self._static_length = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    async def run(self) -> Any:
        """Execute the invocation and return its output (``""`` when there is none)."""
        argv = self.argv
        command = self.command
        if argv.command is None:
            argv.command = command

        if argv.error:
            self.state = PipelineState.completed
            return argv.error
        if logger.isEnabledFor(logging.DEBUG):
            argv.source = argv.source or command.stringify(argv.args, argv.options)
            logger.debug(argv.source)

        self.state = PipelineState.checking
        try:
            for checker in command.checkers:
                result = await maybe_await(checker(argv, *argv.args))
                if result is not None:
                    self.state = PipelineState.completed
                    return result
        except BaseException:
            self.state = PipelineState.failed
            raise

        if not command.actions:
            self.state = PipelineState.completed
            return ""

        self.state = PipelineState.acting
        self._build_queue()
        argv.next = self.next

        try:
            result = await self.next()
        except DepthExceededError:
            self.state = PipelineState.failed
            raise
        except Exception as error:
            if self._cursor >= self._static_length:
                self.state = PipelineState.failed
                raise
            try:
                result = await self._recover(error)
            except BaseException:
                self.state = PipelineState.failed
                raise
            self.state = PipelineState.completed
            return "" if result is None else result

        self.state = PipelineState.completed
        return "" if result is None else result

    def _build_queue(self) -> None:
        argv = self.argv

        def bind(action: Callable[..., Any]) -> Continuation:
            async def run_action(_next: Any) -> Any:
                return await maybe_await(action(argv, *argv.args))

            return run_action

        self._queue = [bind(action) for action in self.command.actions]
        self._fallback_index = len(self._queue)
        self._queue.append(self.fallback)
        self._static_length = len(self._queue)
        self._cursor = 0

    async def next(self, callback: Any = None) -> Any:
        """
        Advance to the following continuation.

        Args:
            callback: Optional extra continuation, called with ``next``, or a
                plain value used as the result once reached.

        Returns:
            The result of the continuation at the cursor, or ``None`` once the
            queue is exhausted.

        Raises:
            DepthExceededError: If queuing ``callback`` would exceed ``max_depth``.
        """
        if callback is not None:
            if len(self._queue) >= self.max_depth:
                raise DepthExceededError(self.max_depth)

            async def extra(next_: Any) -> Any:
                return await Next.compose(callback, next_)

            if self._cursor <= self._fallback_index:
                self._queue.insert(self._fallback_index, extra)
                self._fallback_index += 1
            else:
                self._queue.append(extra)

        index = self._cursor
        self._cursor += 1
        if index >= len(self._queue):
            return None
        return await maybe_await(self._queue[index](self.next))

    async def _recover(self, error: Exception) -> Any:
        argv = self.argv
        command = self.command
        if isinstance(error, SessionError):
            return argv.session.text(error.path, error.params)

        argv.source = argv.source or command.stringify(argv.args, argv.options)
        logger.warning(f"{argv.source}\n{render_error(error)}")
        command.events.emit(ERROR_EVENT, argv, error)

        policy = command.config.handle_error
        if callable(policy):
            return await maybe_await(policy(error, argv))
        if policy:
            return argv.session.text(GENERIC_ERROR_TEXT)
        raise error
