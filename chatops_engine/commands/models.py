from __future__ import annotations

"""Command configuration and invocation models.

``CommandConfig`` and ``OptionConfig`` are declarative pydantic schemas;
unknown keys are rejected so typos in command declarations fail loudly.

``Argv`` is the mutable argument context threaded through the execution
pipeline. It is produced by an external parser and owned by the call that
created it; checkers and actions may rewrite ``args`` and ``options`` and call
``next``.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Union

from pydantic import Field

from ..schemas.base import BaseSchema
from ..session import Session

if TYPE_CHECKING:
    from .command import Command

NextFunction = Callable[..., Awaitable[Any]]
"""
NextFunction:
    ``await argv.next()`` runs the following continuation; ``await
    argv.next(callback)`` first queues ``callback`` as an extra continuation.
"""

Action = Callable[..., Any]
"""
Action:
    A checker or action, invoked as ``callback(argv, *argv.args)``. It may be
    sync or async. A result other than ``None`` ends the pipeline.
"""

ErrorHandler = Callable[[BaseException, "Argv"], Any]

FieldCollector = Union[Iterable[str], Callable[["Argv", Set[str]], Any]]


class CommandConfig(BaseSchema):
    """
    Per-command behavior switches.

    Attributes:
        authority: Minimum user authority, or a predicate evaluated against the session.
        check_unknown: Reject unknown options (enforced by the parser).
        check_arg_count: Reject surplus arguments (enforced by the parser).
        show_warning: Surface parser warnings to the user.
        handle_error: ``True`` renders a generic message for unexpected errors,
            ``False`` re-raises them, a callable ``(error, argv)`` produces a
            replacement result.
        slash: Expose the command through platform slash integrations.
    """

    authority: Union[int, Callable[..., Any]] = Field(default=1, description="Minimum authority level.")
    check_unknown: bool = Field(default=False, description="Whether to reject unknown options.")
    check_arg_count: bool = Field(default=False, description="Whether to check argument count.")
    show_warning: bool = Field(default=True, description="Whether to show warnings.")
    handle_error: Union[bool, Callable[..., Any]] = Field(default=True, description="Error handling policy.")
    slash: Optional[bool] = Field(default=None, description="Enable slash integration.")


class OptionConfig(BaseSchema):
    """Declaration-level settings of a command option."""

    authority: int = Field(default=0, ge=0, description="Minimum authority to pass this option.")
    description: str = ""


@dataclass(frozen=True)
class OptionDecl:
    name: str
    config: OptionConfig


@dataclass
class Argv:
    """
    The argument context of one command invocation.

    Attributes:
        command: The targeted command; filled in by the registry when only ``name`` is known.
        name: The command name as typed, used when ``command`` is not set.
        args: Positional arguments after coercion.
        options: Named options after coercion.
        session: The invoking session.
        error: A parser error; when set, the pipeline returns it unchanged.
        source: Text rendition of the invocation, used in logs.
        next: Continuation installed by the pipeline while actions run.
    """

    command: Optional["Command"] = None
    name: Optional[str] = None
    args: List[Any] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)
    session: Session = field(default_factory=Session)
    error: Optional[str] = None
    source: Optional[str] = None
    next: Optional[NextFunction] = None
