"""ChatOps command engine.

This package dispatches textual commands for conversational agents and
resolves the fine-grained permissions guarding them.

High-level architecture
-----------------------

The engine is organized around two tightly coupled subsystems:

- **Command execution** (``chatops_engine.commands``): a registry of commands
  addressed by name and alias, each with an ordered list of checkers and
  actions. Invocations run through ``ExecutionPipeline``: checkers may
  short-circuit, actions are chained through a ``next`` continuation, and
  unexpected errors are recovered according to the command's
  ``handle_error`` policy.

- **Permission resolution** (``chatops_engine.permissions``): two directed
  graphs over capability names (``inherit`` and ``depend``), each edge guarded
  by conditions evaluated per session, plus a registry of providers answering
  leaf checks such as ``authority.3`` or ``bot.send``.

Collaborators such as argument parsing, transports and persistence live
outside the engine; they hand in an ``Argv`` with a ``Session`` and receive
text (or nothing) back.

Typical workflow
----------------

1. Create an ``App``.
2. Declare commands with ``app.command("echo <text>")`` and attach actions.
3. For each parsed message, build an ``Argv`` and ``await app.execute(argv)``.
"""

from .app import App
from .commands import Argv, Command, CommandConfig, Commander, ExecutionPipeline, Next, OptionConfig
from .core.errors import (
    ChatOpsError,
    CommandNotFoundError,
    ConstructionError,
    DepthExceededError,
    DuplicateCommandError,
    SessionError,
)
from .permissions import Permissions
from .session import Channel, Session, User

__all__ = [
    "App",
    "Argv",
    "Channel",
    "ChatOpsError",
    "Command",
    "CommandConfig",
    "CommandNotFoundError",
    "Commander",
    "ConstructionError",
    "DepthExceededError",
    "DuplicateCommandError",
    "ExecutionPipeline",
    "Next",
    "OptionConfig",
    "Permissions",
    "Session",
    "SessionError",
    "User",
]
