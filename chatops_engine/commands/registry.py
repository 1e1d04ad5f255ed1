from __future__ import annotations

"""Command registry.

``Commander`` owns the alias table (every name and alias -> ``Command``) and
the flat list of commands, declares commands from path-like definitions, and
gates invocations before handing them to the execution pipeline.

Notes:
    - Names and aliases are case-insensitive and stored lower-cased.
    - An alias can belong to a single command; claiming it for a second one
      raises ``DuplicateCommandError``.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from ..core.config import Settings
from ..core.errors import CommandNotFoundError, ConstructionError
from ..core.events import EventBus
from ..permissions import Permissions
from ..session import Session
from .command import Command
from .models import Argv, CommandConfig
from .pipeline import Continuation

logger = logging.getLogger(__name__)

ADDED_EVENT = "command-added"
LOW_AUTHORITY_TEXT = "internal.low-authority"

_SEGMENT = re.compile(r"([./])")


class Commander:
    """Process-scoped registry of commands."""

    def __init__(self, events: EventBus, permissions: Permissions, settings: Settings) -> None:
        self.events = events
        self.permissions = permissions
        self.settings = settings
        self.defaults = settings.command_defaults
        self._commands: Dict[str, Command] = {}
        self._command_list: List[Command] = []

    @property
    def max_depth(self) -> int:
        return self.defaults.max_depth

    def default_config(self) -> CommandConfig:
        return CommandConfig(authority=self.defaults.authority)

    def _make_config(self, config: Union[CommandConfig, Dict[str, Any], None]) -> CommandConfig:
        if isinstance(config, CommandConfig):
            return config
        return CommandConfig.model_validate({"authority": self.defaults.authority, **(config or {})})

    # ------------------------------------------------------------------
    # alias table
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[Command]:
        """Return the command registered under ``name``, if any."""
        return self._commands.get(name.lower())

    def get_or_raise(self, name: str) -> Command:
        """
        Return the command registered under ``name``.

        Raises:
            CommandNotFoundError: If no command owns ``name``.
        """
        command = self.get(name)
        if command is None:
            raise CommandNotFoundError(name)
        return command

    def has(self, name: str) -> bool:
        return name.lower() in self._commands

    def names(self) -> List[str]:
        return list(self._commands)

    def list(self) -> List[Command]:
        return list(self._command_list)

    def _set(self, name: str, command: Command) -> None:
        self._commands[name] = command

    def _delete(self, name: str) -> None:
        self._commands.pop(name, None)

    def _register(self, command: Command) -> None:
        self._command_list.append(command)

    def _unregister(self, command: Command) -> None:
        if command in self._command_list:
            self._command_list.remove(command)

    # ------------------------------------------------------------------
    # declaration
    # ------------------------------------------------------------------

    def command(
        self,
        definition: str,
        description: str = "",
        config: Union[CommandConfig, Dict[str, Any], None] = None,
    ) -> Command:
        """
        Declare (or look up) a command from a path-like definition.

        ``"a/b"`` makes ``b`` a child of ``a``; ``"a.b"`` creates ``a.b`` as a
        child of ``a``. Missing intermediate commands are created. Text after
        the first whitespace is kept as the argument declaration of the last
        segment.

        Args:
            definition: The command path plus its argument declaration.
            description: Human readable description, stored on the command.
            config: Config for the last segment. An existing command gets the
                given keys merged into its config.

        Returns:
            The command for the last path segment.

        Raises:
            ConstructionError: On an empty segment or a conflicting parent.
                Commands created by the failed call are disposed again.
        """
        parts = definition.strip().split(None, 1)
        if not parts:
            raise ConstructionError("empty command definition")
        path = parts[0].lower()
        declaration = parts[1] if len(parts) > 1 else ""
        segments = _SEGMENT.split(path)

        created: List[Command] = []
        parent: Optional[Command] = None
        command: Optional[Command] = None
        try:
            for index in range(0, len(segments), 2):
                segment = segments[index]
                separator = segments[index - 1] if index else ""
                if not segment:
                    raise ConstructionError(f'invalid command definition: "{definition}"')
                name = f"{parent.name}.{segment}" if separator == "." and parent is not None else segment
                is_last = index == len(segments) - 1

                command = self.get(name)
                if command is None:
                    command = Command(
                        name,
                        declaration if is_last else "",
                        self,
                        self._make_config(config if is_last else None),
                        parent=parent,
                    )
                    created.append(command)
                elif parent is not None:
                    command._attach(parent)
                parent = command
        except Exception:
            for orphan in reversed(created):
                orphan.dispose()
            raise

        assert command is not None
        if command not in created:
            if declaration:
                command.declaration = declaration
            if config:
                updates = config.model_dump(exclude_unset=True) if isinstance(config, CommandConfig) else config
                command.config = CommandConfig.model_validate({**command.config.model_dump(), **updates})
                command.link_authority()
        if description:
            command.description = description

        for new in created:
            logger.debug(f"Declared command '{new.name}'")
            self.events.emit(ADDED_EVENT, new)
        return command

    # ------------------------------------------------------------------
    # invocation
    # ------------------------------------------------------------------

    def resolve(self, argv: Argv) -> Optional[Command]:
        """Return ``argv.command``, or the command registered under ``argv.name``."""
        if argv.command is not None:
            return argv.command
        if argv.name:
            return self.get(argv.name)
        return None

    def available(self, session: Session) -> List[Command]:
        """Commands whose authority the session's user meets."""
        return [command for command in self._command_list if command.match(session)]

    async def execute(self, argv: Argv, fallback: Optional[Continuation] = None) -> Any:
        """
        Gate and run an invocation.

        Returns:
            ``None`` for an unknown command, the low-authority text when the
            user does not meet the command's authority, otherwise the pipeline
            result.
        """
        command = self.resolve(argv)
        if command is None:
            return None
        argv.command = command
        if not command.match(argv.session):
            return argv.session.text(LOW_AUTHORITY_TEXT)
        return await command.execute(argv, fallback)

    def dispose(self) -> None:
        """Dispose every command, roots first (children cascade)."""
        for command in [c for c in self._command_list if c.parent is None]:
            command.dispose()
        for command in list(self._command_list):
            command.dispose()
