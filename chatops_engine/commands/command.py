from __future__ import annotations

"""Command definition.

A ``Command`` is the declarative unit of the engine: its aliases, its place in
the command tree, its configuration, and the ordered checkers and actions run
by ``ExecutionPipeline``.

Ownership follows the registry: ``Commander`` owns the flat command list and
the alias table, while parent/child links are kept as command names and
resolved through the registry on access.
"""

import logging
import math
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Set, Union

from ..core.errors import ConstructionError, DuplicateCommandError
from ..core.events import EventBus
from ..core.utils import Disposer, maybe_await, remove_item
from ..permissions import Permissions
from ..session import Session
from .models import Action, Argv, CommandConfig, FieldCollector, OptionConfig, OptionDecl
from .pipeline import Continuation, ExecutionPipeline

if TYPE_CHECKING:
    from .registry import Commander

logger = logging.getLogger(__name__)

BEFORE_EXECUTE_EVENT = "command/before-execute"
REMOVED_EVENT = "command-removed"

Usage = Union[str, Callable[[Session], Any]]


class Command:
    """A named command with checkers, actions and a place in the command tree."""

    def __init__(
        self,
        name: str,
        declaration: str,
        commander: "Commander",
        config: Optional[CommandConfig] = None,
        *,
        parent: Optional["Command"] = None,
    ) -> None:
        """
        Create and register a command.

        Args:
            name: Canonical name, registered as the first alias.
            declaration: Unparsed argument declaration (e.g. ``"<text:string>"``).
            commander: Registry owning the command.
            config: Behavior switches; defaults come from the registry's settings.
            parent: Parent command, required for relative (``.``-prefixed) aliases.

        Raises:
            DuplicateCommandError: If ``name`` already belongs to another command.
                Nothing is registered in that case.
        """
        self.name = name.lower()
        self.declaration = declaration
        self.description = ""
        self.config = config or commander.default_config()
        self._commander = commander
        self._parent_name: Optional[str] = parent.name if parent is not None else None
        self._children: List[str] = []
        self._disposed = False

        self._aliases: List[str] = []
        self._examples: List[str] = []
        self._usage: Optional[Usage] = None
        self._options: Dict[str, OptionDecl] = {}
        self._option_disposers: Dict[str, Disposer] = {}

        self._user_fields: List[FieldCollector] = [["locales"]]
        self._channel_fields: List[FieldCollector] = [["locales"]]
        self._actions: List[Action] = []
        self._checkers: List[Action] = [self._before_execute]

        self._register_alias(self.name)
        commander._register(self)
        if parent is not None:
            parent._children.append(self.name)

        self._authority_disposer: Optional[Disposer] = None
        self.link_authority()

    def __repr__(self) -> str:
        return f"Command <{self.name}>"

    def link_authority(self) -> None:
        """
        (Re)grant ``command.<name>`` according to ``config.authority``.

        A numeric authority links the capability under ``authority.<n>``; a
        computed one registers a provider delegating to ``match``.
        """
        if self._authority_disposer is not None:
            self._authority_disposer()
        permission = f"command.{self.name}"
        dispose = self.permissions.authority(self.config.authority, permission)
        if dispose is None:
            dispose = self.permissions.provide(permission, lambda _name, session: self.match(session))
        self._authority_disposer = dispose

    # ------------------------------------------------------------------
    # collaborators
    # ------------------------------------------------------------------

    @property
    def commander(self) -> "Commander":
        return self._commander

    @property
    def events(self) -> EventBus:
        return self._commander.events

    @property
    def permissions(self) -> Permissions:
        return self._commander.permissions

    # ------------------------------------------------------------------
    # tree
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional["Command"]:
        if self._parent_name is None:
            return None
        return self._commander.get(self._parent_name)

    @property
    def children(self) -> List["Command"]:
        resolved = (self._commander.get(name) for name in self._children)
        return [child for child in resolved if child is not None]

    def _attach(self, parent: "Command") -> None:
        current = self.parent
        if current is parent:
            return
        if current is not None:
            raise ConstructionError(f'command "{self.name}" already has parent "{current.name}"')
        self._parent_name = parent.name
        parent._children.append(self.name)

    # ------------------------------------------------------------------
    # aliases
    # ------------------------------------------------------------------

    @property
    def aliases(self) -> List[str]:
        return list(self._aliases)

    @property
    def display_name(self) -> str:
        return self._aliases[0]

    @display_name.setter
    def display_name(self, name: str) -> None:
        self._register_alias(name, prepend=True)

    def _resolve_alias(self, name: str) -> str:
        """Lower-case ``name``, expand a relative alias and reject names owned by another command."""
        name = name.lower()
        if name.startswith("."):
            parent = self.parent
            if parent is None:
                raise ConstructionError(f'relative alias "{name}" requires a parent command')
            name = parent.name + name

        previous = self._commander.get(name)
        if previous is not None and previous is not self:
            raise DuplicateCommandError(name)
        return name

    def _register_alias(self, name: str, prepend: bool = False) -> None:
        self._insert_alias(self._resolve_alias(name), prepend)

    def _insert_alias(self, name: str, prepend: bool = False) -> None:
        if name in self._aliases:
            if prepend:
                self._aliases.remove(name)
                self._aliases.insert(0, name)
            return

        if prepend:
            self._aliases.insert(0, name)
        else:
            self._aliases.append(name)
        self._commander._set(name, self)

    def alias(self, *names: str) -> "Command":
        """
        Register additional names for this command. Re-adding a name is a no-op.

        Raises:
            DuplicateCommandError: If any name belongs to another command.
                None of the names is registered in that case.
        """
        resolved = [self._resolve_alias(name) for name in names]
        for name in resolved:
            self._insert_alias(name)
        return self

    # ------------------------------------------------------------------
    # declaration helpers
    # ------------------------------------------------------------------

    def subcommand(
        self,
        definition: str,
        description: str = "",
        config: Union[CommandConfig, Dict[str, Any], None] = None,
    ) -> "Command":
        """
        Declare a child command.

        ``"child"`` becomes ``parent/child`` (a top-level name nested under this
        command) while ``".child"`` becomes ``parent.child``.
        """
        separator = "" if definition.startswith(".") else "/"
        return self._commander.command(self.name + separator + definition, description, config)

    def usage(self, text: Usage) -> "Command":
        self._usage = text
        return self

    async def get_usage(self, session: Session) -> Optional[str]:
        if callable(self._usage):
            return await maybe_await(self._usage(session))
        return self._usage

    def example(self, example: str) -> "Command":
        self._examples.append(example)
        return self

    @property
    def examples(self) -> List[str]:
        return list(self._examples)

    def option(
        self,
        name: str,
        description: str = "",
        config: Union[OptionConfig, Dict[str, Any], None] = None,
    ) -> "Command":
        """
        Declare an option and grant it to users meeting its authority level.

        The option's capability is ``command.<name>.option.<option>``.
        """
        if isinstance(config, OptionConfig):
            option_config = config.model_copy(update={"description": description or config.description})
        else:
            option_config = OptionConfig.model_validate({"description": description, **(config or {})})
        self.remove_option(name)
        self._options[name] = OptionDecl(name=name, config=option_config)
        dispose = self.permissions.authority(option_config.authority, self.option_permission(name))
        if dispose is not None:
            self._option_disposers[name] = dispose
        return self

    def remove_option(self, name: str) -> bool:
        dispose = self._option_disposers.pop(name, None)
        if dispose is not None:
            dispose()
        return self._options.pop(name, None) is not None

    @property
    def options(self) -> Dict[str, OptionDecl]:
        return dict(self._options)

    def option_permission(self, name: str) -> str:
        return f"command.{self.name}.option.{name}"

    def user_fields(self, fields: FieldCollector) -> "Command":
        self._user_fields.append(fields)
        return self

    def channel_fields(self, fields: FieldCollector) -> "Command":
        self._channel_fields.append(fields)
        return self

    def collect_fields(self, argv: Argv, kind: str) -> Set[str]:
        """
        Gather the ``"user"`` or ``"channel"`` fields an invocation needs loaded.

        Collectors are either iterables of field names or callables
        ``(argv, fields)`` that add to ``fields`` in place.
        """
        if kind not in ("user", "channel"):
            raise ValueError(f"unknown field kind: {kind}")
        collectors = self._user_fields if kind == "user" else self._channel_fields
        fields: Set[str] = set()
        for collector in collectors:
            if callable(collector):
                collector(argv, fields)
            else:
                fields.update(collector)
        return fields

    # ------------------------------------------------------------------
    # gating and hooks
    # ------------------------------------------------------------------

    def match(self, session: Session) -> bool:
        """Return whether the session's user meets the command's authority. No user means unrestricted."""
        authority = session.user.authority if session.user is not None else math.inf
        return session.resolve(self.config.authority) <= authority

    async def _before_execute(self, argv: Argv, *args: Any) -> Any:
        return await self.events.serial(BEFORE_EXECUTE_EVENT, argv)

    @property
    def checkers(self) -> List[Action]:
        return list(self._checkers)

    @property
    def actions(self) -> List[Action]:
        return list(self._actions)

    def check(self, callback: Action, append: bool = False) -> Disposer:
        return self.before(callback, append)

    def before(self, callback: Action, append: bool = False) -> Disposer:
        """
        Add a checker.

        Checkers are prepended by default, so the most recently added one runs
        first; ``append=True`` runs it after the existing ones instead.

        Returns:
            A disposer removing exactly this checker.
        """
        if append:
            self._checkers.append(callback)
        else:
            self._checkers.insert(0, callback)
        return lambda: self._discard(self._checkers, callback)

    def action(self, callback: Action, prepend: bool = False) -> Disposer:
        """
        Add an action at the end (or the front) of the action list.

        Returns:
            A disposer removing exactly this action.
        """
        if prepend:
            self._actions.insert(0, callback)
        else:
            self._actions.append(callback)
        return lambda: self._discard(self._actions, callback)

    @staticmethod
    def _discard(items: List[Action], callback: Action) -> None:
        remove_item(items, callback)

    # ------------------------------------------------------------------
    # execution
    # ------------------------------------------------------------------

    def stringify(self, args: List[Any], options: Dict[str, Any]) -> str:
        """Render an invocation back to text, for logs."""
        parts = [self.display_name]
        for key, value in options.items():
            if value is False or value is None:
                continue
            parts.append(f"--{key}")
            if value is not True:
                parts.append(str(value))
        parts.extend(str(arg) for arg in args)
        return " ".join(parts)

    async def execute(self, argv: Argv, fallback: Optional[Continuation] = None) -> Any:
        """Run this command through a fresh ``ExecutionPipeline``."""
        pipeline = ExecutionPipeline(self, argv, fallback, max_depth=self._commander.max_depth)
        return await pipeline.run()

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """
        Remove the command, its children and every registration it made.

        Calling ``dispose`` again is a no-op.
        """
        if self._disposed:
            return
        self._disposed = True

        for name in list(self._option_disposers):
            self.remove_option(name)
        if self._authority_disposer is not None:
            self._authority_disposer()
            self._authority_disposer = None

        self.events.emit(REMOVED_EVENT, self)
        for child in self.children:
            child.dispose()

        for name in self._aliases:
            if self._commander.get(name) is self:
                self._commander._delete(name)
        self._commander._unregister(self)

        parent = self.parent
        if parent is not None and self.name in parent._children:
            parent._children.remove(self.name)
        logger.debug(f"Disposed command '{self.name}'")

    def to_dict(self) -> Dict[str, Any]:
        """Describe the command and its dot-named children."""
        return {
            "name": self.name,
            "aliases": self.aliases,
            "declaration": self.declaration,
            "options": [
                {"name": decl.name, "description": decl.config.description, "authority": decl.config.authority}
                for decl in self._options.values()
            ],
            "children": [child.to_dict() for child in self.children if "." in child.name],
        }
