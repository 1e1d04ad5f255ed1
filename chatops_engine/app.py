"""Process-scoped application container.

``App`` wires one instance of every shared collaborator together and is the
only place they live; nothing in the engine is a module-level registry.

Lifecycle
---------

Construction order is: event bus, text provider, ``Permissions`` (seeded with
the ``authority.*`` and ``bot.*`` providers), ``Commander``, then the built-in
permission checker on ``command/before-execute``. ``dispose()`` tears the
commands down (cascading to children), removes the checker and clears the bus.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from .commands import Argv, Command, CommandConfig, Commander
from .commands.command import BEFORE_EXECUTE_EVENT
from .commands.pipeline import Continuation
from .core.config import Settings, get_settings
from .core.events import EventBus
from .core.logging_config import setup_logging
from .core.utils import Disposer
from .i18n import BuiltinTextProvider, StackedTextProvider, TextProvider
from .permissions import Permissions
from .session import Session

logger = logging.getLogger(__name__)

LOW_AUTHORITY_TEXT = "internal.low-authority"


class App:
    """Owns the event bus, text catalog, permission resolver and command registry."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        i18n: Optional[TextProvider] = None,
        *,
        configure_logging: bool = False,
    ) -> None:
        """
        Build the collaborators.

        Args:
            settings: Engine settings; defaults to ``get_settings()``.
            i18n: Application text catalog, stacked over the builtin messages.
            configure_logging: Call ``setup_logging`` with the settings' values.
        """
        self.settings = settings or get_settings()
        if configure_logging:
            setup_logging(
                log_level=self.settings.log_level,
                log_format=self.settings.log_format,
                enable_file=self.settings.enable_file_logging,
                log_file_dir=self.settings.log_file_dir,
            )
        self.events = EventBus()
        self.i18n: TextProvider = StackedTextProvider(i18n, BuiltinTextProvider()) if i18n else BuiltinTextProvider()
        self.permissions = Permissions(self.events)
        self.commander = Commander(self.events, self.permissions, self.settings)
        self._disposables: List[Disposer] = [self.events.on(BEFORE_EXECUTE_EVENT, self._check_permissions)]
        logger.debug(f"App initialized (max_depth={self.settings.max_depth}, i18n={self.i18n.version()})")

    def command(
        self,
        definition: str,
        description: str = "",
        config: Union[CommandConfig, Dict[str, Any], None] = None,
    ) -> Command:
        """Declare a command. See ``Commander.command``."""
        return self.commander.command(definition, description, config)

    def session(self, **kwargs: Any) -> Session:
        """Build a ``Session`` bound to this app's text catalog and default locale."""
        kwargs.setdefault("i18n", self.i18n)
        kwargs.setdefault("default_locale", self.settings.default_locale)
        return Session(**kwargs)

    async def execute(self, argv: Argv, fallback: Optional[Continuation] = None) -> Any:
        """Gate and run an invocation. See ``Commander.execute``."""
        return await self.commander.execute(argv, fallback)

    async def _check_permissions(self, argv: Argv) -> Optional[str]:
        command = argv.command
        if command is None:
            return None
        required = [f"command.{command.name}"]
        required.extend(command.option_permission(key) for key in argv.options if key in command.options)
        session = argv.session
        if await self.permissions.test(session.permissions, required, session):
            return None
        return session.text(LOW_AUTHORITY_TEXT)

    def dispose(self) -> None:
        """Tear down every command and listener owned by this app."""
        self.commander.dispose()
        disposables, self._disposables = self._disposables, []
        for dispose in disposables:
            dispose()
        self.events.clear()
        logger.debug("App disposed")
