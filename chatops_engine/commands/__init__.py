"""Command declaration, registry and execution pipeline.

- ``Command`` holds aliases, checkers, actions and configuration.
- ``Commander`` owns the alias table and declares commands from paths.
- ``ExecutionPipeline`` runs checkers, then actions, then the fallback.
- ``Argv`` is the argument context handed in by the parser.
"""

from .command import Command
from .models import Argv, CommandConfig, OptionConfig
from .pipeline import ExecutionPipeline, Next, PipelineState
from .registry import Commander

__all__ = [
    "Argv",
    "Command",
    "CommandConfig",
    "Commander",
    "ExecutionPipeline",
    "Next",
    "OptionConfig",
    "PipelineState",
]
