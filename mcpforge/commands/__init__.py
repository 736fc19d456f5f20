"""Pipeline commands behind the ``mcpforge`` CLI."""

from mcpforge.commands.base import FAILURE, SUCCESS, Command
from mcpforge.commands.discover import DiscoverCommand
from mcpforge.commands.generate import GenerateCommand
from mcpforge.commands.health import HealthCommand
from mcpforge.commands.sync import SyncCommand

__all__ = [
    "FAILURE",
    "SUCCESS",
    "Command",
    "DiscoverCommand",
    "GenerateCommand",
    "HealthCommand",
    "SyncCommand",
]
