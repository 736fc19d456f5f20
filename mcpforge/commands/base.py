"""Shared plumbing for the discover, generate, sync and health commands."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from rich.console import Console
from rich.markup import escape

from mcpforge.core.servers import ServerRepository
from mcpforge.validation.config import ServerConfig

SUCCESS = 0
FAILURE = 1


class Command:
    """
    Base class for pipeline commands.

    Commands print progress to a rich ``Console`` and return an exit code
    from ``run``; they never call ``sys.exit`` themselves.
    """

    name = ""

    def __init__(self, servers: ServerRepository, console: Optional[Console] = None):
        self.servers = servers
        self.console = console or Console()

    def selected_servers(self, server_slugs: Iterable[str] = ()) -> Dict[str, ServerConfig]:
        return self.servers.selected([slug for slug in server_slugs if isinstance(slug, str)])

    # ── Output ────────────────────────────────────────────────────────────

    def line(self, message: str) -> None:
        self.console.print(escape(message), highlight=False)

    def info(self, message: str) -> None:
        self.console.print(f"[green]{escape(message)}[/green]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/red]")
