"""``health``: check that each selected server answers ``tools/list``."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console

from mcpforge.client.transport import McpClient
from mcpforge.commands.base import FAILURE, SUCCESS, Command
from mcpforge.core.servers import ServerRepository
from mcpforge.errors import McpError


class HealthCommand(Command):
    name = "health"

    def __init__(
        self,
        servers: ServerRepository,
        client: McpClient,
        console: Optional[Console] = None,
    ):
        super().__init__(servers, console)
        self.client = client

    def run(self, server_slugs: Iterable[str] = (), fail_fast: bool = False) -> int:
        try:
            selected = self.selected_servers(server_slugs)
            if not selected:
                self.warn("No MCP servers selected for health check.")
                return SUCCESS

            failed = False
            for slug, server in selected.items():
                try:
                    tools = self.client.list_tools(
                        endpoint=self.servers.endpoint(server),
                        headers=self.servers.headers(server),
                        timeout=server.timeout,
                        retry=self.servers.retry(server),
                    )
                except McpError as e:
                    failed = True
                    self.error(f"Unhealthy: {slug} - {e}")
                    if fail_fast:
                        return FAILURE
                    continue

                plural = "" if len(tools) == 1 else "s"
                self.info(f"Healthy: {slug} ({len(tools)} tool{plural})")

            return FAILURE if failed else SUCCESS
        except McpError as e:
            self.error(str(e))
            return FAILURE
