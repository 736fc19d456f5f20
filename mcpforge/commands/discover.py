"""``discover``: fetch tool lists and persist normalized manifests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from rich.console import Console

from mcpforge.client.transport import McpClient
from mcpforge.commands.base import FAILURE, SUCCESS, Command
from mcpforge.core.manifest import ToolManifestNormalizer, utc_timestamp
from mcpforge.core.servers import ServerRepository
from mcpforge.errors import McpError
from mcpforge.generation.writer import atomic_write
from mcpforge.validation.config import ServerConfig

logger = logging.getLogger(__name__)


class DiscoverCommand(Command):
    """
    Calls ``tools/list`` on each selected server, in slug order, and writes
    the normalized manifest to the server's ``manifest`` path.

    One ``generated_at`` timestamp is shared by every manifest of a run.
    """

    name = "discover"

    def __init__(
        self,
        servers: ServerRepository,
        client: McpClient,
        normalizer: Optional[ToolManifestNormalizer] = None,
        console: Optional[Console] = None,
        clock: Optional[Callable[[], str]] = None,
    ):
        super().__init__(servers, console)
        self.client = client
        self.normalizer = normalizer or ToolManifestNormalizer()
        self.clock = clock or utc_timestamp

    def run(
        self,
        server_slugs: Iterable[str] = (),
        dry_run: bool = False,
        prune: bool = False,
        fail_fast: bool = False,
    ) -> int:
        try:
            selected = self.selected_servers(server_slugs)
            if not selected:
                self.warn("No MCP servers selected for discover.")
                return SUCCESS

            all_servers = self.servers.all()
            generated_at = self.clock()
            failed = False

            for slug, server in selected.items():
                try:
                    self._discover(server, generated_at, dry_run)
                except McpError as e:
                    failed = True
                    logger.debug("Discover failed for %s", slug, exc_info=True)
                    self.error(f"Discover failed for [{slug}]: {e}")
                    if fail_fast:
                        return FAILURE

            if prune:
                self._prune(all_servers, selected, dry_run)

            return FAILURE if failed else SUCCESS
        except McpError as e:
            self.error(str(e))
            return FAILURE

    def _discover(self, server: ServerConfig, generated_at: str, dry_run: bool) -> None:
        manifest_path = self.servers.manifest_path(server)
        endpoint = self.servers.endpoint(server)

        tools = self.client.list_tools(
            endpoint=endpoint,
            headers=self.servers.headers(server),
            timeout=server.timeout,
            retry=self.servers.retry(server),
        )
        manifest = self.normalizer.normalize(
            server_slug=server.slug,
            endpoint_env=server.endpoint_env,
            tools=tools,
            generated_at=generated_at,
        )

        if dry_run:
            self.line(f"[dry-run] {server.slug} => {manifest_path} (tools: {len(tools)})")
            return

        try:
            atomic_write(manifest_path, manifest.to_json())
        except OSError as e:
            raise McpError(f"Unable to write manifest: {manifest_path} ({e})")
        self.line(f"Discovered: {server.slug} -> {manifest_path}")

    def _prune(
        self,
        all_servers: Dict[str, ServerConfig],
        selected: Dict[str, ServerConfig],
        dry_run: bool,
    ) -> None:
        """Remove manifests of configured servers that were not selected."""
        for slug, server in all_servers.items():
            if slug in selected or not server.manifest:
                continue

            path = Path(server.manifest)
            if not path.is_file():
                continue

            if dry_run:
                self.line(f"[dry-run] prune {path}")
                continue

            path.unlink()
            self.line(f"Pruned: {path}")
