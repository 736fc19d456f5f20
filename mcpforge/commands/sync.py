"""``sync``: discover, then generate from the fresh manifests."""

from __future__ import annotations

from typing import Iterable

from mcpforge.commands.base import FAILURE, SUCCESS
from mcpforge.commands.discover import DiscoverCommand
from mcpforge.commands.generate import GenerateCommand


class SyncCommand:
    """Runs ``generate`` only when ``discover`` fully succeeded."""

    name = "sync"

    def __init__(self, discover: DiscoverCommand, generate: GenerateCommand):
        self.discover = discover
        self.generate = generate

    def run(
        self,
        server_slugs: Iterable[str] = (),
        dry_run: bool = False,
        prune: bool = False,
        fail_fast: bool = False,
        clean: bool = False,
        fail_on_collision: bool = False,
    ) -> int:
        server_slugs = list(server_slugs)

        exit_code = self.discover.run(
            server_slugs, dry_run=dry_run, prune=prune, fail_fast=fail_fast
        )
        if exit_code != SUCCESS:
            return FAILURE

        return self.generate.run(
            server_slugs, dry_run=dry_run, clean=clean, fail_on_collision=fail_on_collision
        )
