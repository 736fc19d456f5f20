"""
mcpforge CLI - discover MCP tools and generate Python bindings.

Commands read mcpforge.yaml (or --config), do their work, print progress
and exit 0 on full success or 1 when any selected server failed.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from mcpforge import __version__
from mcpforge.client.transport import JsonRpcMcpClient, McpClient
from mcpforge.commands import DiscoverCommand, GenerateCommand, HealthCommand, SyncCommand
from mcpforge.core.servers import ServerRepository
from mcpforge.errors import ConfigurationError
from mcpforge.validation.config import Config

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


class Runtime:
    """Lazily loaded config, servers and client shared by one CLI invocation."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        client: Optional[McpClient] = None,
        output: Optional[Console] = None,
    ):
        self.config_path = config_path
        self._client = client
        self.console = output or console
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = Config.load(self.config_path)
        return self._config

    @property
    def servers(self) -> ServerRepository:
        return ServerRepository(self.config.merged)

    @property
    def client(self) -> McpClient:
        if self._client is None:
            self._client = JsonRpcMcpClient()
        return self._client

    def discover(self) -> DiscoverCommand:
        return DiscoverCommand(self.servers, self.client, console=self.console)

    def generate(self) -> GenerateCommand:
        return GenerateCommand(
            self.servers, settings=self.config.merged.generated, console=self.console
        )

    def health(self) -> HealthCommand:
        return HealthCommand(self.servers, self.client, console=self.console)


def _run(ctx: click.Context, build, **options) -> None:
    runtime: Runtime = ctx.obj
    try:
        command = build(runtime)
    except ConfigurationError as e:
        runtime.console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    sys.exit(command.run(**options))


server_option = click.option(
    "--server", "-s", "servers", multiple=True, help="Server slug (repeatable). Default: all."
)


@click.group()
@click.version_option(__version__, prog_name="mcpforge")
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of the nearest mcpforge.yaml.",
)
@click.option("--verbose", is_flag=True, help="Debug logging to stderr.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """
    mcpforge - generate Python bindings for remote MCP tools.

    \b
    Examples:
        mcpforge discover --server gdocs   # Refresh one manifest
        mcpforge generate --clean          # Regenerate every binding
        mcpforge sync                      # Discover, then generate
        mcpforge health --fail-fast        # Check every server
    """
    _configure_logging(verbose)
    if isinstance(ctx.obj, Runtime):
        ctx.obj.config_path = config_path
    else:
        ctx.obj = Runtime(config_path)


@cli.command()
@server_option
@click.option("--dry-run", is_flag=True, help="Show what would be written.")
@click.option("--prune", is_flag=True, help="Delete manifests of servers that were not selected.")
@click.option("--fail-fast", is_flag=True, help="Stop at the first failing server.")
@click.pass_context
def discover(ctx: click.Context, servers, dry_run: bool, prune: bool, fail_fast: bool) -> None:
    """Fetch tool lists and write normalized manifests."""
    _run(
        ctx, Runtime.discover,
        server_slugs=servers, dry_run=dry_run, prune=prune, fail_fast=fail_fast,
    )


@cli.command()
@server_option
@click.option("--dry-run", is_flag=True, help="Show what would be generated.")
@click.option("--clean", is_flag=True, help="Remove generated files for selected servers first.")
@click.option("--fail-on-collision", is_flag=True, help="Fail when a class name collides.")
@click.pass_context
def generate(ctx: click.Context, servers, dry_run: bool, clean: bool, fail_on_collision: bool) -> None:
    """Generate tool bindings from manifests."""
    _run(
        ctx, Runtime.generate,
        server_slugs=servers, dry_run=dry_run, clean=clean, fail_on_collision=fail_on_collision,
    )


@cli.command()
@server_option
@click.option("--dry-run", is_flag=True, help="Show what would be written.")
@click.option("--prune", is_flag=True, help="Delete manifests of servers that were not selected.")
@click.option("--fail-fast", is_flag=True, help="Stop at the first failing server.")
@click.option("--clean", is_flag=True, help="Remove generated files for selected servers first.")
@click.option("--fail-on-collision", is_flag=True, help="Fail when a class name collides.")
@click.pass_context
def sync(
    ctx: click.Context,
    servers,
    dry_run: bool,
    prune: bool,
    fail_fast: bool,
    clean: bool,
    fail_on_collision: bool,
) -> None:
    """Discover, then generate (skipped when discover fails)."""
    _run(
        ctx, lambda runtime: SyncCommand(runtime.discover(), runtime.generate()),
        server_slugs=servers,
        dry_run=dry_run,
        prune=prune,
        fail_fast=fail_fast,
        clean=clean,
        fail_on_collision=fail_on_collision,
    )


@cli.command()
@server_option
@click.option("--fail-fast", is_flag=True, help="Stop at the first unhealthy server.")
@click.pass_context
def health(ctx: click.Context, servers, fail_fast: bool) -> None:
    """Check that each server answers tools/list."""
    _run(ctx, Runtime.health, server_slugs=servers, fail_fast=fail_fast)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
