"""``generate``: turn persisted manifests into importable Python bindings."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from rich.console import Console

from mcpforge.commands.base import FAILURE, SUCCESS, Command
from mcpforge.core.manifest import read_manifest
from mcpforge.core.servers import ServerRepository
from mcpforge.errors import ManifestDecodeError, McpError
from mcpforge.generation.naming import ToolClassNameResolver, UsedNameSet, server_namespace
from mcpforge.generation.renderer import (
    GeneratedBindingDescriptor,
    GeneratedToolRenderer,
    GeneratedToolsetRenderer,
)
from mcpforge.generation.writer import atomic_write
from mcpforge.validation.config import GeneratedConfig, ServerConfig

logger = logging.getLogger(__name__)

AGGREGATE_TOOLSET = "McpToolset"

PACKAGE_INIT = '"""Generated by mcpforge. Do not edit."""\n'


@dataclass
class ToolDefinition:
    server_slug: str
    tool_name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)


class GenerateCommand(Command):
    """
    Renders one module per manifest tool, one toolset per server and the
    ``McpToolset`` aggregate.

    Tools are processed in ``(server, tool)`` order against a single
    ``UsedNameSet``; the registry replays the same order at runtime.
    """

    name = "generate"

    def __init__(
        self,
        servers: ServerRepository,
        settings: Optional[GeneratedConfig] = None,
        renderer: Optional[GeneratedToolRenderer] = None,
        toolset_renderer: Optional[GeneratedToolsetRenderer] = None,
        resolver: Optional[ToolClassNameResolver] = None,
        console: Optional[Console] = None,
    ):
        super().__init__(servers, console)
        self.settings = settings or GeneratedConfig()
        self.renderer = renderer or GeneratedToolRenderer()
        self.toolset_renderer = toolset_renderer or GeneratedToolsetRenderer()
        self.resolver = resolver or ToolClassNameResolver()

    @property
    def base_path(self) -> Path:
        return Path(self.settings.path)

    @property
    def namespace(self) -> str:
        return self.settings.namespace.strip(".")

    def run(
        self,
        server_slugs: Iterable[str] = (),
        dry_run: bool = False,
        clean: bool = False,
        fail_on_collision: bool = False,
    ) -> int:
        try:
            selected = self.selected_servers(server_slugs)
            if not selected:
                self.warn("No MCP servers selected for generation.")
                return SUCCESS

            if clean:
                self._clean(selected, dry_run)

            definitions, failed = self._load_definitions(selected)
            bindings = self._generate_tools(definitions, dry_run, not fail_on_collision)
            count = len(bindings)
            count += self._generate_toolsets(bindings, dry_run, not fail_on_collision)

            self.info(f"Generated tools: {count}")
            return FAILURE if failed else SUCCESS
        except McpError as e:
            self.error(str(e))
            return FAILURE
        except OSError as e:
            self.error(f"Unable to write generated files: {e}")
            return FAILURE

    # ── Manifests ─────────────────────────────────────────────────────────

    def _load_definitions(self, selected: Dict[str, ServerConfig]):
        definitions: List[ToolDefinition] = []
        failed = False

        for slug, server in selected.items():
            if not server.manifest:
                self.warn(f"Skipping [{slug}] - missing `manifest` path.")
                continue

            path = Path(server.manifest)
            if not path.is_file():
                self.warn(f"Skipping [{slug}] - manifest not found: {path}")
                continue

            try:
                manifest = read_manifest(path)
            except ManifestDecodeError as e:
                failed = True
                self.error(f"Generate failed for [{slug}]: {e}")
                continue

            tools = manifest.get("tools", [])
            if not isinstance(tools, list):
                self.warn(f"Skipping [{slug}] - invalid manifest `tools` shape.")
                continue

            for tool in tools:
                if not isinstance(tool, dict) or not isinstance(tool.get("name"), str):
                    continue
                description = tool.get("description")
                input_schema = tool.get("input_schema")
                definitions.append(ToolDefinition(
                    server_slug=slug,
                    tool_name=tool["name"],
                    description=description if isinstance(description, str) else tool["name"],
                    input_schema=input_schema if isinstance(input_schema, dict) else {},
                ))

        definitions.sort(key=lambda d: (d.server_slug, d.tool_name))
        return definitions, failed

    # ── Rendering ─────────────────────────────────────────────────────────

    def _generate_tools(
        self,
        definitions: List[ToolDefinition],
        dry_run: bool,
        allow_collision_suffix: bool,
    ) -> List[GeneratedBindingDescriptor]:
        used_names = UsedNameSet()
        bindings = []

        for definition in definitions:
            server_dir = server_namespace(definition.server_slug)
            class_name = self.resolver.resolve(
                definition.server_slug,
                definition.tool_name,
                used_names,
                allow_collision_suffix=allow_collision_suffix,
            )
            binding = GeneratedBindingDescriptor(
                server_slug=definition.server_slug,
                tool_name=definition.tool_name,
                class_name=class_name,
                module=f"{self.namespace}.{server_dir}.{class_name}",
                path=self.base_path / server_dir / f"{class_name}.py",
                schema_expression=self.renderer.schema_expression(definition.input_schema),
            )
            source = self.renderer.render(
                class_name=class_name,
                server_slug=definition.server_slug,
                tool_name=definition.tool_name,
                description=definition.description,
                input_schema=definition.input_schema,
                schema_code=binding.schema_expression,
            )
            self._write(binding.path, source, binding.module, dry_run)
            bindings.append(binding)

        return bindings

    def _generate_toolsets(
        self,
        bindings: List[GeneratedBindingDescriptor],
        dry_run: bool,
        allow_collision_suffix: bool,
    ) -> int:
        if not bindings:
            return 0

        by_server: Dict[str, List[GeneratedBindingDescriptor]] = {}
        for binding in bindings:
            by_server.setdefault(binding.server_slug, []).append(binding)

        used_names = UsedNameSet()
        count = 0

        for slug in sorted(by_server):
            server_dir = server_namespace(slug)
            class_name = self.resolver.resolve_toolset(
                slug, used_names, allow_collision_suffix=allow_collision_suffix
            )
            source = self.toolset_renderer.render(class_name, _imports(by_server[slug]))
            module = f"{self.namespace}.{server_dir}.{class_name}"
            self._write(self.base_path / server_dir / f"{class_name}.py", source, module, dry_run)
            self._write_package_init(self.base_path / server_dir, dry_run)
            count += 1

        source = self.toolset_renderer.render(AGGREGATE_TOOLSET, _imports(bindings))
        self._write(
            self.base_path / f"{AGGREGATE_TOOLSET}.py",
            source,
            f"{self.namespace}.{AGGREGATE_TOOLSET}",
            dry_run,
        )
        self._write_package_init(self.base_path, dry_run)

        return count + 1

    # ── Files ─────────────────────────────────────────────────────────────

    def _write(self, path: Path, source: str, module: str, dry_run: bool) -> None:
        if dry_run:
            self.line(f"[dry-run] {path} => {module}")
            return

        atomic_write(path, source)
        self.line(f"Generated: {path}")

    def _write_package_init(self, directory: Path, dry_run: bool) -> None:
        init = directory / "__init__.py"
        if dry_run or init.exists():
            return
        atomic_write(init, PACKAGE_INIT)

    def _clean(self, selected: Dict[str, ServerConfig], dry_run: bool) -> None:
        """Remove generated files of the selected servers and the aggregate."""
        targets = [self.base_path / server_namespace(slug) for slug in selected]
        targets.append(self.base_path / f"{AGGREGATE_TOOLSET}.py")

        for target in targets:
            if not target.exists():
                continue

            if dry_run:
                self.line(f"[dry-run] clean {target}")
                continue

            try:
                if target.is_dir():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            except OSError as e:
                self.warn(f"Skipping clean for [{target}]: {e}")
                continue
            self.line(f"Cleaned: {target}")


def _imports(bindings: List[GeneratedBindingDescriptor]):
    """``(module, class)`` pairs sorted by dotted identifier."""
    return sorted((binding.module, binding.class_name) for binding in bindings)
