"""Tool registry: replays manifest discovery to resolve generated bindings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from mcpforge.core.manifest import read_manifest
from mcpforge.core.router import InvocationRouter
from mcpforge.core.servers import ServerRepository
from mcpforge.errors import ConfigurationError, ManifestDecodeError
from mcpforge.generation.naming import ToolClassNameResolver, UsedNameSet, server_namespace
from mcpforge.tools.base import McpTool
from mcpforge.tools.table import BindingTable

logger = logging.getLogger(__name__)

ToolAllowlist = Union[Sequence[str], Dict[str, Sequence[str]]]


@dataclass(frozen=True)
class ResolvedTool:
    """One tool of one manifest, with the identifier generation gave it."""

    server_slug: str
    tool_name: str
    class_name: str
    identifier: str


class GeneratedToolRegistry:
    """
    Serves tool instances for the generated bindings of selected servers.

    Manifests are read again on every call and names are reconstructed with
    a fresh ``UsedNameSet``, in the same order ``generate`` used. A resolved
    identifier that the ``BindingTable`` cannot back means generation was
    skipped or is stale, which is an error rather than a skip.
    """

    def __init__(
        self,
        servers: ServerRepository,
        bindings: BindingTable,
        router: InvocationRouter,
        namespace: str = "generated_tools",
        resolver: Optional[ToolClassNameResolver] = None,
    ):
        self._servers = servers
        self._bindings = bindings
        self._router = router
        self._namespace = namespace.strip(".")
        self._resolver = resolver or ToolClassNameResolver()

    # ── Resolution ────────────────────────────────────────────────────────

    def resolve(
        self,
        servers: Optional[Sequence[str]] = None,
        tools: Optional[ToolAllowlist] = None,
    ) -> List[ResolvedTool]:
        used_names = UsedNameSet()
        resolved: List[ResolvedTool] = []

        for server in self._servers.selected(servers or ()).values():
            for tool_name in self._tool_names(server.slug, server.manifest):
                class_name = self._resolver.resolve(server.slug, tool_name, used_names)
                if not _allowed(server.slug, tool_name, tools):
                    continue
                resolved.append(ResolvedTool(
                    server_slug=server.slug,
                    tool_name=tool_name,
                    class_name=class_name,
                    identifier=f"{self._namespace}.{server_namespace(server.slug)}.{class_name}",
                ))

        return resolved

    def identifiers(
        self,
        servers: Optional[Sequence[str]] = None,
        tools: Optional[ToolAllowlist] = None,
    ) -> List[str]:
        """Dotted identifiers (``<namespace>.<Server>.<Class>``) in resolution order."""
        return [tool.identifier for tool in self.resolve(servers, tools)]

    def for_servers(
        self,
        servers: Optional[Sequence[str]] = None,
        tools: Optional[ToolAllowlist] = None,
    ) -> Iterator[McpTool]:
        for tool in self.resolve(servers, tools):
            binding = self._bindings.find(
                tool.server_slug, tool.tool_name, tool.class_name, tool.identifier
            )
            if binding is None:
                raise ConfigurationError(
                    f"Generated tool binding [{tool.identifier}] was not found. "
                    "Run `mcpforge generate`."
                )
            yield binding.factory(self._router)

    # ── Manifest replay ───────────────────────────────────────────────────

    def _tool_names(self, server_slug: str, manifest: Optional[str]) -> List[str]:
        if not manifest:
            return []

        try:
            decoded = read_manifest(manifest)
        except ManifestDecodeError as e:
            logger.debug("Skipping manifest for %s: %s", server_slug, e)
            return []

        tools = decoded.get("tools", [])
        if not isinstance(tools, list):
            return []

        names = [
            tool["name"] for tool in tools
            if isinstance(tool, dict) and isinstance(tool.get("name"), str)
        ]
        return sorted(names)


def _allowed(server_slug: str, tool_name: str, tools: Optional[ToolAllowlist]) -> bool:
    """Flat ``["server.tool", ...]`` and ``{server: [tool, ...]}`` forms are never merged."""
    if not tools:
        return True

    if isinstance(tools, dict):
        listed: Any = tools.get(server_slug)
        if not isinstance(listed, (list, tuple, set)):
            return False
        return tool_name in {name for name in listed if isinstance(name, str)}

    allowed = {entry for entry in tools if isinstance(entry, str) and entry}
    return f"{server_slug}.{tool_name}" in allowed
