"""Tool collections: generated static toolsets, registry-backed toolsets and the agent mixin."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Type, Union

from mcpforge.core.router import InvocationRouter
from mcpforge.errors import ConfigurationError
from mcpforge.tools.base import McpTool
from mcpforge.tools.table import BindingTable

if TYPE_CHECKING:
    from mcpforge.tools.registry import GeneratedToolRegistry

ClassSelector = Union[str, Type[McpTool]]


def selector_names(classes: Iterable[ClassSelector]) -> set:
    """Bare class names for a mix of classes and (dotted) class identifiers."""
    names = set()
    for selector in classes:
        if isinstance(selector, type):
            names.add(selector.__name__)
        elif isinstance(selector, str) and selector:
            names.add(selector.rsplit(".", 1)[-1])
    return names


def only_classes(tools: Sequence[McpTool], classes: Iterable[ClassSelector]) -> List[McpTool]:
    allowed = selector_names(classes)
    return [tool for tool in tools if type(tool).__name__ in allowed]


def except_classes(tools: Sequence[McpTool], classes: Iterable[ClassSelector]) -> List[McpTool]:
    excluded = selector_names(classes)
    return [tool for tool in tools if type(tool).__name__ not in excluded]


class StaticToolset:
    """
    Base class of the generated ``<Server>Toolset`` and ``McpToolset`` modules.

    Subclasses only set ``classes``, already sorted by dotted identifier.
    """

    classes: List[Type[McpTool]] = []

    def __init__(self, router: InvocationRouter):
        self._router = router

    def all(self) -> List[McpTool]:
        return [tool_class(self._router) for tool_class in self.classes]

    def only_classes(self, classes: Iterable[ClassSelector]) -> List[McpTool]:
        return only_classes(self.all(), classes)

    def except_classes(self, classes: Iterable[ClassSelector]) -> List[McpTool]:
        return except_classes(self.all(), classes)

    @classmethod
    def bindings(cls) -> BindingTable:
        return BindingTable.from_classes(cls.classes)


class GeneratedToolset:
    """Registry-backed toolset, optionally narrowed to a set of servers."""

    def __init__(self, registry: "GeneratedToolRegistry"):
        self._registry = registry
        self._servers: Optional[List[str]] = None

    def for_servers(self, servers: Optional[Iterable[str]] = None) -> "GeneratedToolset":
        narrowed = copy.copy(self)
        narrowed._servers = list(servers) if servers is not None else None
        return narrowed

    def all(self) -> List[McpTool]:
        return list(self._registry.for_servers(self._servers))

    def only_classes(self, classes: Iterable[ClassSelector]) -> List[McpTool]:
        return only_classes(self.all(), classes)

    def except_classes(self, classes: Iterable[ClassSelector]) -> List[McpTool]:
        return except_classes(self.all(), classes)


class HasMcpTools:
    """
    Mixin for host agents exposing generated MCP tools.

    Set ``mcp_toolset`` and override the ``mcp_*`` hooks to narrow the
    selection. ``only`` wins over ``except`` when both are given.
    """

    mcp_toolset: Optional[GeneratedToolset] = None

    def mcp_servers(self) -> Optional[List[str]]:
        return None

    def mcp_only_tool_classes(self) -> List[ClassSelector]:
        return []

    def mcp_except_tool_classes(self) -> List[ClassSelector]:
        return []

    def tools(self) -> List[McpTool]:
        if self.mcp_toolset is None:
            raise ConfigurationError(
                f"{type(self).__name__} has no `mcp_toolset`; assign a GeneratedToolset first."
            )

        toolset = self.mcp_toolset.for_servers(self.mcp_servers())

        only = self.mcp_only_tool_classes()
        if only:
            return toolset.only_classes(only)

        excluded = self.mcp_except_tool_classes()
        if excluded:
            return toolset.except_classes(excluded)

        return toolset.all()
