"""Registration table from ``(server, tool, class)`` to generated binding classes."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from mcpforge.errors import ConfigurationError
from mcpforge.tools.base import McpTool

logger = logging.getLogger(__name__)

BindingKey = Tuple[str, str, str]


@dataclass(frozen=True)
class Binding:
    server_slug: str
    tool_name: str
    class_name: str
    factory: Callable[..., McpTool]


class BindingTable:
    """
    Explicit lookup of generated classes.

    Generated modules never register themselves on import; the aggregate
    ``McpToolset`` lists them and ``load`` feeds that list in here. A manifest
    may repeat a tool name, so the generated class name is part of the key.
    """

    def __init__(self) -> None:
        self._bindings: Dict[BindingKey, Binding] = {}

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, key: Tuple[str, ...]) -> bool:
        return self.get(*key) is not None

    def register(self, tool_class: Type[McpTool]) -> Binding:
        server_slug = getattr(tool_class, "server_slug", "")
        tool_name = getattr(tool_class, "raw_tool_name", "")
        if not server_slug or not tool_name:
            raise ConfigurationError(
                f"Class [{tool_class.__name__}] is not a generated MCP tool binding."
            )

        binding = Binding(
            server_slug=server_slug,
            tool_name=tool_name,
            class_name=tool_class.__name__,
            factory=tool_class,
        )
        self._bindings[(server_slug, tool_name, binding.class_name)] = binding
        return binding

    def get(
        self,
        server_slug: str,
        tool_name: str,
        class_name: Optional[str] = None,
    ) -> Optional[Binding]:
        """Exact lookup, or the first binding of the tool when no class is given."""
        if class_name is not None:
            return self._bindings.get((server_slug, tool_name, class_name))

        for key in sorted(self._bindings):
            if key[:2] == (server_slug, tool_name):
                return self._bindings[key]
        return None

    def find(
        self,
        server_slug: str,
        tool_name: str,
        class_name: str,
        module_name: str,
    ) -> Optional[Binding]:
        """Look a binding up, importing ``module_name`` when the table lacks it.

        A partial ``generate`` rewrites the aggregate with its own servers
        only; modules of the other servers are still found on disk this way.
        """
        binding = self.get(server_slug, tool_name, class_name)
        if binding is not None:
            return binding

        module = _import_generated(module_name)
        tool_class = getattr(module, class_name, None) if module is not None else None
        if not isinstance(tool_class, type) or not issubclass(tool_class, McpTool):
            return None
        if (tool_class.server_slug, tool_class.raw_tool_name) != (server_slug, tool_name):
            return None

        logger.debug("Registered %s from %s", class_name, module_name)
        return self.register(tool_class)

    def all(self) -> List[Binding]:
        return [self._bindings[key] for key in sorted(self._bindings)]

    @classmethod
    def from_classes(cls, classes: Iterable[Type[McpTool]]) -> "BindingTable":
        table = cls()
        for tool_class in classes:
            table.register(tool_class)
        return table

    @classmethod
    def load(cls, namespace: str) -> "BindingTable":
        """Import ``<namespace>.McpToolset`` and register every listed class.

        An aggregate that has not been generated yet gives an empty table.
        """
        module = _import_generated(f"{namespace}.McpToolset")
        if module is None:
            return cls()
        return cls.from_classes(module.McpToolset.classes)


def _import_generated(module_name: str) -> Optional[ModuleType]:
    """Import a generated module; ``None`` when it or its package does not exist."""
    importlib.invalidate_caches()
    try:
        return importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        if not e.name or not (module_name + ".").startswith(e.name + "."):
            raise
        logger.debug("No generated module at %s", module_name)
        return None
