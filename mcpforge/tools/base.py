"""Base class of every generated MCP tool binding."""

from __future__ import annotations

import json
from typing import Any, Dict

from mcpforge.core.router import InvocationRouter
from mcpforge.tools.json_schema import JsonSchema, SchemaType, object_schema


class McpTool:
    """
    A single remote tool, invoked through an ``InvocationRouter``.

    Generated subclasses set the three class attributes and override
    ``schema`` with the compiled property map.
    """

    server_slug: str = ""
    raw_tool_name: str = ""
    description: str = ""

    def __init__(self, router: InvocationRouter):
        self._router = router

    @property
    def name(self) -> str:
        return f"{self.server_slug}.{self.raw_tool_name}"

    def schema(self, schema: JsonSchema) -> Dict[str, SchemaType]:
        return {}

    def input_schema(self) -> Dict[str, Any]:
        """JSON Schema for the tool's arguments, rebuilt from ``schema``."""
        compiled = {"type": "object"}
        compiled.update(object_schema(self.schema(JsonSchema())))
        return compiled

    def handle(self, arguments: Dict[str, Any]) -> str:
        result = self._router.invoke(self.server_slug, self.raw_tool_name, dict(arguments))
        if isinstance(result, str):
            return result
        return json.dumps(result, ensure_ascii=False, separators=(",", ":"))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
