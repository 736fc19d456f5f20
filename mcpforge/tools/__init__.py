"""Runtime side of generated bindings: tool base class, schema builder, registry."""

from mcpforge.tools.base import McpTool
from mcpforge.tools.json_schema import JsonSchema
from mcpforge.tools.registry import GeneratedToolRegistry
from mcpforge.tools.table import Binding, BindingTable
from mcpforge.tools.toolset import GeneratedToolset, HasMcpTools, StaticToolset

__all__ = [
    "Binding",
    "BindingTable",
    "GeneratedToolRegistry",
    "GeneratedToolset",
    "HasMcpTools",
    "JsonSchema",
    "McpTool",
    "StaticToolset",
]
