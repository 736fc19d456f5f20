"""Python source rendering for generated tool bindings and toolsets."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mcpforge.generation.schema_compiler import SchemaCompiler

HEADER = '"""Generated by mcpforge. Do not edit: run `mcpforge generate` instead."""\n'


@dataclass
class GeneratedBindingDescriptor:
    """Everything known about one binding during a generation pass."""

    server_slug: str
    tool_name: str
    class_name: str
    module: str
    path: Path
    schema_expression: str = "{}"


class GeneratedToolRenderer:
    """Renders one ``McpTool`` subclass per tool."""

    def __init__(self, compiler: Optional[SchemaCompiler] = None):
        self._compiler = compiler or SchemaCompiler()

    def schema_expression(self, input_schema: Dict[str, Any]) -> str:
        return self._compiler.generate(input_schema)

    def render(
        self,
        class_name: str,
        server_slug: str,
        tool_name: str,
        description: str,
        input_schema: Dict[str, Any],
        schema_code: Optional[str] = None,
    ) -> str:
        if schema_code is None:
            schema_code = self.schema_expression(input_schema)

        return (
            f"{HEADER}\n"
            "from mcpforge.tools.base import McpTool\n"
            "from mcpforge.tools.json_schema import JsonSchema\n"
            "\n"
            "\n"
            f"class {class_name}(McpTool):\n"
            f"    server_slug = {server_slug!r}\n"
            f"    raw_tool_name = {tool_name!r}\n"
            f"    description = {description!r}\n"
            "\n"
            "    def schema(self, schema: JsonSchema):\n"
            f"        return {schema_code}\n"
        )


class GeneratedToolsetRenderer:
    """Renders a ``StaticToolset`` subclass listing generated classes."""

    def render(self, class_name: str, tool_imports: Sequence[Tuple[str, str]]) -> str:
        """``tool_imports`` holds ``(module, class_name)`` pairs, already ordered."""
        imports = [f"from {module} import {name}" for module, name in tool_imports]
        imports.append("from mcpforge.tools.toolset import StaticToolset")

        if tool_imports:
            entries: List[str] = [f"        {name}," for _, name in tool_imports]
            classes = "[\n" + "\n".join(entries) + "\n    ]"
        else:
            classes = "[]"

        return (
            f"{HEADER}\n"
            + "\n".join(imports)
            + "\n\n\n"
            f"class {class_name}(StaticToolset):\n"
            f"    classes = {classes}\n"
        )
