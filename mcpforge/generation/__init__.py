"""Code generation: naming, schema compilation, rendering and file writes."""

from mcpforge.generation.naming import ToolClassNameResolver, UsedNameSet, server_namespace
from mcpforge.generation.renderer import (
    GeneratedBindingDescriptor,
    GeneratedToolRenderer,
    GeneratedToolsetRenderer,
)
from mcpforge.generation.schema_compiler import SchemaCompiler
from mcpforge.generation.writer import atomic_write

__all__ = [
    "GeneratedBindingDescriptor",
    "GeneratedToolRenderer",
    "GeneratedToolsetRenderer",
    "SchemaCompiler",
    "ToolClassNameResolver",
    "UsedNameSet",
    "atomic_write",
    "server_namespace",
]
