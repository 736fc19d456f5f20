"""
mcpforge - generated Python bindings for remote MCP tool servers.

Turns configured MCP servers into deterministic, strongly named tool
classes that a host application can invoke.

Pipeline:   MCP server --tools/list--> manifest (JSON, on disk)
            manifest --generate--> <namespace>/<Server>/<Class>.py
            McpTool.handle() --> router --> tools/call on the server

Manifests are the only durable state. Everything else is rebuilt from
them on every run.
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from mcpforge.client import JsonRpcMcpClient, McpClient, RetryPolicy
from mcpforge.core import DefaultInvocationRouter, ServerRepository, ToolManifestNormalizer
from mcpforge.errors import (
    ConfigurationError,
    InvalidResponseError,
    McpError,
    McpTransportError,
    RpcError,
)
from mcpforge.tools import BindingTable, GeneratedToolRegistry, GeneratedToolset, McpTool

__all__ = [
    "BindingTable",
    "ConfigurationError",
    "DefaultInvocationRouter",
    "GeneratedToolRegistry",
    "GeneratedToolset",
    "InvalidResponseError",
    "JsonRpcMcpClient",
    "McpClient",
    "McpError",
    "McpTransportError",
    "McpTool",
    "RetryPolicy",
    "RpcError",
    "ServerRepository",
    "ToolManifestNormalizer",
    "__version__",
]
