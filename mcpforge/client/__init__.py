"""JSON-RPC client and retry policy for remote MCP servers."""

from mcpforge.client.retry import RetryPolicy
from mcpforge.client.transport import JsonRpcMcpClient, McpClient

__all__ = ["JsonRpcMcpClient", "McpClient", "RetryPolicy"]
