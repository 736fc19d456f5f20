"""Request-time dispatch of tool calls to their MCP server."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from mcpforge.client.transport import McpClient
from mcpforge.core.servers import ServerRepository


class InvocationRouter(ABC):
    """Single call path used by every generated binding."""

    @abstractmethod
    def invoke(self, server_slug: str, tool_name: str, arguments: Dict[str, Any]) -> Any:
        ...


class DefaultInvocationRouter(InvocationRouter):
    """Looks up the server's endpoint, auth and retry settings, then calls the tool."""

    def __init__(self, client: McpClient, servers: ServerRepository):
        self._client = client
        self._servers = servers

    def invoke(self, server_slug, tool_name, arguments):
        server = self._servers.get(server_slug)

        return self._client.call_tool(
            endpoint=self._servers.endpoint(server),
            tool_name=tool_name,
            arguments=arguments,
            headers=self._servers.headers(server, tool_name),
            timeout=server.timeout,
            retry=self._servers.retry(server),
        )
