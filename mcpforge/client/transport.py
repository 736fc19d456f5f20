"""MCP server communication via JSON-RPC over HTTP."""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from mcpforge.client.retry import RetryPolicy
from mcpforge.errors import InvalidResponseError, McpTransportError, RpcError

logger = logging.getLogger(__name__)

BODY_PREVIEW_CHARS = 200


class McpClient(ABC):
    """Contract for listing and calling tools on a remote MCP server."""

    @abstractmethod
    def list_tools(
        self,
        endpoint: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 60,
        retry: Optional[RetryPolicy] = None,
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def call_tool(
        self,
        endpoint: str,
        tool_name: str,
        arguments: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 60,
        retry: Optional[RetryPolicy] = None,
    ) -> Any:
        ...


class JsonRpcMcpClient(McpClient):
    """
    Send one JSON-RPC 2.0 POST per attempt and validate the reply.

    Connection-level failures surface as ``McpTransportError`` (retried by
    the policy). Anything the server actually answered, including non-2xx
    replies, is judged by its body and never retried.
    """

    def __init__(self, http_client: Optional[httpx.Client] = None):
        self._http_client = http_client

    # ── MCP Protocol ──────────────────────────────────────────────────────

    def list_tools(self, endpoint, headers=None, timeout=60, retry=None):
        """Fetch the tool list from the MCP server."""
        result = self._request_with_retry(endpoint, "tools/list", {}, headers, timeout, retry)

        tools = result.get("tools", [])
        if not isinstance(tools, list):
            raise InvalidResponseError("Invalid MCP response for tools/list.")

        return [tool for tool in tools if isinstance(tool, dict)]

    def call_tool(self, endpoint, tool_name, arguments, headers=None, timeout=60, retry=None):
        """Call a tool on the MCP server."""
        params = {"name": tool_name, "arguments": arguments}
        result = self._request_with_retry(endpoint, "tools/call", params, headers, timeout, retry)
        content = result.get("content")
        return result if content is None else content

    # ── JSON-RPC ──────────────────────────────────────────────────────────

    def _request_with_retry(
        self,
        endpoint: str,
        method: str,
        params: Dict[str, Any],
        headers: Optional[Dict[str, str]],
        timeout: float,
        retry: Optional[RetryPolicy],
    ) -> Dict[str, Any]:
        policy = retry or RetryPolicy(attempts=1)
        return policy.call(lambda: self.send(endpoint, method, params, headers or {}, timeout))

    def send(
        self,
        endpoint: str,
        method: str,
        params: Dict[str, Any],
        headers: Dict[str, str],
        timeout: float,
    ) -> Dict[str, Any]:
        """Send a single JSON-RPC request and return its ``result`` object."""
        request = {
            "jsonrpc": "2.0",
            "id": str(uuid.uuid4()),
            "method": method,
            "params": params,
        }
        request_headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **headers,
        }

        logger.debug("MCP %s -> %s", method, endpoint)
        try:
            response = self._post(endpoint, json.dumps(request), request_headers, timeout)
        except httpx.TransportError as exc:
            logger.debug("MCP transport failure for %s: %s", endpoint, exc)
            raise McpTransportError(endpoint) from exc

        status = response.status_code
        body = response.text

        try:
            decoded = json.loads(body)
        except ValueError:
            raise InvalidResponseError(
                f"Invalid JSON-RPC response from MCP endpoint: {endpoint} "
                f"(HTTP {status}): invalid JSON. Body: {_preview(body)}"
            )

        if not isinstance(decoded, dict):
            raise InvalidResponseError(
                f"Invalid JSON-RPC response from MCP endpoint: {endpoint} "
                f"(HTTP {status}): expected object, got {_json_type(decoded)}. "
                f"Body: {_preview(body)}"
            )

        error = decoded.get("error")
        if error is not None:
            message = "Unknown MCP error"
            if isinstance(error, dict) and error.get("message") is not None:
                message = str(error["message"])
            raise RpcError(method, message)

        result = decoded.get("result")
        if not isinstance(result, dict):
            raise InvalidResponseError(
                f"Missing or invalid result in JSON-RPC response for [{method}] "
                f"from {endpoint} (HTTP {status}). Body: {_preview(body)}"
            )

        return result

    def _post(
        self,
        endpoint: str,
        content: str,
        headers: Dict[str, str],
        timeout: float,
    ) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.post(endpoint, content=content, headers=headers, timeout=timeout)
        return httpx.post(endpoint, content=content, headers=headers, timeout=timeout)


def _preview(body: str) -> str:
    if len(body) <= BODY_PREVIEW_CHARS:
        return body
    return body[:BODY_PREVIEW_CHARS] + "... (truncated)"


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return type(value).__name__
