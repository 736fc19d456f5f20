"""Shared fixtures: a recording MCP client and workspace helpers."""

import io
import json
import sys
from pathlib import Path

import pytest
from rich.console import Console

from mcpforge.client.transport import McpClient
from mcpforge.core.servers import ServerRepository
from mcpforge.validation.config import McpForgeConfig


class FakeMcpClient(McpClient):
    """Serves canned tool lists per endpoint and records every call."""

    def __init__(self):
        self.tools_by_endpoint = {}
        self.call_results = {}
        self.errors_by_endpoint = {}
        self.list_calls = []
        self.tool_calls = []

    def list_tools(self, endpoint, headers=None, timeout=60, retry=None):
        self.list_calls.append({
            "endpoint": endpoint,
            "headers": headers or {},
            "timeout": timeout,
            "retry": retry,
        })
        if endpoint in self.errors_by_endpoint:
            raise self.errors_by_endpoint[endpoint]
        return self.tools_by_endpoint.get(endpoint, [])

    def call_tool(self, endpoint, tool_name, arguments, headers=None, timeout=60, retry=None):
        self.tool_calls.append({
            "endpoint": endpoint,
            "tool_name": tool_name,
            "arguments": arguments,
            "headers": headers or {},
            "timeout": timeout,
            "retry": retry,
        })
        if endpoint in self.errors_by_endpoint:
            raise self.errors_by_endpoint[endpoint]
        return self.call_results.get(f"{endpoint}|{tool_name}", {"ok": True})


@pytest.fixture
def fake_client():
    return FakeMcpClient()


@pytest.fixture
def output():
    """A wide, colourless console whose text can be read back."""
    return Console(file=io.StringIO(), width=400, color_system=None, force_terminal=False)


@pytest.fixture
def make_servers():
    def build(servers, **extra):
        return ServerRepository(McpForgeConfig(servers=servers, **extra))
    return build


@pytest.fixture
def write_manifest():
    def write(path: Path, tools, slug="server"):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({
            "version": 1,
            "server": {"slug": slug},
            "generated_at": "2026-01-01T00:00:00Z",
            "tools": tools,
        }))
        return path
    return write


@pytest.fixture
def generated_namespace(tmp_path, monkeypatch):
    """Make ``tmp_path`` importable and forget generated modules afterwards."""
    monkeypatch.syspath_prepend(str(tmp_path))
    yield tmp_path
    for name in list(sys.modules):
        if name == "generated_tools" or name.startswith("generated_tools."):
            del sys.modules[name]
