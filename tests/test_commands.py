"""Tests for the discover, generate, sync and health commands."""

import importlib
import json

import pytest

from mcpforge.commands import FAILURE, SUCCESS, DiscoverCommand, GenerateCommand, HealthCommand, SyncCommand
from mcpforge.core.router import DefaultInvocationRouter
from mcpforge.errors import McpTransportError, RpcError
from mcpforge.generation.naming import short_hash
from mcpforge.tools.registry import GeneratedToolRegistry
from mcpforge.tools.table import BindingTable
from mcpforge.validation.config import GeneratedConfig

GENERATED_AT = "2026-01-01T00:00:00Z"

GDOCS_TOOLS = [
    {
        "name": "search_docs",
        "description": "Search documents",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "minLength": 1},
                "limit": {"type": ["integer", "null"], "maximum": 50},
            },
            "required": ["query"],
        },
    },
]

N8N_TOOLS = [{"name": "run_workflow", "description": "Run a workflow"}]


def text(console):
    return console.file.getvalue()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def servers(make_servers, workspace):
    return make_servers({
        "n8n": {"endpoint": "https://n8n.example/mcp", "manifest": "resources/mcp/n8n.tools.json"},
        "gdocs": {
            "endpoint": "https://gdocs.example/mcp",
            "endpoint_env": "MCP_GDOCS_URL",
            "manifest": "resources/mcp/gdocs.tools.json",
            "auth": {"strategy": "bearer", "token": "tok"},
            "timeout": 5,
        },
    })


@pytest.fixture
def client(fake_client):
    fake_client.tools_by_endpoint["https://gdocs.example/mcp"] = GDOCS_TOOLS
    fake_client.tools_by_endpoint["https://n8n.example/mcp"] = N8N_TOOLS
    return fake_client


@pytest.fixture
def discover(servers, client, output):
    return DiscoverCommand(servers, client, console=output, clock=lambda: GENERATED_AT)


@pytest.fixture
def generate(servers, output):
    return GenerateCommand(servers, settings=GeneratedConfig(), console=output)


class TestDiscover:
    def test_writes_manifests_in_slug_order(self, discover, client, workspace, output):
        assert discover.run() == SUCCESS

        manifest = json.loads((workspace / "resources/mcp/gdocs.tools.json").read_text())
        assert manifest["server"] == {"slug": "gdocs", "endpoint_env": "MCP_GDOCS_URL"}
        assert manifest["generated_at"] == GENERATED_AT
        assert manifest["tools"][0]["input_schema"]["required"] == ["query"]
        assert [call["endpoint"] for call in client.list_calls] == [
            "https://gdocs.example/mcp",
            "https://n8n.example/mcp",
        ]
        assert client.list_calls[0]["headers"] == {"Authorization": "Bearer tok"}
        assert client.list_calls[0]["timeout"] == 5
        assert "Discovered: gdocs -> resources/mcp/gdocs.tools.json" in text(output)

    def test_manifest_bytes_are_stable(self, discover, workspace):
        discover.run()
        first = (workspace / "resources/mcp/gdocs.tools.json").read_bytes()
        discover.run()

        assert (workspace / "resources/mcp/gdocs.tools.json").read_bytes() == first
        assert first.endswith(b"}\n")

    def test_dry_run_writes_nothing(self, discover, workspace, output):
        assert discover.run(dry_run=True) == SUCCESS

        assert not (workspace / "resources").exists()
        assert "[dry-run] gdocs => resources/mcp/gdocs.tools.json (tools: 1)" in text(output)

    def test_failure_continues_and_exits_one(self, discover, client, workspace, output):
        client.errors_by_endpoint["https://gdocs.example/mcp"] = McpTransportError("https://gdocs.example/mcp")

        assert discover.run() == FAILURE

        assert (workspace / "resources/mcp/n8n.tools.json").exists()
        assert "Discover failed for [gdocs]: Failed to call MCP endpoint: https://gdocs.example/mcp" in text(output)

    def test_fail_fast_stops_at_first_failure(self, discover, client, workspace):
        client.errors_by_endpoint["https://gdocs.example/mcp"] = RpcError("tools/list", "down")

        assert discover.run(fail_fast=True) == FAILURE

        assert len(client.list_calls) == 1
        assert not (workspace / "resources/mcp/n8n.tools.json").exists()

    def test_missing_manifest_path(self, make_servers, client, output, workspace):
        servers = make_servers({"gdocs": {"endpoint": "https://gdocs.example/mcp"}})

        assert DiscoverCommand(servers, client, console=output).run() == FAILURE
        assert "Missing manifest path for MCP server [gdocs]." in text(output)
        assert client.list_calls == []

    def test_unknown_server(self, discover, output):
        assert discover.run(["nope"]) == FAILURE
        assert "Unknown MCP servers: nope" in text(output)

    def test_no_servers(self, make_servers, client, output):
        assert DiscoverCommand(make_servers({}), client, console=output).run() == SUCCESS
        assert "No MCP servers selected for discover." in text(output)

    def test_prune_removes_unselected_manifests(self, discover, workspace, output):
        discover.run()

        assert discover.run(["gdocs"], prune=True, dry_run=True) == SUCCESS
        assert (workspace / "resources/mcp/n8n.tools.json").exists()
        assert "[dry-run] prune resources/mcp/n8n.tools.json" in text(output)

        assert discover.run(["gdocs"], prune=True) == SUCCESS
        assert not (workspace / "resources/mcp/n8n.tools.json").exists()
        assert (workspace / "resources/mcp/gdocs.tools.json").exists()
        assert "Pruned: resources/mcp/n8n.tools.json" in text(output)


class TestGenerate:
    def test_generates_importable_bindings(self, discover, generate, generated_namespace, client, servers, output):
        discover.run()

        assert generate.run() == SUCCESS
        importlib.invalidate_caches()

        base = generated_namespace / "generated_tools"
        assert (base / "__init__.py").exists()
        assert (base / "Gdocs" / "__init__.py").exists()
        assert (base / "Gdocs" / "GdocsSearchDocsTool.py").exists()
        assert (base / "Gdocs" / "GdocsToolset.py").exists()
        assert (base / "N8n" / "N8nRunWorkflowTool.py").exists()
        assert (base / "McpToolset.py").exists()
        assert "Generated tools: 5" in text(output)

        module = importlib.import_module("generated_tools.Gdocs.GdocsSearchDocsTool")
        tool_class = module.GdocsSearchDocsTool
        assert tool_class.server_slug == "gdocs"
        assert tool_class.raw_tool_name == "search_docs"
        assert tool_class.description == "Search documents"

        router = DefaultInvocationRouter(client, servers)
        assert tool_class(router).input_schema() == {
            "type": "object",
            "properties": {
                "limit": {"type": ["integer", "null"], "maximum": 50},
                "query": {"type": "string", "minLength": 1},
            },
            "required": ["query"],
        }

        aggregate = importlib.import_module("generated_tools.McpToolset").McpToolset
        assert [cls.__name__ for cls in aggregate.classes] == ["GdocsSearchDocsTool", "N8nRunWorkflowTool"]
        per_server = importlib.import_module("generated_tools.Gdocs.GdocsToolset").GdocsToolset
        assert per_server.classes == [tool_class]

    def test_registry_serves_generated_bindings(self, discover, generate, generated_namespace, client, servers):
        discover.run()
        generate.run()

        registry = GeneratedToolRegistry(
            servers,
            BindingTable.load("generated_tools"),
            DefaultInvocationRouter(client, servers),
        )
        tools = list(registry.for_servers())

        assert [type(tool).__name__ for tool in tools] == ["GdocsSearchDocsTool", "N8nRunWorkflowTool"]
        assert tools[1].handle({"id": 1}) == '{"ok":true}'
        assert client.tool_calls[0]["tool_name"] == "run_workflow"

    def test_partial_generate_keeps_other_servers_resolvable(
        self, discover, generate, generated_namespace, client, servers
    ):
        discover.run()
        assert generate.run() == SUCCESS
        assert generate.run(["gdocs"]) == SUCCESS

        registry = GeneratedToolRegistry(
            servers,
            BindingTable.load("generated_tools"),
            DefaultInvocationRouter(client, servers),
        )

        assert [type(tool).__name__ for tool in registry.for_servers(["n8n"])] == ["N8nRunWorkflowTool"]
        assert len(list(registry.for_servers())) == 2

    def test_repeated_tool_names_resolve_to_both_classes(
        self, make_servers, write_manifest, generated_namespace, fake_client, output
    ):
        write_manifest(generated_namespace / "gdocs.json", [{"name": "dup"}, {"name": "dup"}])
        servers = make_servers({"gdocs": {"endpoint": "https://gdocs", "manifest": str(generated_namespace / "gdocs.json")}})
        settings = GeneratedConfig(path=str(generated_namespace / "generated_tools"))

        assert GenerateCommand(servers, settings=settings, console=output).run() == SUCCESS

        registry = GeneratedToolRegistry(
            servers,
            BindingTable.load("generated_tools"),
            DefaultInvocationRouter(fake_client, servers),
        )
        hashed = "GdocsDupTool" + short_hash("gdocs|dup")

        assert [type(tool).__name__ for tool in registry.for_servers()] == ["GdocsDupTool", hashed]

    def test_dry_run_writes_nothing(self, discover, generate, workspace, output):
        discover.run()

        assert generate.run(dry_run=True) == SUCCESS

        assert not (workspace / "generated_tools").exists()
        assert "[dry-run] generated_tools/Gdocs/GdocsSearchDocsTool.py => generated_tools.Gdocs.GdocsSearchDocsTool" in text(output)

    def test_collision_gets_suffix(self, make_servers, write_manifest, workspace, output):
        write_manifest(workspace / "a.json", [{"name": "list"}])
        write_manifest(workspace / "b.json", [{"name": "list"}])
        servers = make_servers({"crm-api": {"manifest": "a.json"}, "crm_api": {"manifest": "b.json"}})

        assert GenerateCommand(servers, console=output).run() == SUCCESS

        hashed = "CrmApiListTool" + short_hash("crm_api|list")
        assert (workspace / "generated_tools/CrmApi/CrmApiListTool.py").exists()
        assert (workspace / f"generated_tools/CrmApi/{hashed}.py").exists()
        assert (workspace / "generated_tools/CrmApi/CrmApiToolset.py").exists()
        assert (workspace / f"generated_tools/CrmApi/CrmApiToolset{short_hash('crm_api')}.py").exists()

    def test_fail_on_collision_aborts(self, make_servers, write_manifest, workspace, output):
        write_manifest(workspace / "a.json", [{"name": "list"}])
        write_manifest(workspace / "b.json", [{"name": "list"}])
        servers = make_servers({"crm-api": {"manifest": "a.json"}, "crm_api": {"manifest": "b.json"}})

        assert GenerateCommand(servers, console=output).run(fail_on_collision=True) == FAILURE
        assert "Tool class name collision detected for [crm_api.list] -> [CrmApiListTool]" in text(output)
        assert not (workspace / "generated_tools/McpToolset.py").exists()

    def test_skips_servers_without_usable_manifests(self, make_servers, write_manifest, workspace, output):
        write_manifest(workspace / "good.json", [{"name": "ping"}, {"title": "no name"}, ["junk"]])
        (workspace / "shape.json").write_text('{"tools": "nope"}')
        servers = make_servers({
            "good": {"manifest": "good.json"},
            "nomanifest": {},
            "notfound": {"manifest": "missing.json"},
            "shape": {"manifest": "shape.json"},
        })

        assert GenerateCommand(servers, console=output).run() == SUCCESS

        out = text(output)
        assert "Skipping [nomanifest] - missing `manifest` path." in out
        assert "Skipping [notfound] - manifest not found: missing.json" in out
        assert "Skipping [shape] - invalid manifest `tools` shape." in out
        assert "Generated tools: 3" in out

    def test_undecodable_manifest_fails_that_server(self, make_servers, write_manifest, workspace, output):
        write_manifest(workspace / "good.json", [{"name": "ping"}])
        (workspace / "list.json").write_text("[1, 2]")
        servers = make_servers({"good": {"manifest": "good.json"}, "list": {"manifest": "list.json"}})

        assert GenerateCommand(servers, console=output).run() == FAILURE

        assert (workspace / "generated_tools/Good/GoodPingTool.py").exists()
        assert "Generate failed for [list]" in text(output)

    def test_clean_removes_stale_files(self, discover, generate, workspace, output):
        discover.run()
        generate.run()
        stale = workspace / "generated_tools/Gdocs/GdocsOldTool.py"
        stale.write_text("# stale\n")

        assert generate.run(["gdocs"], clean=True) == SUCCESS

        assert not stale.exists()
        assert (workspace / "generated_tools/Gdocs/GdocsSearchDocsTool.py").exists()
        assert (workspace / "generated_tools/N8n/N8nRunWorkflowTool.py").exists()
        assert "Cleaned: generated_tools/Gdocs" in text(output)
        assert "Cleaned: generated_tools/McpToolset.py" in text(output)

    def test_no_tools_generates_nothing(self, make_servers, write_manifest, workspace, output):
        write_manifest(workspace / "empty.json", [])
        servers = make_servers({"empty": {"manifest": "empty.json"}})

        assert GenerateCommand(servers, console=output).run() == SUCCESS
        assert not (workspace / "generated_tools").exists()
        assert "Generated tools: 0" in text(output)


class TestSync:
    def test_discover_then_generate(self, discover, generate, workspace):
        assert SyncCommand(discover, generate).run() == SUCCESS

        assert (workspace / "resources/mcp/gdocs.tools.json").exists()
        assert (workspace / "generated_tools/McpToolset.py").exists()

    def test_stops_when_discover_fails(self, discover, generate, client, workspace):
        client.errors_by_endpoint["https://n8n.example/mcp"] = McpTransportError("https://n8n.example/mcp")

        assert SyncCommand(discover, generate).run() == FAILURE

        assert (workspace / "resources/mcp/gdocs.tools.json").exists()
        assert not (workspace / "generated_tools").exists()


class TestHealth:
    def test_reports_each_server(self, servers, client, output):
        client.tools_by_endpoint["https://n8n.example/mcp"] = N8N_TOOLS * 2

        assert HealthCommand(servers, client, console=output).run() == SUCCESS

        out = text(output)
        assert "Healthy: gdocs (1 tool)" in out
        assert "Healthy: n8n (2 tools)" in out

    def test_unhealthy_server(self, servers, client, output):
        client.errors_by_endpoint["https://gdocs.example/mcp"] = RpcError("tools/list", "boom")

        assert HealthCommand(servers, client, console=output).run() == FAILURE

        out = text(output)
        assert "Unhealthy: gdocs - MCP error for [tools/list]: boom" in out
        assert "Healthy: n8n (1 tool)" in out

    def test_fail_fast_makes_one_call(self, servers, client, output):
        client.errors_by_endpoint["https://gdocs.example/mcp"] = McpTransportError("https://gdocs.example/mcp")

        assert HealthCommand(servers, client, console=output).run(fail_fast=True) == FAILURE
        assert len(client.list_calls) == 1

    def test_selected_server(self, servers, client, output):
        assert HealthCommand(servers, client, console=output).run(["n8n"]) == SUCCESS
        assert [call["endpoint"] for call in client.list_calls] == ["https://n8n.example/mcp"]
