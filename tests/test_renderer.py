"""Tests for generated source rendering and atomic writes."""

from mcpforge.generation.renderer import GeneratedToolRenderer, GeneratedToolsetRenderer
from mcpforge.generation.writer import atomic_write
from mcpforge.tools.toolset import StaticToolset


def execute(source):
    namespace = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


class TestToolRenderer:
    def test_rendered_binding_executes(self):
        source = GeneratedToolRenderer().render(
            class_name="GdocsSearchDocsTool",
            server_slug="gdocs",
            tool_name='search """docs"""',
            description="Line one\nIt's \\ tricky",
            input_schema={
                "type": "object",
                "properties": {"q": {"type": "string", "enum": ["a", "b"]}},
                "required": ["q"],
            },
        )

        tool_class = execute(source)["GdocsSearchDocsTool"]

        assert "Do not edit" in source
        assert tool_class.server_slug == "gdocs"
        assert tool_class.raw_tool_name == 'search """docs"""'
        assert tool_class.description == "Line one\nIt's \\ tricky"
        assert tool_class(router=None).input_schema() == {
            "type": "object",
            "properties": {"q": {"type": "string", "enum": ["a", "b"]}},
            "required": ["q"],
        }

    def test_empty_schema(self):
        source = GeneratedToolRenderer().render("ATool", "a", "t", "t", {})

        assert "        return {}\n" in source
        assert execute(source)["ATool"](router=None).input_schema() == {"type": "object", "properties": {}}


class TestToolsetRenderer:
    def test_lists_classes_in_given_order(self):
        source = GeneratedToolsetRenderer().render("GdocsToolset", [
            ("app.tools.Gdocs.GdocsATool", "GdocsATool"),
            ("app.tools.Gdocs.GdocsBTool", "GdocsBTool"),
        ])

        assert "from app.tools.Gdocs.GdocsATool import GdocsATool\n" in source
        assert "class GdocsToolset(StaticToolset):" in source
        assert "        GdocsATool,\n        GdocsBTool,\n    ]" in source

    def test_empty_toolset_executes(self):
        toolset = execute(GeneratedToolsetRenderer().render("McpToolset", []))["McpToolset"]

        assert issubclass(toolset, StaticToolset)
        assert toolset.classes == []


class TestAtomicWrite:
    def test_creates_parents_and_replaces(self, tmp_path):
        path = tmp_path / "a" / "b" / "file.py"

        atomic_write(path, "one\n")
        atomic_write(path, "two\n")

        assert path.read_text() == "two\n"
        assert [p.name for p in path.parent.iterdir()] == ["file.py"]
