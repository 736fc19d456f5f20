"""Compile JSON Schema fragments into ``JsonSchema`` builder expressions."""

from __future__ import annotations

from typing import Any, Dict, List

SCHEMA_VAR = "schema"

_BARE_TYPES = {"integer", "number", "boolean"}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return _is_int(value) or isinstance(value, float)


class SchemaCompiler:
    """
    Emits Python source for a schema node as a chain of builder calls.

    The output is evaluated against a ``JsonSchema`` bound to ``schema``::

        schema.string().min(2).required()

    Whether a property is required is decided by its parent, so ``compile``
    never appends ``.required()`` for the node it is given.
    """

    def generate(self, input_schema: Dict[str, Any], indent: int = 8) -> str:
        """Top-level property dict literal for a tool's input schema."""
        entries = self._property_entries(input_schema)
        if not entries:
            return "{}"

        pad = " " * (indent + 4)
        lines = [f"{pad}{name}: {expression}," for name, expression in entries]
        return "{\n" + "\n".join(lines) + "\n" + " " * indent + "}"

    def compile(self, node: Dict[str, Any]) -> str:
        primary = self.primary_type(node)

        if primary in _BARE_TYPES:
            expression = f"{SCHEMA_VAR}.{primary}()"
        elif primary == "array":
            expression = self._array_expression(node)
        elif primary == "object":
            expression = self._object_expression(node)
        else:
            primary = "string"
            expression = f"{SCHEMA_VAR}.string()"

        return expression + "".join(self._modifiers(node, primary))

    @staticmethod
    def primary_type(node: Dict[str, Any]) -> str:
        declared = node.get("type", "string")
        if isinstance(declared, str):
            return declared
        if isinstance(declared, list):
            for candidate in declared:
                if isinstance(candidate, str) and candidate != "null":
                    return candidate
        return "string"

    @staticmethod
    def is_nullable(node: Dict[str, Any]) -> bool:
        declared = node.get("type")
        if isinstance(declared, list) and "null" in declared:
            return True
        return node.get("nullable") is True

    # ── Type builders ─────────────────────────────────────────────────────

    def _array_expression(self, node: Dict[str, Any]) -> str:
        expression = f"{SCHEMA_VAR}.array()"
        items = node.get("items")
        if isinstance(items, dict):
            expression += f".items({self.compile(items)})"
        return expression

    def _object_expression(self, node: Dict[str, Any]) -> str:
        entries = self._property_entries(node)
        if entries:
            body = ", ".join(f"{name}: {expression}" for name, expression in entries)
            expression = f"{SCHEMA_VAR}.object({{{body}}})"
        else:
            expression = f"{SCHEMA_VAR}.object()"

        if node.get("additionalProperties") is False:
            expression += ".without_additional_properties()"
        return expression

    def _property_entries(self, node: Dict[str, Any]) -> List[tuple]:
        properties = node.get("properties")
        if not isinstance(properties, dict):
            return []

        required = node.get("required")
        required = set(r for r in required if isinstance(r, str)) if isinstance(required, list) else set()

        entries = []
        for name, child in properties.items():
            if not isinstance(child, dict):
                continue
            expression = self.compile(child)
            if name in required:
                expression += ".required()"
            entries.append((repr(str(name)), expression))
        return entries

    # ── Modifiers ─────────────────────────────────────────────────────────

    def _modifiers(self, node: Dict[str, Any], primary: str) -> List[str]:
        calls = []

        description = node.get("description")
        if isinstance(description, str) and description:
            calls.append(f".description({description!r})")

        enum = node.get("enum")
        if isinstance(enum, list) and enum:
            calls.append(f".enum({enum!r})")

        if primary == "string":
            if _is_int(node.get("minLength")):
                calls.append(f".min({node['minLength']!r})")
            if _is_int(node.get("maxLength")):
                calls.append(f".max({node['maxLength']!r})")
            if isinstance(node.get("pattern"), str):
                calls.append(f".pattern({node['pattern']!r})")
            if isinstance(node.get("format"), str):
                calls.append(f".format({node['format']!r})")

        if primary in ("integer", "number"):
            if _is_number(node.get("minimum")):
                calls.append(f".min({node['minimum']!r})")
            if _is_number(node.get("maximum")):
                calls.append(f".max({node['maximum']!r})")

        if primary == "array":
            if _is_int(node.get("minItems")):
                calls.append(f".min({node['minItems']!r})")
            if _is_int(node.get("maxItems")):
                calls.append(f".max({node['maxItems']!r})")

        if self.is_nullable(node):
            calls.append(".nullable()")

        return calls
