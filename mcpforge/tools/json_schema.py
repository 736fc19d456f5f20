"""Fluent JSON Schema builder used by generated tool bindings."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

_MIN_KEYWORDS = {
    "string": "minLength",
    "integer": "minimum",
    "number": "minimum",
    "array": "minItems",
}

_MAX_KEYWORDS = {
    "string": "maxLength",
    "integer": "maximum",
    "number": "maximum",
    "array": "maxItems",
}


class SchemaType:
    """One schema node. Every modifier returns ``self`` so calls chain."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        self.is_required = False
        self.is_nullable = False
        self._keywords: Dict[str, Any] = {}

    def description(self, text: str) -> "SchemaType":
        self._keywords["description"] = text
        return self

    def enum(self, values: List[Any]) -> "SchemaType":
        self._keywords["enum"] = list(values)
        return self

    def min(self, value) -> "SchemaType":
        self._keywords[_MIN_KEYWORDS.get(self.type_name, "minimum")] = value
        return self

    def max(self, value) -> "SchemaType":
        self._keywords[_MAX_KEYWORDS.get(self.type_name, "maximum")] = value
        return self

    def pattern(self, regex: str) -> "SchemaType":
        self._keywords["pattern"] = regex
        return self

    def format(self, name: str) -> "SchemaType":
        self._keywords["format"] = name
        return self

    def nullable(self) -> "SchemaType":
        self.is_nullable = True
        return self

    def required(self) -> "SchemaType":
        self.is_required = True
        return self

    def keyword(self, name: str) -> Any:
        return self._keywords.get(name)

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {
            "type": [self.type_name, "null"] if self.is_nullable else self.type_name
        }
        schema.update(self._keywords)
        return schema


class ArrayType(SchemaType):
    def __init__(self):
        super().__init__("array")
        self.item_type: Optional[SchemaType] = None

    def items(self, item_type: SchemaType) -> "ArrayType":
        self.item_type = item_type
        return self

    def to_schema(self) -> Dict[str, Any]:
        schema = super().to_schema()
        if self.item_type is not None:
            schema["items"] = self.item_type.to_schema()
        return schema


class ObjectType(SchemaType):
    def __init__(self, properties: Optional[Dict[str, SchemaType]] = None):
        super().__init__("object")
        self.properties: Dict[str, SchemaType] = dict(properties or {})
        self.additional_properties = True

    def without_additional_properties(self) -> "ObjectType":
        self.additional_properties = False
        return self

    def to_schema(self) -> Dict[str, Any]:
        schema = super().to_schema()
        schema.update(object_schema(self.properties))
        if not self.additional_properties:
            schema["additionalProperties"] = False
        return schema


class JsonSchema:
    """Factory handed to ``McpTool.schema``."""

    def string(self) -> SchemaType:
        return SchemaType("string")

    def integer(self) -> SchemaType:
        return SchemaType("integer")

    def number(self) -> SchemaType:
        return SchemaType("number")

    def boolean(self) -> SchemaType:
        return SchemaType("boolean")

    def array(self) -> ArrayType:
        return ArrayType()

    def object(self, properties: Optional[Dict[str, SchemaType]] = None) -> ObjectType:
        return ObjectType(properties)


def object_schema(properties: Dict[str, SchemaType]) -> Dict[str, Any]:
    """``properties``/``required`` members for a property map."""
    schema: Dict[str, Any] = {
        "properties": {name: node.to_schema() for name, node in properties.items()}
    }
    required = [name for name, node in properties.items() if node.is_required]
    if required:
        schema["required"] = required
    return schema
