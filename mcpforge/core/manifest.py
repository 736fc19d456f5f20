"""Normalized tool manifests: models, normalizer and on-disk decoding."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from mcpforge.errors import ManifestDecodeError

MANIFEST_VERSION = 1


class ManifestServer(BaseModel):
    """Server block of a manifest."""

    slug: str
    endpoint_env: Optional[str] = None


class NormalizedTool(BaseModel):
    """One tool as stored in a manifest."""

    name: str
    title: Optional[str] = None
    description: str
    input_schema: Dict[str, Any] = Field(default_factory=dict)


class NormalizedManifest(BaseModel):
    """Per-server manifest stored at the server's ``manifest`` path."""

    version: int = MANIFEST_VERSION
    server: ManifestServer
    generated_at: str
    tools: List[NormalizedTool] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        if data["server"]["endpoint_env"] is None:
            del data["server"]["endpoint_env"]
        return data

    def to_json(self) -> str:
        """Pretty-printed UTF-8 JSON with a trailing newline."""
        return json.dumps(self.to_dict(), indent=4, ensure_ascii=False) + "\n"


class ToolManifestNormalizer:
    """
    Turns a raw ``tools/list`` result into a canonical manifest.

    Tools are ordered by name and every mapping inside an input schema is
    key-sorted, so an unchanged server always yields the same bytes apart
    from ``generated_at``.
    """

    def normalize(
        self,
        server_slug: str,
        endpoint_env: Optional[str],
        tools: List[Dict[str, Any]],
        generated_at: str,
    ) -> NormalizedManifest:
        normalized = [self._normalize_tool(tool) for tool in tools]
        normalized.sort(key=lambda tool: tool.name)

        return NormalizedManifest(
            server=ManifestServer(slug=server_slug, endpoint_env=endpoint_env),
            generated_at=generated_at,
            tools=normalized,
        )

    def _normalize_tool(self, tool: Dict[str, Any]) -> NormalizedTool:
        name = tool.get("name")
        name = name if isinstance(name, str) else ""
        title = tool.get("title")
        description = tool.get("description")

        if isinstance(tool.get("input_schema"), dict):
            schema = tool["input_schema"]
        elif isinstance(tool.get("inputSchema"), dict):
            schema = tool["inputSchema"]
        else:
            schema = {}

        return NormalizedTool(
            name=name,
            title=title if isinstance(title, str) else None,
            description=description if isinstance(description, str) else name,
            input_schema=sort_recursive(schema),
        )


def sort_recursive(value: Any) -> Any:
    """Key-sort every mapping in ``value``; lists keep their element order."""
    if isinstance(value, dict):
        return {key: sort_recursive(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [sort_recursive(item) for item in value]
    return value


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with a ``Z`` suffix and second precision."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def read_manifest(path: Path) -> Dict[str, Any]:
    """Decode a manifest file; it must contain a JSON object."""
    try:
        contents = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestDecodeError(f"Unable to read manifest: {path} ({e})")

    try:
        decoded = json.loads(contents)
    except ValueError as e:
        raise ManifestDecodeError(f"Invalid JSON manifest: {path} ({e})")

    if not isinstance(decoded, dict):
        raise ManifestDecodeError(f"Invalid JSON manifest: {path} (expected object)")

    return decoded
