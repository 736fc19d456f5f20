"""Deterministic, collision-resistant class names for generated bindings."""

from __future__ import annotations

import hashlib
import keyword
import re
from typing import Iterator, Set

from mcpforge.errors import ConfigurationError

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")


class UsedNameSet:
    """Identifiers already claimed during one generation (or registry) pass."""

    def __init__(self) -> None:
        self._names: Set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def claim(self, name: str) -> str:
        self._names.add(name)
        return name


def normalize(value: str) -> str:
    """``crm-api`` -> ``CrmApi``; all-punctuation input becomes ``Mcp``."""
    words = _NON_ALNUM.sub(" ", value).split()
    studly = "".join(word[:1].upper() + word[1:] for word in words)
    return studly or "Mcp"


def identifier(value: str) -> str:
    """Prefix digit-leading names and keywords so they stay valid identifiers."""
    if value[:1].isdigit() or keyword.iskeyword(value):
        return "Mcp" + value
    return value


def server_namespace(server_slug: str) -> str:
    """Package directory holding a server's generated modules."""
    return identifier(normalize(server_slug))


def short_hash(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()[:8]


class ToolClassNameResolver:
    """
    Maps ``(server, tool)`` to a unique class name.

    The same sequence of resolutions against a fresh ``UsedNameSet`` always
    yields the same names. On collision the name gets an 8-hex suffix derived
    from the pair, then an increasing counter if that is taken too.
    """

    def resolve(
        self,
        server_slug: str,
        tool_name: str,
        used_names: UsedNameSet,
        allow_collision_suffix: bool = True,
    ) -> str:
        base = identifier(normalize(server_slug) + normalize(tool_name) + "Tool")

        if base in used_names:
            if not allow_collision_suffix:
                raise ConfigurationError(
                    f"Tool class name collision detected for [{server_slug}.{tool_name}] -> [{base}]"
                )
            return self._claim_suffixed(base, short_hash(f"{server_slug}|{tool_name}"), used_names)

        return used_names.claim(base)

    def resolve_toolset(
        self,
        server_slug: str,
        used_names: UsedNameSet,
        allow_collision_suffix: bool = True,
    ) -> str:
        base = identifier(normalize(server_slug) + "Toolset")

        if base in used_names:
            if not allow_collision_suffix:
                raise ConfigurationError(
                    f"Toolset class name collision detected for [{server_slug}] -> [{base}]"
                )
            return self._claim_suffixed(base, short_hash(server_slug), used_names)

        return used_names.claim(base)

    @staticmethod
    def _claim_suffixed(base: str, suffix: str, used_names: UsedNameSet) -> str:
        hashed = base + suffix
        if hashed not in used_names:
            return used_names.claim(hashed)

        counter = 2
        while f"{hashed}{counter}" in used_names:
            counter += 1
        return used_names.claim(f"{hashed}{counter}")
