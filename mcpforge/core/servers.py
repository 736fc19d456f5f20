"""Read-only lookup of configured MCP servers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, Optional

from pydantic import ValidationError

from mcpforge.auth import AuthResolver
from mcpforge.client.retry import RetryPolicy
from mcpforge.errors import ConfigurationError
from mcpforge.validation.config import DEFAULT_RETRY, McpForgeConfig, ServerConfig


class ServerRepository:
    """
    Resolves server entries, auth headers and retry policies from config.

    Server dictionaries are always returned in ascending slug order.
    """

    def __init__(self, config: McpForgeConfig, auth: Optional[AuthResolver] = None):
        self._config = config
        self._auth = auth or AuthResolver()

    def all(self) -> Dict[str, ServerConfig]:
        """All configured servers; entries that are not mappings are ignored."""
        servers: Dict[str, ServerConfig] = {}
        for slug in sorted(self._config.servers):
            entry = self._config.servers[slug]
            if not isinstance(entry, dict):
                continue
            try:
                servers[slug] = ServerConfig(**{**entry, "slug": slug})
            except ValidationError as e:
                raise ConfigurationError(f"Invalid configuration for MCP server [{slug}]: {e}")
        return servers

    def selected(self, slugs: Iterable[str] = ()) -> Dict[str, ServerConfig]:
        """The requested servers, or every server when ``slugs`` is empty."""
        servers = self.all()
        wanted = [slug for slug in slugs if isinstance(slug, str)]
        if not wanted:
            return servers

        missing = [slug for slug in dict.fromkeys(wanted) if slug not in servers]
        if missing:
            raise ConfigurationError(f"Unknown MCP servers: {', '.join(missing)}")

        return {slug: server for slug, server in servers.items() if slug in wanted}

    def get(self, slug: str) -> ServerConfig:
        return self.selected([slug])[slug]

    def endpoint(self, server: ServerConfig) -> str:
        """The server endpoint, falling back to the ``endpoint_env`` variable."""
        endpoint = server.endpoint
        if not endpoint and server.endpoint_env:
            endpoint = os.environ.get(server.endpoint_env)
        if not endpoint:
            raise ConfigurationError(f"Missing endpoint for MCP server [{server.slug}].")
        return endpoint

    def manifest_path(self, server: ServerConfig) -> Path:
        if not server.manifest:
            raise ConfigurationError(f"Missing manifest path for MCP server [{server.slug}].")
        return Path(server.manifest)

    def headers(self, server: ServerConfig, tool_name: Optional[str] = None) -> Dict[str, str]:
        return self._auth.headers({"auth": server.auth}, server.slug, tool_name)

    def retry(self, server: ServerConfig) -> RetryPolicy:
        """Per-server retry values, then package defaults, then built-ins."""
        defaults = self._config.retry if isinstance(self._config.retry, dict) else {}

        def pick(key: str, minimum: int) -> int:
            for source in (server.retry, defaults):
                value = source.get(key)
                if isinstance(value, int) and not isinstance(value, bool) and value >= minimum:
                    return value
            return DEFAULT_RETRY[key]

        return RetryPolicy(
            attempts=pick("attempts", 1),
            backoff_ms=pick("backoff_ms", 0),
            max_backoff_ms=pick("max_backoff_ms", 0),
        )

