"""Auth strategies that turn a server's ``auth`` block into request headers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from mcpforge.errors import ConfigurationError


class AuthStrategy(ABC):
    """Produces HTTP headers for one MCP request."""

    @abstractmethod
    def headers(
        self,
        auth_config: Dict[str, Any],
        server_slug: Optional[str] = None,
        tool_name: Optional[str] = None,
    ) -> Dict[str, str]:
        ...


class BearerAuthStrategy(AuthStrategy):
    """``Authorization: Bearer <token>`` from ``auth.token``."""

    def headers(self, auth_config, server_slug=None, tool_name=None):
        token = auth_config.get("token")
        if not isinstance(token, str) or not token:
            return {}
        return {"Authorization": f"Bearer {token}"}


class HeaderAuthStrategy(AuthStrategy):
    """A single static header from ``auth.header`` / ``auth.value``."""

    def headers(self, auth_config, server_slug=None, tool_name=None):
        header = auth_config.get("header")
        value = auth_config.get("value")
        if not isinstance(header, str) or not header or not isinstance(value, str):
            return {}
        return {header: value}


class AuthResolver:
    """
    Selects an auth strategy by the ``auth.strategy`` tag.

    ``bearer`` and ``header`` are built in. Hosts add their own with
    ``register()``.
    """

    def __init__(self) -> None:
        self._strategies: Dict[str, AuthStrategy] = {
            "bearer": BearerAuthStrategy(),
            "header": HeaderAuthStrategy(),
        }

    def register(self, tag: str, strategy: AuthStrategy) -> None:
        if not isinstance(strategy, AuthStrategy):
            raise ConfigurationError(f"MCP auth strategy must implement AuthStrategy: {tag}")
        self._strategies[tag] = strategy

    def headers(
        self,
        server_config: Dict[str, Any],
        server_slug: Optional[str] = None,
        tool_name: Optional[str] = None,
    ) -> Dict[str, str]:
        auth = server_config.get("auth")
        if not isinstance(auth, dict):
            return {}

        tag = auth.get("strategy")
        if not isinstance(tag, str) or not tag:
            raise ConfigurationError("Missing MCP auth strategy in `auth.strategy`.")

        strategy = self._strategies.get(tag)
        if strategy is None:
            raise ConfigurationError(f"Unknown MCP auth strategy: {tag}")

        return strategy.headers(auth, server_slug, tool_name)
