"""Request authentication for MCP servers."""

from mcpforge.auth.strategies import (
    AuthResolver,
    AuthStrategy,
    BearerAuthStrategy,
    HeaderAuthStrategy,
)

__all__ = ["AuthResolver", "AuthStrategy", "BearerAuthStrategy", "HeaderAuthStrategy"]
