"""Error taxonomy shared by discovery, generation and invocation."""


class McpError(Exception):
    """Base class for every mcpforge failure.

    ``transient`` marks failures worth retrying. Only connection-level
    transport failures set it.
    """

    transient = False


class McpTransportError(McpError):
    """Raised when an MCP endpoint cannot be reached or read."""

    transient = True

    def __init__(self, endpoint: str):
        super().__init__(f"Failed to call MCP endpoint: {endpoint}")
        self.endpoint = endpoint


class InvalidResponseError(McpError):
    """Raised when an MCP endpoint replies with an unexpected payload."""


class RpcError(McpError):
    """Raised when an MCP server reports a JSON-RPC error."""

    def __init__(self, method: str, message: str):
        super().__init__(f"MCP error for [{method}]: {message}")
        self.method = method
        self.rpc_message = message


class ConfigurationError(McpError):
    """Raised for missing or invalid configuration and naming collisions."""


class ManifestDecodeError(ConfigurationError):
    """Raised when a manifest file cannot be read or decoded."""
