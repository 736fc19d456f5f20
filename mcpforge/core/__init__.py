"""Server configuration lookup, manifests and request routing."""

from mcpforge.core.manifest import NormalizedManifest, ToolManifestNormalizer, read_manifest
from mcpforge.core.router import DefaultInvocationRouter, InvocationRouter
from mcpforge.core.servers import ServerRepository

__all__ = [
    "DefaultInvocationRouter",
    "InvocationRouter",
    "NormalizedManifest",
    "ServerRepository",
    "ToolManifestNormalizer",
    "read_manifest",
]
