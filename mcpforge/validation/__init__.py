"""
mcpforge validation module.

This module provides configuration loading and schema enforcement.
"""

from mcpforge.validation.config import Config, GeneratedConfig, McpForgeConfig, ServerConfig

__all__ = ["Config", "GeneratedConfig", "McpForgeConfig", "ServerConfig"]
