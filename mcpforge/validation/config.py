"""
mcpforge Configuration - Configuration loading and validation.

This module provides the Config class for managing mcpforge configuration
from both global (~/.mcpforge/config.yaml) and local (mcpforge.yaml)
sources.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from mcpforge.errors import ConfigurationError

DEFAULT_RETRY = {
    "attempts": 1,
    "backoff_ms": 100,
    "max_backoff_ms": 1000,
}

_ENV_PLACEHOLDER = re.compile(r"\$\{env:([A-Za-z_][A-Za-z0-9_]*)\}")


class ServerConfig(BaseModel):
    """Configuration for a single MCP server."""

    slug: str = ""
    endpoint: Optional[str] = None
    endpoint_env: Optional[str] = None
    timeout: float = 60
    auth: Optional[Dict[str, Any]] = None
    retry: Dict[str, Any] = Field(default_factory=dict)
    manifest: Optional[str] = None


class GeneratedConfig(BaseModel):
    """Where generated bindings are written and how they are imported."""

    path: str = "generated_tools"
    namespace: str = "generated_tools"


class McpForgeConfig(BaseModel):
    """Complete mcpforge configuration schema.

    ``servers`` stays loosely typed here; entries are validated one by one
    by the server repository so that malformed entries can be skipped.
    """

    servers: Dict[str, Any] = Field(default_factory=dict)
    retry: Dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_RETRY))
    generated: GeneratedConfig = Field(default_factory=GeneratedConfig)


class Config:
    """
    mcpforge configuration manager.

    Handles loading, merging, and validating configuration from:
    - Global: ~/.mcpforge/config.yaml
    - Local: mcpforge.yaml (project-specific, found by walking up from cwd)

    Local configuration overrides global configuration. An explicit file
    passed to ``load()`` replaces the local lookup.

    Example:
        >>> config = Config.load()
        >>> config.merged.generated.namespace
        'generated_tools'
    """

    GLOBAL_CONFIG_DIR = Path.home() / ".mcpforge"
    LOCAL_CONFIG_NAME = "mcpforge.yaml"

    def __init__(
        self,
        global_config: Optional[Dict[str, Any]] = None,
        local_config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize Config.

        Args:
            global_config: Global configuration dictionary.
            local_config: Local (project) configuration dictionary.
        """
        self._global_config = global_config or {}
        self._local_config = local_config or {}
        self._merged: Optional[McpForgeConfig] = None

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """
        Load configuration from default locations.

        Args:
            path: Explicit local config file. When omitted the nearest
                ``mcpforge.yaml`` above the working directory is used.

        Returns:
            Config instance with loaded configuration.
        """
        if path is not None and not Path(path).exists():
            raise ConfigurationError(f"Config file not found: {path}")

        global_config = cls._load_yaml(cls.GLOBAL_CONFIG_DIR / "config.yaml")
        local_config = cls._load_yaml(Path(path) if path else cls._find_local_config())

        return cls(global_config=global_config, local_config=local_config)

    @classmethod
    def _load_yaml(cls, path: Optional[Path]) -> Dict[str, Any]:
        """Load YAML file if it exists."""
        if path is None or not path.exists():
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {path}")
        return data

    @classmethod
    def _find_local_config(cls) -> Optional[Path]:
        """Find the local config file by walking up the directory tree."""
        current = Path.cwd()
        while current != current.parent:
            config_path = current / cls.LOCAL_CONFIG_NAME
            if config_path.exists():
                return config_path
            current = current.parent
        return None

    def get_merged_config(self) -> Dict[str, Any]:
        """Get the merged configuration as a dictionary, env placeholders resolved."""
        merged = self._deep_merge(self._global_config.copy(), self._local_config)
        return self._interpolate(merged)

    @property
    def merged(self) -> McpForgeConfig:
        """Get the validated merged configuration."""
        if self._merged is None:
            try:
                self._merged = McpForgeConfig(**self.get_merged_config())
            except ValidationError as e:
                raise ConfigurationError(f"Invalid configuration: {e}")
        return self._merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _interpolate(self, value: Any) -> Any:
        """Replace ``${env:VAR}`` placeholders; unset variables become empty strings."""
        if isinstance(value, dict):
            return {key: self._interpolate(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._interpolate(item) for item in value]
        if isinstance(value, str):
            return _ENV_PLACEHOLDER.sub(lambda m: os.environ.get(m.group(1), ""), value)
        return value
