"""Configuration management for the Auth0 MCP server.

Supports an optional YAML configuration file and environment variable
overrides. Configuration is loaded once and cached.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Auth0Settings(BaseSettings):
    """Tenant credentials and Management API access settings."""
    token: Optional[str] = Field(default=None, description="Management API bearer token")
    domain: Optional[str] = Field(default=None, description="Tenant domain or bare tenant label")
    tenant_name: Optional[str] = Field(default=None, description="Tenant label shown in logs")
    cli_path: Optional[str] = Field(default=None, description="Local path to an auth0 CLI binary")
    cli_name: str = Field(default="auth0", description="auth0 CLI binary name looked up on PATH")

    # Timeouts
    http_timeout_seconds: float = Field(default=15.0, gt=0)
    cli_timeout_seconds: float = Field(default=10.0, gt=0)
    token_cache_ttl_seconds: int = Field(default=55 * 60, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="AUTH0_",
        env_file=".env",
        extra="ignore"
    )


class Settings(BaseSettings):
    """Main application settings."""
    debug: bool = Field(default=False, description="Prefer the local CLI path over PATH")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)

    server_name: str = Field(default="auth0")

    # Component settings
    auth0: Auth0Settings = Field(default_factory=Auth0Settings)

    model_config = SettingsConfigDict(
        env_prefix="AUTH0_MCP_",
        env_file=".env",
        extra="ignore"
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        data = load_yaml_config(path)
        return cls(**data)


def load_yaml_config(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        return {}

    with open(path) as f:
        return yaml.safe_load(f) or {}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    config_path = os.environ.get("AUTH0_MCP_CONFIG", "config/settings.yaml")
    return Settings.from_yaml(config_path)
