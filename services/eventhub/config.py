"""
Configuration management for the EventHub authorization service.

Non-secret configuration loaded from YAML file, secrets from environment variables.
"""

from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path("/etc/eventhub/config.yaml")
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Auth Configuration Models ---


class CredentialStoreBackend(StrEnum):
    """Supported credential store backends."""

    REDIS = "redis"
    MEMORY = "memory"


class AuthApiConfig(BaseModel):
    """External Auth API (the marketplace backend) connection settings."""

    base_url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the backend API that owns users and credentials",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for login/registration calls",
    )


class AuthConfig(BaseModel):
    """Session configuration."""

    credential_store: CredentialStoreBackend = Field(
        default=CredentialStoreBackend.REDIS,
        description="Where token + identity pairs are persisted: redis or memory",
    )
    session_ttl_hours: int = Field(
        default=168,
        description="Session TTL in hours (7 days, matching the web client's cookie)",
    )


# --- CORS Configuration ---


class CORSConfig(BaseModel):
    """CORS (Cross-Origin Resource Sharing) configuration."""

    allow_origins: list[str] = Field(
        default_factory=list,
        description="Allowed origins. Empty list means CORS middleware is disabled.",
    )
    allow_credentials: bool = Field(
        default=True, description="Allow credentials (cookies, auth headers)"
    )
    allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization", "X-Request-ID"],
        description="Allowed request headers",
    )


# --- Main Settings ---


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="EVENTHUB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="eventhub-auth")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="JSON logging in production")

    # Redis
    redis_url: RedisDsn = Field(
        default="redis://localhost:6379",
        description="Redis connection URL",
    )

    # External Auth API
    auth_api: AuthApiConfig = Field(default_factory=AuthApiConfig)

    # Sessions
    auth: AuthConfig = Field(default_factory=AuthConfig)

    # CORS
    cors: CORSConfig = Field(default_factory=CORSConfig)

    # API
    api_prefix: str = Field(default="/api")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
