from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "extract-relay"
    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST", "host"),
        description="Interface the HTTP server binds to.",
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
        description="Port the HTTP server listens on.",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
        description="Root log level.",
    )

    # Upstream (Anthropic Messages API)
    # IMPORTANT: the key is a secret. Never log it, never echo it back.
    anthropic_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ANTHROPIC_API_KEY", "anthropic_api_key"),
        description="Server-side API key. When set it takes precedence over client keys.",
    )
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com",
        validation_alias=AliasChoices("ANTHROPIC_BASE_URL", "anthropic_base_url"),
        description="Base URL for the upstream API (override for proxies/emulators).",
    )
    anthropic_version: str = Field(
        default="2023-06-01",
        validation_alias=AliasChoices("ANTHROPIC_VERSION", "anthropic_version"),
        description="Value sent in the `anthropic-version` header.",
    )
    anthropic_timeout_seconds: float = Field(
        default=120.0,
        ge=1.0,
        validation_alias=AliasChoices("ANTHROPIC_TIMEOUT_SECONDS", "anthropic_timeout_seconds"),
        description="Timeout for upstream requests (seconds). Document payloads can be slow.",
    )
    api_key_prefix: str = Field(
        default="sk-ant-",
        validation_alias=AliasChoices("API_KEY_PREFIX", "api_key_prefix"),
        description="Required prefix for the effective API key. Empty disables the check.",
    )

    # Inbound HTTP
    allowed_origins: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ALLOWED_ORIGINS", "allowed_origins"),
        description="Comma-separated CORS allow-list. Unset accepts all origins.",
    )
    max_body_mb: int = Field(
        default=50,
        ge=1,
        validation_alias=AliasChoices("MAX_BODY_MB", "max_body_mb"),
        description="Maximum accepted request body size (MB).",
    )

    @property
    def cors_origins(self) -> list[str]:
        if not self.allowed_origins:
            return ["*"]
        origins = [o.strip() for o in self.allowed_origins.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def max_body_bytes(self) -> int:
        return int(self.max_body_mb) * 1024 * 1024

    @property
    def has_server_api_key(self) -> bool:
        return bool(self.anthropic_api_key)


def load_settings(**overrides: object) -> Settings:
    """Build the configuration object once at startup.

    Keyword overrides win over environment variables (used by tests and embedders).
    """

    return Settings(**overrides)  # type: ignore[arg-type]
