from __future__ import annotations

from fastapi import Request

from extract_relay.core.llm.anthropic_client import AnthropicClient, AnthropicConfig
from extract_relay.core.settings import Settings


def get_settings(request: Request) -> Settings:
    """Return the configuration object the app was created with."""

    return request.app.state.settings


def get_anthropic_client(request: Request) -> AnthropicClient:
    """
    Dependency provider for AnthropicClient.

    The key is not part of the client config: it is resolved per request
    (server-side key or the caller's own).
    """

    settings: Settings = request.app.state.settings
    config = AnthropicConfig(
        base_url=settings.anthropic_base_url,
        version=settings.anthropic_version,
        timeout_seconds=float(settings.anthropic_timeout_seconds),
    )
    return AnthropicClient(config=config)
