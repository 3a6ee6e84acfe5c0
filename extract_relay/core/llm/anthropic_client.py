from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import httpx

MESSAGES_PATH = "/v1/messages"


class AnthropicError(Exception):
    """Base error for upstream client failures (mapped to 500 at the edge)."""


class AnthropicTransportError(AnthropicError):
    """Raised when the upstream could not be reached or did not answer in time."""


class AnthropicResponseError(AnthropicError):
    """Raised when an upstream success response is not valid JSON."""


@dataclass(frozen=True)
class AnthropicConfig:
    base_url: str
    version: str
    timeout_seconds: float


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        try:
            return json.loads(self.content)
        except ValueError as exc:
            raise AnthropicResponseError("Upstream response was not valid JSON") from exc

    def error_details(self) -> tuple[str | None, str | None]:
        """Return upstream `error.message` / `error.type` when the body carries them."""

        try:
            data = json.loads(self.content)
        except ValueError:
            return None, None
        if not isinstance(data, dict):
            return None, None
        error = data.get("error")
        if not isinstance(error, dict):
            return None, None
        message = error.get("message")
        error_type = error.get("type")
        return (
            message if isinstance(message, str) and message else None,
            error_type if isinstance(error_type, str) and error_type else None,
        )


class AnthropicClient:
    """
    Minimal Messages API client that forwards an opaque payload.

    Design notes:
    - No logging in this module (keys and documents pass through here).
    - One request per call, no retries; the caller decides what a status means.
    - `transport` lets tests and embedders swap the network layer.
    """

    def __init__(
        self,
        *,
        config: AnthropicConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def messages_url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}{MESSAGES_PATH}"

    def build_headers(self, *, api_key: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": self._config.version,
        }

    async def create_message(self, *, api_key: str, payload: Any) -> UpstreamResponse:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(
                    self.messages_url, headers=self.build_headers(api_key=api_key), content=body
                )
        except httpx.TimeoutException as exc:
            raise AnthropicTransportError("Upstream request timed out") from exc
        except httpx.HTTPError as exc:
            raise AnthropicTransportError("Upstream request failed") from exc

        return UpstreamResponse(status_code=resp.status_code, content=resp.content)
