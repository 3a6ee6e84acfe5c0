from __future__ import annotations

import logging
import time
from typing import Protocol

from extract_relay.core.llm.anthropic_client import AnthropicError, UpstreamResponse
from extract_relay.core.metrics import observe_upstream
from extract_relay.core.settings import Settings
from extract_relay.domain.exceptions import InvalidRequestError, UpstreamRejectedError
from extract_relay.extract.schemas import ExtractRequest, JsonBlob

logger = logging.getLogger("extract_relay.extract")


class UpstreamClient(Protocol):
    async def create_message(self, *, api_key: str, payload: JsonBlob) -> UpstreamResponse: ...


def resolve_api_key(*, settings: Settings, client_key: str | None) -> tuple[str | None, str]:
    """Return the effective key and where it came from ("server" or "client")."""

    if settings.anthropic_api_key:
        return settings.anthropic_api_key, "server"
    return (client_key or None), "client"


def validate_extract_request(*, settings: Settings, body: ExtractRequest) -> tuple[str, str]:
    """Check the request in order: key present, payload present, key format.

    Returns the effective key and its source.
    """

    api_key, key_source = resolve_api_key(settings=settings, client_key=body.api_key)
    if not api_key:
        raise InvalidRequestError("API key is required")
    if not body.has_payload:
        raise InvalidRequestError("Payload is required")
    if settings.api_key_prefix and not api_key.startswith(settings.api_key_prefix):
        raise InvalidRequestError("Invalid API key format")
    return api_key, key_source


def rejection_from_upstream(upstream: UpstreamResponse) -> UpstreamRejectedError:
    """Build the error forwarded for a non-success upstream status.

    Upstream message/type win when the body carries them; otherwise a generic
    message is synthesized from the status code.
    """

    message, error_type = upstream.error_details()
    return UpstreamRejectedError(
        message or f"API request failed with status {upstream.status_code}",
        status_code=upstream.status_code,
        error_type=error_type or "api_error",
    )


async def relay_extraction(
    *,
    client: UpstreamClient,
    api_key: str,
    payload: JsonBlob,
    request_id: str | None = None,
) -> UpstreamResponse:
    """Forward the payload once and return the upstream success response.

    Raises UpstreamRejectedError on non-success statuses and AnthropicError on
    transport failures or a malformed success body.
    """

    logger.info("Calling upstream", extra={"request_id": request_id})
    started = time.perf_counter()
    try:
        upstream = await client.create_message(api_key=api_key, payload=payload)
    except AnthropicError:
        observe_upstream(
            outcome="error", status_code=None, duration_seconds=time.perf_counter() - started
        )
        raise

    duration = time.perf_counter() - started
    logger.info(
        "Upstream responded",
        extra={
            "request_id": request_id,
            "upstream_status": upstream.status_code,
            "upstream_duration_ms": round(duration * 1000.0, 2),
        },
    )

    if not upstream.ok:
        observe_upstream(
            outcome="rejected", status_code=upstream.status_code, duration_seconds=duration
        )
        error = rejection_from_upstream(upstream)
        logger.warning(
            "Upstream rejected request",
            extra={
                "request_id": request_id,
                "upstream_status": upstream.status_code,
                "error_type": error.error_type,
            },
        )
        raise error

    # Parse once so a broken success body surfaces as a server error, not a bad relay.
    try:
        upstream.json()
    except AnthropicError:
        observe_upstream(
            outcome="error", status_code=upstream.status_code, duration_seconds=duration
        )
        raise
    observe_upstream(outcome="success", status_code=upstream.status_code, duration_seconds=duration)
    return upstream
