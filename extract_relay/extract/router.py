from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from extract_relay.api.schemas import ErrorEnvelope
from extract_relay.core.llm.anthropic_client import AnthropicClient
from extract_relay.core.llm.deps import get_anthropic_client, get_settings
from extract_relay.core.middleware.http_logging import mark_relay
from extract_relay.core.settings import Settings
from extract_relay.domain.exceptions import RelayError, RelayServerError, UpstreamRejectedError
from extract_relay.extract.schemas import ExtractRequest
from extract_relay.extract.service import relay_extraction, validate_extract_request

router = APIRouter(tags=["extract"])
logger = logging.getLogger("extract_relay.extract")

_ERROR_RESPONSES = {
    400: {"model": ErrorEnvelope, "description": "Missing key or payload, or malformed key."},
    413: {"model": ErrorEnvelope, "description": "Request body too large."},
    500: {"model": ErrorEnvelope, "description": "Upstream unreachable or unexpected failure."},
}


@router.post(
    "/api/extract",
    summary="Relay a Messages API request",
    description=(
        "Forward `payload` to the upstream Messages API and return its JSON body unchanged.\n\n"
        "Upstream errors keep their status code and are wrapped as "
        "`{\"error\": {\"message\", \"type\"}}`. Nothing is retried or stored."
    ),
    responses=_ERROR_RESPONSES,
)
@router.post("/extract", include_in_schema=False)
async def extract(
    request: Request,
    body: ExtractRequest | None = None,
    settings: Settings = Depends(get_settings),
    client: AnthropicClient = Depends(get_anthropic_client),
) -> Response:
    """
    Relay one request to the upstream provider.

    IMPORTANT (safety):
    - The API key and payload are never logged.
    - Exception details never reach the caller.
    """

    request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")
    logger.info("Extraction request received", extra={"request_id": request_id})
    # An empty body is treated like `{}` so the caller gets the specific missing-field error.
    body = body or ExtractRequest()

    api_key, key_source = validate_extract_request(settings=settings, body=body)
    mark_relay(request, key_source=key_source)

    try:
        upstream = await relay_extraction(
            client=client, api_key=api_key, payload=body.payload, request_id=request_id
        )
    except UpstreamRejectedError as exc:
        mark_relay(request, upstream_status=exc.status_code)
        raise
    except RelayError:
        raise
    except Exception as exc:  # noqa: BLE001 - any failure here is a generic 500 for the caller
        logger.exception(
            "Extraction relay failed",
            extra={"request_id": request_id, "key_source": key_source},
        )
        raise RelayServerError() from exc

    mark_relay(request, upstream_status=upstream.status_code)
    logger.info(
        "Extraction relayed",
        extra={"request_id": request_id, "key_source": key_source, "status_code": 200},
    )
    # Upstream bytes are relayed as-is; they were already checked to be valid JSON.
    return Response(content=upstream.content, status_code=200, media_type="application/json")
