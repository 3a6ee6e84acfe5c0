"""Relay access log.

One record per request, carrying the correlation id plus whatever the relay
learned while handling it: which key was used (server or client) and what the
upstream answered. Bodies, headers and query strings are never logged; they
carry API keys and client documents.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("extract_relay.http")

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")

# request.state attributes the extract slice fills in for the access log.
RELAY_STATE_FIELDS = ("key_source", "upstream_status")


def _get_or_create_request_id(*, request: Request) -> str:
    candidate = request.headers.get(REQUEST_ID_HEADER)
    if candidate and _SAFE_REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


def safe_route_label(*, request: Request) -> str:
    """Return the matched route template, or "unmatched" for 404s."""

    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if isinstance(path, str) and path:
        return path
    return "unmatched"


def mark_relay(request: Request, **fields: Any) -> None:
    """Attach relay outcome fields (see RELAY_STATE_FIELDS) to the access record."""

    for name, value in fields.items():
        if name not in RELAY_STATE_FIELDS:
            raise ValueError(f"Unknown relay log field: {name}")
        setattr(request.state, name, value)


def _access_fields(
    *, request: Request, request_id: str, status_code: int, started: float
) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "request_id": request_id,
        "http_method": request.method,
        "request_path": safe_route_label(request=request),
        "status_code": status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
    }
    for name in RELAY_STATE_FIELDS:
        value = getattr(request.state, name, None)
        if value is not None:
            fields[name] = value
    return fields


class HttpLoggingMiddleware(BaseHTTPMiddleware):
    """Propagate X-Request-ID and write the relay access record."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _get_or_create_request_id(request=request)
        started = time.perf_counter()
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001 - we must log unexpected exceptions with stack trace
            logger.exception(
                "Unhandled exception while relaying request",
                extra=_access_fields(
                    request=request, request_id=request_id, status_code=500, started=started
                ),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        fields = _access_fields(
            request=request,
            request_id=request_id,
            status_code=response.status_code,
            started=started,
        )
        if "upstream_status" in fields:
            message = "Relayed request completed"
        else:
            message = "Request completed"
        logger.info(message, extra=fields)
        return response
