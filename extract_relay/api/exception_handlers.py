from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from extract_relay.api.schemas import ErrorEnvelope, NotFoundBody, NotFoundEnvelope
from extract_relay.domain.exceptions import InvalidRequestError, RelayError, RelayServerError

logger = logging.getLogger("extract_relay.errors")

AVAILABLE_ENDPOINTS = (
    "GET /health",
    "POST /api/extract",
    "POST /extract",
)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


def not_found_response() -> JSONResponse:
    body = NotFoundEnvelope(
        error=NotFoundBody(
            message="Endpoint not found", availableEndpoints=list(AVAILABLE_ENDPOINTS)
        )
    )
    return JSONResponse(status_code=404, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(RelayError)
    async def handle_relay_error(request: Request, exc: RelayError) -> JSONResponse:
        # IMPORTANT: do not log request bodies or keys.
        logger.info(
            "Request failed",
            extra={
                "request_id": _request_id(request),
                "http_method": request.method,
                "request_path": request.url.path,  # no query string
                "status_code": exc.status_code,
                "error_type": exc.error_type,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorEnvelope.build(message=exc.message, error_type=exc.error_type),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        # Malformed JSON, non-object bodies and non-string keys all land here.
        return await handle_relay_error(request, InvalidRequestError("Invalid request body"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        # Unsupported methods on known paths are reported like unknown paths.
        if exc.status_code in (404, 405):
            return not_found_response()
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorEnvelope.build(message=str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        error = RelayServerError()
        return JSONResponse(
            status_code=error.status_code,
            content=ErrorEnvelope.build(message=error.message, error_type=error.error_type),
        )
