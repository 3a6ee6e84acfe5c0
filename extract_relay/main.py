from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from extract_relay.api.exception_handlers import register_exception_handlers
from extract_relay.api.schemas import HealthOut
from extract_relay.core.logging import setup_logging
from extract_relay.core.metrics import PrometheusMetricsMiddleware, metrics_router
from extract_relay.core.middleware.body_limit import BodySizeLimitMiddleware
from extract_relay.core.middleware.http_logging import HttpLoggingMiddleware
from extract_relay.core.settings import Settings, load_settings
from extract_relay.extract.router import router as extract_router

logger = logging.getLogger("extract_relay")


def create_app(settings: Settings | None = None) -> FastAPI:
    # Env is only read when no settings are passed in (tests pass their own).
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cors = settings.cors_origins
        logger.info(
            "Relay started (using server-side API key)"
            if settings.has_server_api_key
            else "Relay started (using client-provided API keys)",
            extra={"key_source": "server" if settings.has_server_api_key else "client"},
        )
        logger.info(
            "CORS: accepting all origins" if cors == ["*"] else f"CORS: {', '.join(cors)}"
        )
        yield
        logger.info("Relay shutting down")

    app = FastAPI(
        title="Extract Relay",
        description=(
            "Minimal relay in front of the Anthropic Messages API.\n\n"
            "Design principles:\n"
            "- The payload is opaque: it is forwarded verbatim and never inspected.\n"
            "- Upstream errors keep their status code; local failures are a generic 500.\n"
            "- Logging and metrics carry metadata only, never keys or document contents."
        ),
        lifespan=lifespan,
        docs_url="/swagger",
        redoc_url=None,
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime check for load balancers and monitoring.",
            },
            {
                "name": "extract",
                "description": "Forward a Messages API request and relay the response.",
            },
            {
                "name": "monitoring",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )
    app.state.settings = settings

    # Last added runs first: CORS -> logging -> metrics -> body limit -> routes.
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the relay process is running.\n\n"
            "This endpoint does not contact the upstream provider, so it stays green "
            "while the provider is down."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(
            status="ok",
            message="Server is running",
            timestamp=datetime.now(UTC).isoformat(),
        )

    app.include_router(metrics_router)
    app.include_router(extract_router)
    return app


def build_app() -> FastAPI:
    """Uvicorn factory: `uvicorn extract_relay.main:build_app --factory`."""

    settings = load_settings()
    setup_logging(settings.log_level)
    return create_app(settings)
