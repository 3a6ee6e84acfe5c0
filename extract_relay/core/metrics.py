from __future__ import annotations

import time
from typing import cast

from fastapi import APIRouter, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from extract_relay.core.middleware.http_logging import safe_route_label

metrics_router = APIRouter(tags=["monitoring"])

# Route label MUST be a route template or a fixed value so scanners hitting
# random paths cannot blow up label cardinality.

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=("method", "route", "status_code"),
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=("method", "route", "status_code"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

upstream_requests_total = Counter(
    "upstream_requests_total",
    "Total upstream (LLM provider) requests",
    labelnames=("outcome", "status_code"),
)

upstream_request_duration_seconds = Histogram(
    "upstream_request_duration_seconds",
    "Upstream (LLM provider) request duration in seconds",
    labelnames=("outcome",),
    # Model calls over whole documents routinely take tens of seconds.
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
)


def observe_upstream(*, outcome: str, status_code: int | None, duration_seconds: float) -> None:
    """Record one upstream call. `outcome` is success, rejected or error."""

    code = str(int(status_code)) if status_code is not None else "none"
    upstream_requests_total.labels(outcome=outcome, status_code=code).inc()
    upstream_request_duration_seconds.labels(outcome=outcome).observe(duration_seconds)


class PrometheusMetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            route_label = safe_route_label(request=request)
            method = request.method
            code = str(int(status_code))
            duration = time.perf_counter() - started
            http_requests_total.labels(method=method, route=route_label, status_code=code).inc()
            http_request_duration_seconds.labels(
                method=method, route=route_label, status_code=code
            ).observe(duration)


@metrics_router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    # Default registry; sufficient for a single-process relay.
    payload = generate_latest()
    return Response(content=cast(bytes, payload), media_type=CONTENT_TYPE_LATEST)
