from __future__ import annotations

from collections.abc import Iterator

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from extract_relay.core.middleware.body_limit import TOO_LARGE_BODY, BodySizeLimitMiddleware

LIMIT = 1024


def _make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=LIMIT)

    @app.post("/echo")
    async def echo(request: Request) -> dict[str, int]:
        return {"received": len(await request.body())}

    return app


def _chunks(total: int, size: int = 256) -> Iterator[bytes]:
    sent = 0
    while sent < total:
        step = min(size, total - sent)
        sent += step
        yield b"x" * step


def test_body_within_limit_passes_through() -> None:
    with TestClient(_make_app()) as client:
        res = client.post("/echo", content=b"x" * LIMIT)
    assert res.status_code == 200
    assert res.json() == {"received": LIMIT}


def test_declared_oversized_body_is_rejected() -> None:
    with TestClient(_make_app()) as client:
        res = client.post("/echo", content=b"x" * (LIMIT + 1))
    assert res.status_code == 413
    assert res.json() == TOO_LARGE_BODY


def test_streamed_body_within_limit_is_replayed() -> None:
    with TestClient(_make_app()) as client:
        res = client.post("/echo", content=_chunks(LIMIT - 10))
    assert res.status_code == 200
    assert res.json() == {"received": LIMIT - 10}


def test_streamed_oversized_body_is_rejected() -> None:
    with TestClient(_make_app()) as client:
        res = client.post("/echo", content=_chunks(LIMIT * 3))
    assert res.status_code == 413
    assert res.json() == TOO_LARGE_BODY


def test_relay_applies_configured_limit(make_client) -> None:
    from tests._helpers import make_settings

    client = make_client(settings=make_settings(max_body_mb=1))
    oversized = b"{" + b" " * (1024 * 1024) + b"}"

    res = client.post(
        "/api/extract", content=oversized, headers={"Content-Type": "application/json"}
    )

    assert res.status_code == 413
    assert res.json()["error"]["message"] == "Request body too large"
