from __future__ import annotations

import httpx

from tests.extract._helpers import PAYLOAD, VALID_KEY, UpstreamStub


def test_metrics_exposes_http_and_upstream_series(make_client) -> None:
    client = make_client(upstream=UpstreamStub())
    client.post("/api/extract", json={"apiKey": VALID_KEY, "payload": PAYLOAD})
    make_client(upstream=UpstreamStub(exc=httpx.ConnectError("down"))).post(
        "/api/extract", json={"apiKey": VALID_KEY, "payload": PAYLOAD}
    )
    client.get("/does-not-exist")

    res = client.get("/metrics")

    assert res.status_code == 200
    text = res.text
    assert 'upstream_requests_total{outcome="success",status_code="200"}' in text
    assert 'upstream_requests_total{outcome="error",status_code="none"}' in text
    assert 'route="/api/extract"' in text
    # Unmatched paths never become labels.
    assert "/does-not-exist" not in text
    assert 'route="unmatched"' in text
