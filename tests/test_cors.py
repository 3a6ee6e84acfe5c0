from __future__ import annotations

from tests._helpers import make_settings

PREFLIGHT_HEADERS = {
    "Access-Control-Request-Method": "POST",
    "Access-Control-Request-Headers": "Content-Type",
}


def test_all_origins_accepted_by_default(client) -> None:
    res = client.get("/health", headers={"Origin": "https://anywhere.example"})
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "*"


def test_allow_list_permits_listed_origin(make_client) -> None:
    client = make_client(
        settings=make_settings(allowed_origins="https://app.example,https://admin.example")
    )

    res = client.options(
        "/api/extract",
        headers={"Origin": "https://admin.example", **PREFLIGHT_HEADERS},
    )

    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "https://admin.example"
    assert "POST" in res.headers["access-control-allow-methods"]


def test_allow_list_rejects_other_origin(make_client) -> None:
    client = make_client(settings=make_settings(allowed_origins="https://app.example"))

    res = client.options(
        "/api/extract",
        headers={"Origin": "https://evil.example", **PREFLIGHT_HEADERS},
    )

    assert res.status_code == 400
    assert "access-control-allow-origin" not in res.headers
