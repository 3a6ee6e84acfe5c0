from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import ExitStack

import httpx
import pytest
from fastapi.testclient import TestClient

from extract_relay.core.llm.deps import get_anthropic_client
from extract_relay.core.settings import Settings
from tests._helpers import make_settings
from tests.extract._helpers import UpstreamStub, make_upstream_client


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def upstream() -> UpstreamStub:
    """Stubbed upstream answering 200 `{"id": "msg_1"}` unless reconfigured."""

    return UpstreamStub()


@pytest.fixture()
def make_client() -> Iterator[Callable[..., TestClient]]:
    """Factory building a TestClient around an app wired to a stubbed upstream."""

    from extract_relay.main import create_app

    with ExitStack() as stack:

        def _make(
            *,
            settings: Settings | None = None,
            upstream: UpstreamStub | None = None,
            raise_server_exceptions: bool = True,
        ) -> TestClient:
            app = create_app(settings or make_settings())
            stub = upstream or UpstreamStub()
            app.dependency_overrides[get_anthropic_client] = lambda: make_upstream_client(
                settings=app.state.settings, transport=httpx.MockTransport(stub)
            )
            return stack.enter_context(
                TestClient(app, raise_server_exceptions=raise_server_exceptions)
            )

        yield _make


@pytest.fixture()
def client(make_client: Callable[..., TestClient], settings: Settings, upstream: UpstreamStub):
    return make_client(settings=settings, upstream=upstream)
