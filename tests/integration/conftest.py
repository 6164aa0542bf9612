"""Integration test configuration.

The upstream media API is replaced by an ``httpx.MockTransport`` handler so
the whole stack (routes, platforms, upstream client, normalization) runs
without network access.
"""

from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from universal_downloader.api.main import create_app
from universal_downloader.upstream.client import UpstreamClient

UPSTREAM_HOST = "upstream.test"


class FakeUpstream:
    """Routes upstream requests to canned responses.

    Responses for the media API are keyed by path; any other host (short
    link resolution) is keyed by the full URL. Unknown keys answer 404.
    """

    def __init__(self):
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def json(self, key: str, body, status_code: int = 200) -> None:
        self.routes[key] = lambda request: httpx.Response(status_code, json=body)

    def respond(self, key: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[key] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.path if request.url.host == UPSTREAM_HOST else str(request.url)
        handler = self.routes.get(key)
        if handler is None:
            return httpx.Response(404, json={"success": False, "error": "not found"})
        return handler(request)


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    upstream = FakeUpstream()
    upstream.json("/health", {"status": "ok"})
    return upstream


def make_client(settings, fake_upstream) -> TestClient:
    upstream_client = UpstreamClient(
        settings,
        transport=httpx.MockTransport(fake_upstream),
    )
    return TestClient(create_app(settings, upstream_client=upstream_client))


@pytest.fixture
def api_client(test_settings, fake_upstream):
    """TestClient with the application lifespan running."""
    with make_client(test_settings, fake_upstream) as client:
        yield client


@pytest.fixture
def debug_api_client(test_settings, fake_upstream):
    """TestClient whose failure responses include diagnostic details."""
    settings = test_settings.model_copy(update={"debug": True})
    with make_client(settings, fake_upstream) as client:
        yield client
