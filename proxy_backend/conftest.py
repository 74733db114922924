from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from proxy_backend.app_proxy.allowlist import HostAllowlist, get_allowlist
from proxy_backend.app_proxy.route import get_client_factory


class RecordingUpstream:
    """MockTransport handler that records every upstream request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def client_factory(self) -> Callable[[], httpx.AsyncClient]:
        def factory() -> httpx.AsyncClient:
            return httpx.AsyncClient(
                transport=httpx.MockTransport(self), follow_redirects=True
            )

        return factory


@pytest.fixture
def app():
    from proxy_backend.server import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def allow_hosts(app):
    """Override the startup allowlist for a single test."""

    def _allow(*hosts: str) -> HostAllowlist:
        allowlist = HostAllowlist(tuple(hosts))
        app.dependency_overrides[get_allowlist] = lambda: allowlist
        return allowlist

    return _allow


@pytest.fixture
def upstream(app):
    """Install a fake origin server; returns the recorder for assertions."""

    def _install(handler: Callable[[httpx.Request], httpx.Response]) -> RecordingUpstream:
        recorder = RecordingUpstream(handler)
        app.dependency_overrides[get_client_factory] = recorder.client_factory
        return recorder

    return _install
