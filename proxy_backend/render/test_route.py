from unittest.mock import AsyncMock

import pytest

from proxy_backend.render.renderer import get_renderer, render_page


@pytest.fixture
def renderer(app):
    mock = AsyncMock(return_value="<html><body><p>rendered</p></body></html>")
    app.dependency_overrides[get_renderer] = lambda: mock
    return mock


def test_missing_url(test_client, renderer):
    response = test_client.get("/render")
    assert response.status_code == 400
    assert response.text == "missing url"
    renderer.assert_not_called()


def test_forbidden_host(test_client, renderer, allow_hosts):
    allow_hosts("example.com")
    response = test_client.get("/render", params={"url": "https://evil.com/"})
    assert response.status_code == 403
    assert response.text == "forbidden"
    renderer.assert_not_called()


def test_unparseable_url_is_forbidden(test_client, renderer, allow_hosts):
    allow_hosts("example.com")
    response = test_client.get("/render", params={"url": "http://[::1"})
    assert response.status_code == 403
    renderer.assert_not_called()


@pytest.mark.parametrize("url", ["not a url", "file:///etc/passwd", "/relative"])
def test_invalid_url_forbidden_with_empty_allowlist(test_client, renderer, allow_hosts, url):
    allow_hosts()
    response = test_client.get("/render", params={"url": url})
    assert response.status_code == 403
    assert response.text == "forbidden"
    renderer.assert_not_called()


def test_rendered_html_returned(test_client, renderer, allow_hosts):
    allow_hosts("example.com")
    response = test_client.get("/render", params={"url": "https://example.com/app"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "text/html; charset=utf-8"
    assert "<p>rendered</p>" in response.text
    renderer.assert_awaited_once_with("https://example.com/app")


def test_render_failure(test_client, renderer):
    renderer.side_effect = TimeoutError("page load exceeded 30000ms")
    response = test_client.get("/render", params={"url": "https://example.com/"})
    assert response.status_code == 500
    assert response.text == "render error: page load exceeded 30000ms"


def test_default_renderer_is_playwright():
    assert get_renderer() is render_page


class _TaskGroupError(Exception):
    def __init__(self, message, exceptions):
        super().__init__(message)
        self.exceptions = exceptions


def test_render_failure_lists_grouped_errors(test_client, renderer):
    renderer.side_effect = _TaskGroupError(
        "unhandled errors in a TaskGroup", [ConnectionError("browser closed")]
    )
    response = test_client.get("/render", params={"url": "https://example.com/"})
    assert response.status_code == 500
    assert response.text == (
        "render error: unhandled errors in a TaskGroup "
        "(Sub-exceptions: ConnectionError: browser closed)"
    )
