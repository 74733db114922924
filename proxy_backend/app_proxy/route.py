import logging
from typing import Callable, Optional
from urllib.parse import urlsplit

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, Response
from opentelemetry import trace

from proxy_backend.app_proxy.allowlist import HostAllowlist, get_allowlist
from proxy_backend.app_proxy.document import parse_document, serialize_document
from proxy_backend.app_proxy.rewriter import rewrite_tree
from proxy_backend.app_proxy.sanitizer import sanitize_tree
from proxy_backend.app_proxy.urls import parse_target_url
from proxy_backend.utils import redact_url
from proxy_backend.utils.exception_logging import (
    describe_exception,
    format_exception_message,
    log_exception_with_details,
)
from proxy_backend.utils.traced_requests import traced_request
from proxy_backend.vars import PROXY_PATH, PROXY_TIMEOUT, PROXY_USER_AGENT

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Headers set on every rewritten page; the origin's own framing policy was dropped
HTML_RESPONSE_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "Content-Security-Policy": "frame-ancestors 'self'",
}

UPSTREAM_REQUEST_HEADERS = {
    "User-Agent": PROXY_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

ClientFactory = Callable[[], httpx.AsyncClient]


def create_upstream_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(PROXY_TIMEOUT),
        follow_redirects=True,
        headers=UPSTREAM_REQUEST_HEADERS,
    )


def get_client_factory() -> ClientFactory:
    """
    FastAPI dependency returning the upstream client factory.

    A factory rather than a client so nothing is opened for requests that
    fail validation or the host check.
    """
    return create_upstream_client


def is_html(content_type: str) -> bool:
    return "text/html" in (content_type or "").lower()


def render_proxied_html(response: httpx.Response) -> HTMLResponse:
    """Sanitize and rewrite an upstream HTML page against its final URL."""
    # One tree for both stages: the rewriter edits exactly what was sanitized
    soup = parse_document(response.text)
    sanitize_tree(soup)
    rewrite_tree(soup, str(response.url), PROXY_PATH)
    body = serialize_document(soup)
    return HTMLResponse(content=body, headers=dict(HTML_RESPONSE_HEADERS))


def passthrough(response: httpx.Response, content_type: str) -> Response:
    # Content type goes in verbatim; media_type would append a charset to text/*
    return Response(content=response.content, headers={"content-type": content_type})


@router.get(PROXY_PATH)
async def proxy_page(
    url: Optional[str] = Query(None, description="Absolute URL to fetch"),
    allowlist: HostAllowlist = Depends(get_allowlist),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Fetch ``url`` upstream; HTML is sanitized and rewritten, anything else is passed through."""
    if not url:
        raise HTTPException(status_code=400, detail="missing url")
    target = parse_target_url(url)
    if target is None:
        raise HTTPException(status_code=400, detail="invalid url")

    hostname = urlsplit(target).hostname
    if not allowlist.is_allowed(hostname):
        logger.warning(f"[Proxy] Refusing host not in allowlist: {hostname}")
        raise HTTPException(status_code=403, detail="host not allowed")

    with traced_request(
        tracer,
        operation="proxy_request",
        start_message=f"[Proxy] Fetching {redact_url(target)}",
        url_attributes={"proxy.target_url": target},
    ) as span:
        try:
            async with client_factory() as client:
                response = await client.get(target)
                content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE

                span.set_attribute("proxy.final_url", redact_url(str(response.url)))
                span.set_attribute("proxy.status_code", response.status_code)
                span.set_attribute("proxy.content_type", content_type)
                if response.is_error:
                    logger.info(
                        f"[Proxy] Upstream answered {response.status_code} for {redact_url(target)}"
                    )

                if is_html(content_type):
                    return render_proxied_html(response)
                return passthrough(response, content_type)

        except httpx.TimeoutException as e:
            span.set_attribute("proxy.error", "timeout")
            log_exception_with_details(logger, "[Proxy] Upstream timeout", e)
            raise HTTPException(
                status_code=502, detail=f"fetch error: {format_exception_message(e)}"
            )

        except httpx.HTTPError as e:
            span.set_attribute("proxy.error", "connection_failed")
            log_exception_with_details(logger, "[Proxy] Upstream fetch failed", e)
            raise HTTPException(
                status_code=502, detail=f"fetch error: {format_exception_message(e)}"
            )

        except Exception as e:
            span.set_attribute("proxy.error", describe_exception(e))
            log_exception_with_details(logger, "[Proxy] Proxy error", e)
            raise HTTPException(
                status_code=502, detail=f"fetch error: {format_exception_message(e)}"
            )
