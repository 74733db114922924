import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, PlainTextResponse
from opentelemetry import trace

from proxy_backend.app_proxy.allowlist import HostAllowlist, get_allowlist
from proxy_backend.render.renderer import Renderer, get_renderer
from proxy_backend.utils import redact_url
from proxy_backend.utils.exception_logging import (
    describe_exception,
    format_exception_message,
    log_exception_with_details,
)
from proxy_backend.utils.traced_requests import traced_request

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")


@router.get("/render")
async def render(
    url: Optional[str] = Query(None, description="Absolute URL to render"),
    allowlist: HostAllowlist = Depends(get_allowlist),
    renderer: Renderer = Depends(get_renderer),
):
    """Return the page HTML after its scripts executed in a headless browser."""
    if not url:
        return PlainTextResponse("missing url", status_code=400)
    if not allowlist.is_url_allowed(url):
        return PlainTextResponse("forbidden", status_code=403)

    with traced_request(
        tracer,
        operation="render_page",
        start_message=f"[Render] Rendering {redact_url(url)}",
        url_attributes={"render.target_url": url},
    ) as span:
        try:
            html = await renderer(url)
        except Exception as e:
            span.set_attribute("render.error", describe_exception(e))
            log_exception_with_details(logger, "[Render]", e)
            return PlainTextResponse(
                f"render error: {format_exception_message(e)}", status_code=500
            )
        return HTMLResponse(content=html)
