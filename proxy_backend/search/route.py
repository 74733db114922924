import logging
from typing import Callable, Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from opentelemetry import trace

from proxy_backend.models import SearchResponse
from proxy_backend.search.service import build_search_results
from proxy_backend.utils.exception_logging import (
    describe_exception,
    format_exception_message,
    log_exception_with_details,
)
from proxy_backend.utils.traced_requests import traced_request
from proxy_backend.vars import SEARCH_API_URL, SEARCH_MAX_RESULTS, SEARCH_TIMEOUT

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")


def create_search_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(SEARCH_TIMEOUT))


def get_search_client_factory() -> Callable[[], httpx.AsyncClient]:
    return create_search_client


@router.get(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
)
async def search(
    q: Optional[str] = Query(None, description="Search query"),
    client_factory: Callable[[], httpx.AsyncClient] = Depends(get_search_client_factory),
):
    query = (q or "").strip()
    if not query:
        return JSONResponse(status_code=400, content={"error": "missing q"})

    params = {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1}
    with traced_request(
        tracer,
        operation="search",
        start_message=f"[Search] Querying provider for {query!r}",
        url_attributes={"search.provider_url": SEARCH_API_URL},
        attributes={"search.query": query},
    ) as span:
        try:
            async with client_factory() as client:
                response = await client.get(SEARCH_API_URL, params=params)
                span.set_attribute("search.status_code", response.status_code)
                if not response.is_success:
                    logger.warning(
                        f"[Search] Provider answered {response.status_code} for {query!r}"
                    )
                    return JSONResponse(
                        status_code=502,
                        content={
                            "error": "search-provider-failed",
                            "status": response.status_code,
                        },
                    )
                # DuckDuckGo answers application/x-javascript, so decode regardless of type
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            span.set_attribute("search.error", describe_exception(e))
            log_exception_with_details(logger, "[Search]", e)
            return JSONResponse(
                status_code=502,
                content={
                    "error": "search-provider-failed",
                    "detail": format_exception_message(e),
                },
            )

        if not isinstance(payload, dict):
            return JSONResponse(
                status_code=502,
                content={"error": "search-provider-failed", "detail": "unexpected payload"},
            )

        results = build_search_results(payload, SEARCH_MAX_RESULTS)
        span.set_attribute("search.result_count", len(results))
        return SearchResponse(query=query, results=results)
