"""
Link rewriting for proxied HTML documents.

Every navigable or loadable reference in the document is resolved against
the document URL and replaced by ``<proxy path>?url=<encoded absolute URL>``
so that following it goes back through the proxy. ``srcset``, CSS
``url(...)`` values and inline ``style`` attributes are not rewritten.
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from proxy_backend.app_proxy.document import parse_document, serialize_document
from proxy_backend.app_proxy.urls import (
    build_proxy_url,
    is_unsafe_scheme,
    resolve_absolute_url,
)
from proxy_backend.vars import PROXY_PATH

logger = logging.getLogger("uvicorn.error")

# (element, attribute) pairs routed through the proxy
REWRITE_TARGETS = (
    ("a", "href"),
    ("img", "src"),
    ("script", "src"),
    ("link", "href"),
    ("form", "action"),
)

CSP_HTTP_EQUIV = {
    "content-security-policy",
    "content-security-policy-report-only",
}


def rewrite_attribute(
    tag, attribute: str, base_url: str, proxy_path: str = PROXY_PATH
) -> Optional[str]:
    """
    Point ``tag[attribute]`` at the proxy.

    Returns the new value, or None when the attribute was left untouched
    (missing, empty, script/data scheme, or not resolvable).
    """
    value = tag.get(attribute)
    if not value:
        return None
    if is_unsafe_scheme(value):
        return None
    absolute = resolve_absolute_url(base_url, value)
    if absolute is None:
        logger.debug(f"[Rewrite] Leaving unresolvable {tag.name}[{attribute}]={value!r}")
        return None
    rewritten = build_proxy_url(absolute, proxy_path)
    tag[attribute] = rewritten
    return rewritten


def remove_csp_meta(soup: BeautifulSoup) -> int:
    removed = 0
    for meta in soup.find_all("meta"):
        http_equiv = (meta.get("http-equiv") or "").strip().lower()
        if http_equiv in CSP_HTTP_EQUIV:
            meta.decompose()
            removed += 1
    return removed


def rewrite_tree(soup: BeautifulSoup, base_url: str, proxy_path: str = PROXY_PATH) -> None:
    """Rewrite resource references of a parsed document in place."""
    rewritten = 0
    for element, attribute in REWRITE_TARGETS:
        for tag in soup.find_all(element, attrs={attribute: True}):
            if rewrite_attribute(tag, attribute, base_url, proxy_path) is not None:
                rewritten += 1

    removed = remove_csp_meta(soup)
    logger.debug(
        f"[Rewrite] {base_url}: rewrote {rewritten} references, removed {removed} CSP meta tags"
    )


def rewrite(base_url: str, html: str, proxy_path: str = PROXY_PATH) -> str:
    """Rewrite resource references in ``html`` to go through ``proxy_path``."""
    soup = parse_document(html)
    rewrite_tree(soup, base_url, proxy_path)
    return serialize_document(soup)
