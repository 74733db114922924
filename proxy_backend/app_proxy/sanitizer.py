"""
Removal of active content from fetched HTML before it is rewritten.

The sanitizer is a blocklist over the html5lib tree: elements that run
code or navigate on their own are dropped together with their content,
event handler attributes are removed and script URLs are stripped from
URL-bearing attributes. Everything else is serialized as it was parsed.

Text inside a ``<style>`` is written back unescaped. Under ``<svg>`` or
``<math>`` that text was entity-decoded by the parser, so it could turn
into markup on the next parse; such styles are dropped as well.
"""

import logging
import re

from bs4 import BeautifulSoup
from bs4.element import Doctype, PreformattedString

from proxy_backend.app_proxy.document import parse_document, serialize_document

logger = logging.getLogger("uvicorn.error")

DANGEROUS_ELEMENTS = [
    "script",
    "iframe",
    "frame",
    "frameset",
    "object",
    "embed",
    "applet",
    "base",
    # SVG animation can assign javascript: URLs to href at runtime
    "animate",
    "animateMotion",
    "animateTransform",
    "set",
    # Raw text in the browser, escaped text in the serializer
    "xmp",
    "noembed",
    "noframes",
    "plaintext",
]

FOREIGN_ROOTS = ["svg", "math"]

URL_ATTRIBUTES = {
    "href",
    "src",
    "action",
    "formaction",
    "xlink:href",
    "poster",
    "background",
}

SCRIPT_URL_RE = re.compile(r"^(javascript|vbscript):", re.IGNORECASE)
# Browsers drop these anywhere in a URL, and C0 controls or spaces around it
URL_IGNORED_CHARS_RE = re.compile(r"[\t\n\r]")
URL_STRIPPED_CHARS = "".join(chr(c) for c in range(0x21))


def is_script_url(value: str) -> bool:
    value = URL_IGNORED_CHARS_RE.sub("", value or "").strip(URL_STRIPPED_CHARS)
    return bool(SCRIPT_URL_RE.match(value))


def _is_refresh(meta) -> bool:
    return (meta.get("http-equiv") or "").strip().lower() == "refresh"


def _clean_attributes(tag) -> None:
    for name in list(tag.attrs):
        lowered = name.lower()
        if lowered.startswith("on") or lowered == "srcdoc":
            del tag.attrs[name]
            continue
        if lowered in URL_ATTRIBUTES:
            value = tag.attrs[name]
            if isinstance(value, list):
                value = " ".join(value)
            if is_script_url(value):
                del tag.attrs[name]


def _decompose_all(tags) -> int:
    removed = 0
    for tag in tags:
        # Already gone with an ancestor removed earlier in the loop
        if tag.decomposed:
            continue
        tag.decompose()
        removed += 1
    return removed


def sanitize_tree(soup: BeautifulSoup) -> None:
    """Remove active content from a parsed document in place."""
    removed = _decompose_all(soup.find_all(DANGEROUS_ELEMENTS))
    removed += _decompose_all(
        style for style in soup.find_all("style") if style.find_parent(FOREIGN_ROOTS)
    )
    removed += _decompose_all(meta for meta in soup.find_all("meta") if _is_refresh(meta))

    # Comments, CDATA and processing instructions are serialized verbatim
    for node in list(soup.descendants):
        if isinstance(node, PreformattedString) and not isinstance(node, Doctype):
            node.extract()

    for tag in soup.find_all(True):
        _clean_attributes(tag)

    logger.debug(f"[Sanitize] removed {removed} elements")


def sanitize(html: str) -> str:
    """Return ``html`` with scripts, handlers and script URLs removed."""
    if not html:
        return ""
    soup = parse_document(html)
    sanitize_tree(soup)
    return serialize_document(soup)
