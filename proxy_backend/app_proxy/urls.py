import re
from typing import Optional
from urllib.parse import quote, urljoin, urlsplit

from proxy_backend.vars import PROXY_PATH

# Schemes that carry an authority; a resolved URL with one of these and no host is unusable
NETLOC_SCHEMES = {"http", "https", "ws", "wss", "ftp"}
FETCHABLE_SCHEMES = {"http", "https"}

UNSAFE_SCHEME_RE = re.compile(r"^\s*(javascript|data):", re.IGNORECASE)


def is_unsafe_scheme(value: str) -> bool:
    """True for ``javascript:`` and ``data:`` references."""
    return bool(UNSAFE_SCHEME_RE.match(value or ""))


def resolve_absolute_url(base: str, maybe: str) -> Optional[str]:
    """
    Resolve ``maybe`` against ``base`` the way a browser resolves an attribute.

    Returns None instead of raising when either URL cannot be parsed or the
    result is not absolute.
    """
    if maybe is None:
        return None
    try:
        resolved = urljoin(base, maybe.strip())
        parts = urlsplit(resolved)
        # Accessing the port validates it
        parts.port
    except ValueError:
        return None
    if not parts.scheme:
        return None
    if parts.scheme in NETLOC_SCHEMES and not parts.hostname:
        return None
    return resolved


def parse_target_url(raw: Optional[str]) -> Optional[str]:
    """Validate a client supplied target; only absolute http(s) URLs qualify."""
    if not raw:
        return None
    try:
        parts = urlsplit(raw.strip())
        parts.port
    except ValueError:
        return None
    if parts.scheme not in FETCHABLE_SCHEMES or not parts.hostname:
        return None
    return raw.strip()


def build_proxy_url(absolute_url: str, proxy_path: str = PROXY_PATH) -> str:
    return f"{proxy_path}?url={quote(absolute_url, safe='')}"
