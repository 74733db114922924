import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "browsing-proxy")

# Comma separated hostnames; empty means every host may be fetched (dev mode)
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "")

PROXY_PATH = os.environ.get("PROXY_PATH", "/proxy_backend")
PROXY_TIMEOUT = float(os.environ.get("PROXY_TIMEOUT", "30"))
PROXY_USER_AGENT = os.environ.get(
    "PROXY_USER_AGENT",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36",
)

SEARCH_API_URL = os.getenv("SEARCH_API_URL", "https://api.duckduckgo.com/")
SEARCH_MAX_RESULTS = int(os.getenv("SEARCH_MAX_RESULTS", "30"))
SEARCH_TIMEOUT = float(os.getenv("SEARCH_TIMEOUT", "10"))

RENDER_TIMEOUT = float(os.getenv("RENDER_TIMEOUT", "30"))
RENDER_VIEWPORT_WIDTH = int(os.getenv("RENDER_VIEWPORT_WIDTH", "1280"))
RENDER_VIEWPORT_HEIGHT = int(os.getenv("RENDER_VIEWPORT_HEIGHT", "900"))

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
