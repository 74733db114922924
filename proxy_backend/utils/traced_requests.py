import logging
from typing import Optional, Dict
from contextlib import contextmanager

from opentelemetry.trace import Tracer

from proxy_backend.utils import redact_url

logger = logging.getLogger("uvicorn.error")


@contextmanager
def traced_request(
    tracer: Tracer,
    operation: str,
    start_message: str,
    url_attributes: Optional[Dict[str, Optional[str]]] = None,
    attributes: Optional[Dict] = None,
):
    """
    Open a span named ``operation`` and log ``start_message``.

    ``url_attributes`` are recorded with credentials redacted, ``attributes``
    as given; the caller picks the attribute names.
    """
    with tracer.start_as_current_span(operation) as span:
        for key, url in (url_attributes or {}).items():
            if url:
                span.set_attribute(key, redact_url(url))
        for key, value in (attributes or {}).items():
            span.set_attribute(key, value)
        logger.info(start_message)
        yield span
