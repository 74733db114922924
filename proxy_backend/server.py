import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from proxy_backend.app_proxy.allowlist import HostAllowlist, log_allowlist_mode
from proxy_backend.vars import ALLOWED_HOSTS, OTLP_ENDPOINT, OTLP_HEADERS, SERVICE_NAME
from .routes import router

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=SERVICE_NAME)

# Loaded once; handlers receive it through the get_allowlist dependency
app.state.allowlist = HostAllowlist.from_csv(ALLOWED_HOSTS)
log_allowlist_mode(app.state.allowlist)

instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app)

trace.set_tracer_provider(
    TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
)
tracer_provider = trace.get_tracer_provider()
if OTLP_ENDPOINT:
    otlp_exporter = OTLPSpanExporter(
        endpoint=OTLP_ENDPOINT,
        headers=(
            dict(h.split("=", 1) for h in OTLP_HEADERS.split(",") if "=" in h)
            if OTLP_HEADERS
            else None
        ),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    logger.info(f"Exporting traces to {OTLP_ENDPOINT}")

FastAPIInstrumentor.instrument_app(app)

# Add app_name to the metrics
app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": SERVICE_NAME})

app.include_router(router)
