# FastAPI application factory with lifespan management.
# Entrypoint: python -m flash_gateway
#         or: uvicorn flash_gateway.main:create_app --factory --host 0.0.0.0 --port 3000

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from google import genai

from flash_gateway import __version__
from flash_gateway.config import get_settings
from flash_gateway.exceptions import register_exception_handlers
from flash_gateway.logging_config import configure_logging
from flash_gateway.middleware import RequestContextMiddleware
from flash_gateway.routes import generate, health
from flash_gateway.services.generation import GenerationGateway

logger = structlog.get_logger(__name__)


if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider


def _configure_otel(exporter_type: str) -> "TracerProvider | None":
    """Configure OpenTelemetry tracing (console or gcp)."""
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    provider = TracerProvider()

    if exporter_type == "console":
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    elif exporter_type == "gcp":
        try:
            from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter

            provider.add_span_processor(BatchSpanProcessor(CloudTraceSpanExporter()))  # type: ignore[no-untyped-call]
        except ImportError:
            logger.warning("gcp_trace_exporter_not_available")
            return None
    else:
        logger.warning("unknown_otel_exporter", exporter=exporter_type)
        return None

    from opentelemetry import trace

    trace.set_tracer_provider(provider)
    logger.info("otel_configured", exporter=exporter_type)
    return provider


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the genai client for the app's lifetime; requests share it read-only."""
    settings = get_settings()

    otel_provider = None
    if settings.otel_exporter:
        otel_provider = _configure_otel(settings.otel_exporter)

    client = genai.Client(api_key=settings.gemini_api_key.get_secret_value())
    gateway = GenerationGateway(client)

    app.state.settings = settings
    app.state.generation_gateway = gateway
    logger.info("generation_gateway_ready", model=gateway.model)

    yield

    await client.aio.aclose()
    client.close()
    logger.info("generation_client_closed")

    if otel_provider is not None:
        otel_provider.shutdown()


def _parse_origins(allowed_origins: str) -> list[str]:
    """Parse comma-separated CORS origins. Empty string → deny all."""
    if not allowed_origins.strip():
        logger.warning(
            "cors_no_origins_configured",
            hint="Set ALLOWED_ORIGINS env var. Cross-origin requests will be rejected.",
        )
        return []
    return [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Application factory. Invoked by: uvicorn flash_gateway.main:create_app --factory"""
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="Gemini Flash API",
        description="Text, image, document and audio prompts forwarded to Gemini",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware order (Starlette applies in reverse): CORS → RequestContext
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_parse_origins(settings.allowed_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["status"])
    app.include_router(generate.router, tags=["generate"])

    return app
