"""
OpenTelemetry Tracing
=====================

Distributed tracing for request flow visualization.
"""

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger(__name__)

_provider: Optional[TracerProvider] = None


def setup_tracing(
    app: FastAPI,
    service_name: str = "nl-to-es-api",
    otlp_endpoint: Optional[str] = None,
) -> None:
    """
    Set up OpenTelemetry tracing for the application.

    The tracer provider is process-global and installed once; every app
    passed in is instrumented.

    Args:
        app: FastAPI application instance
        service_name: Name of the service for traces
        otlp_endpoint: OTLP collector endpoint (default: from env, or disabled)
    """
    global _provider

    if _provider is None:
        endpoint = otlp_endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "disabled")

        resource = Resource.create({
            SERVICE_NAME: service_name,
            "service.version": app.version,
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        })
        provider = TracerProvider(resource=resource)

        if endpoint != "disabled":
            provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
            )
            logger.info("Exporting traces to %s", endpoint)

        trace.set_tracer_provider(provider)
        _provider = provider

    FastAPIInstrumentor.instrument_app(app)


def get_tracer(name: str = __name__) -> trace.Tracer:
    """Get a tracer instance for creating spans."""
    return trace.get_tracer(name)


@contextmanager
def pipeline_span(name: str, **attributes) -> Iterator[trace.Span]:
    """
    Open a span around one pipeline operation.

    Attributes are recorded under the ``pipeline.`` prefix; an exception
    marks the span as errored and propagates.
    """
    tracer = get_tracer("nl_to_es.pipeline")
    with tracer.start_as_current_span(name) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(f"pipeline.{key}", value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.set_attribute("error.message", str(e))
            raise
