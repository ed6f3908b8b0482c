"""OpenTelemetry tracing for bucket requests."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, Status, StatusCode

from guildevents import __version__
from guildevents.common.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_SERVICE_NAME = "guildevents"

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = _DEFAULT_SERVICE_NAME,
    otlp_endpoint: str | None = None,
    enable_console: bool = False,
) -> trace.Tracer:
    """
    Configure OpenTelemetry tracing.

    Args:
        service_name: Name of the service for traces
        otlp_endpoint: OTLP collector endpoint (e.g., "localhost:4317")
        enable_console: Enable console span exporter for debugging

    Returns:
        Configured tracer instance
    """
    global _tracer

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
        }
    )
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        logger.info("OTLP tracing enabled", endpoint=otlp_endpoint)

    if enable_console:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Console tracing enabled")

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the configured tracer, or a no-op tracer if not configured."""
    if _tracer is None:
        return trace.get_tracer(_DEFAULT_SERVICE_NAME)
    return _tracer


@contextmanager
def span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """
    Create a traced span context manager.

    Args:
        name: Name of the span
        attributes: Optional span attributes

    Yields:
        The span object for adding events/attributes
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as current_span:
        if attributes:
            for key, value in attributes.items():
                current_span.set_attribute(key, value)
        try:
            yield current_span
        except Exception as e:
            current_span.set_status(Status(StatusCode.ERROR, str(e)))
            current_span.record_exception(e)
            raise
