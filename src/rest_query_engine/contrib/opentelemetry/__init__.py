"""
OpenTelemetry integration for rest-query-engine.

Spans and metrics are recorded per send attempt, so a query that follows
two redirects produces three spans.
Requires opentelemetry-api and opentelemetry-semantic-conventions.

Installation:
    pip install rest-query-engine[otel]

Example:
    >>> from rest_query_engine import RestApiEngine
    >>> from rest_query_engine.contrib.opentelemetry import OpenTelemetryPlugin
    >>>
    >>> from opentelemetry import trace
    >>> from opentelemetry.sdk.trace import TracerProvider
    >>> from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
    >>>
    >>> provider = TracerProvider()
    >>> provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    >>> trace.set_tracer_provider(provider)
    >>>
    >>> engine = RestApiEngine(plugins=[OpenTelemetryPlugin()])
"""

# Check if OpenTelemetry is installed
try:
    import opentelemetry  # noqa: F401
except ImportError as e:
    raise ImportError(
        "OpenTelemetry support requires opentelemetry-api and opentelemetry-semantic-conventions. "
        "Install with: pip install rest-query-engine[otel]"
    ) from e

from .plugin import OpenTelemetryPlugin
from .metrics import OpenTelemetryMetrics

__all__ = [
    "OpenTelemetryPlugin",
    "OpenTelemetryMetrics",
]
