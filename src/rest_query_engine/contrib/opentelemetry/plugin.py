"""
OpenTelemetry tracing plugin for the query engine.

Follows OpenTelemetry Semantic Conventions for HTTP client spans.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx
from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator
from opentelemetry.semconv.trace import SpanAttributes

from ...core.utils import SENSITIVE_HEADER_NAMES, sanitize_url
from ...plugins.plugin import PluginPriority, QueryPlugin

logger = logging.getLogger(__name__)


class OpenTelemetryPlugin(QueryPlugin):
    """
    Span per send attempt.

    Priority: FIRST (0) - trace context must be injected before other
    plugins see the request.

    - Span attributes follow HTTP semantic conventions
    - W3C Trace Context is injected into request headers
    - Sensitive headers are never recorded
    - 5xx and transport errors set ERROR status

    Example:
        >>> engine = RestApiEngine(plugins=[OpenTelemetryPlugin()])
        >>> result = await engine.execute_query(None, datasource, query)
    """

    priority = PluginPriority.FIRST

    def __init__(
        self,
        tracer_name: str = "rest_query_engine",
        excluded_urls: Optional[List[str]] = None,
        capture_headers: bool = True,
        max_header_length: int = 256,
    ):
        """
        Args:
            tracer_name: Name of the tracer
            excluded_urls: URL substrings excluded from tracing
            capture_headers: Record non-sensitive headers as span attributes
            max_header_length: Maximum length for header values in attributes
        """
        self.tracer = trace.get_tracer(tracer_name)
        self.propagator = TraceContextTextMapPropagator()
        self.excluded_urls = set(excluded_urls) if excluded_urls else set()
        self.capture_headers = capture_headers
        self.max_header_length = max_header_length

        # id(request) -> span; a request object lives for exactly one attempt
        self._active_spans: Dict[int, Span] = {}

    def _should_trace(self, url: str) -> bool:
        return not any(excluded in url for excluded in self.excluded_urls)

    def _sanitize_headers(self, headers: Mapping[str, str]) -> Dict[str, str]:
        """Remove sensitive headers and truncate long values."""
        if not self.capture_headers:
            return {}

        sanitized = {}
        for key, value in headers.items():
            key_lower = key.lower()
            if key_lower in SENSITIVE_HEADER_NAMES:
                continue
            if len(value) > self.max_header_length:
                value = value[: self.max_header_length] + "..."
            sanitized[key_lower] = value
        return sanitized

    async def before_send(self, request: httpx.Request) -> httpx.Request:
        url = str(request.url)
        if not self._should_trace(url):
            return request

        span = self.tracer.start_span(f"HTTP {request.method}", kind=SpanKind.CLIENT)

        span.set_attribute(SpanAttributes.HTTP_METHOD, request.method)
        span.set_attribute(SpanAttributes.HTTP_URL, sanitize_url(url))
        if request.url.scheme:
            span.set_attribute(SpanAttributes.HTTP_SCHEME, request.url.scheme)
        if request.url.host:
            span.set_attribute(SpanAttributes.NET_PEER_NAME, request.url.host)
        if request.url.port:
            span.set_attribute(SpanAttributes.NET_PEER_PORT, request.url.port)
        span.set_attribute(SpanAttributes.HTTP_TARGET, request.url.raw_path.decode("ascii", "replace"))

        for key, value in self._sanitize_headers(request.headers).items():
            span.set_attribute(f"http.request.header.{key}", value)

        # W3C Trace Context
        self.propagator.inject(request.headers, context=trace.set_span_in_context(span))

        self._active_spans[id(request)] = span
        return request

    async def after_response(self, response: httpx.Response) -> httpx.Response:
        span = self._active_spans.pop(id(response.request), None)
        if span is None:
            return response

        try:
            span.set_attribute(SpanAttributes.HTTP_STATUS_CODE, response.status_code)
            for key, value in self._sanitize_headers(response.headers).items():
                span.set_attribute(f"http.response.header.{key}", value)

            # 4xx: not a span error for a client
            if response.status_code >= 500:
                span.set_status(
                    Status(StatusCode.ERROR, f"HTTP {response.status_code}: {response.reason_phrase}")
                )
            else:
                span.set_status(Status(StatusCode.OK))
        finally:
            span.end()

        return response

    async def on_error(self, error: Exception, **kwargs: Any) -> None:
        request = kwargs.get("request")
        if request is None:
            return
        span = self._active_spans.pop(id(request), None)
        if span is None:
            return

        try:
            span.record_exception(error)
            span.set_status(Status(StatusCode.ERROR, str(error)))
            span.set_attribute("error.type", type(error).__name__)
            code = getattr(error, "code", None)
            if code:
                span.set_attribute("rest_query_engine.error_code", code)
        finally:
            span.end()

    def __repr__(self) -> str:
        return f"OpenTelemetryPlugin(tracer={self.tracer}, capture_headers={self.capture_headers})"
