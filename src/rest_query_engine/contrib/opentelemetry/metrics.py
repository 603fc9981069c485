"""
OpenTelemetry metrics for the query engine.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx
from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram, UpDownCounter

from ...plugins.plugin import PluginPriority, QueryPlugin

logger = logging.getLogger(__name__)


class OpenTelemetryMetrics(QueryPlugin):
    """
    Metrics per send attempt.

    Priority: LAST (100) - runs last so that durations include the other plugins.

    Metrics:
    - rest_query_requests_total: Send attempts (Counter)
    - rest_query_request_duration_seconds: Attempt duration (Histogram)
    - rest_query_active_requests: In-flight attempts (UpDownCounter)

    Labels: method, host, status (HTTP status code or "error").

    Example:
        >>> from opentelemetry import metrics
        >>> from opentelemetry.sdk.metrics import MeterProvider
        >>> metrics.set_meter_provider(MeterProvider(metric_readers=[reader]))
        >>> engine = RestApiEngine(plugins=[OpenTelemetryMetrics()])
    """

    priority = PluginPriority.LAST

    def __init__(self, meter_name: str = "rest_query_engine"):
        self.meter = metrics.get_meter(meter_name)

        self.request_counter: Counter = self.meter.create_counter(
            name="rest_query_requests_total",
            description="Total number of send attempts",
            unit="requests",
        )
        self.request_duration: Histogram = self.meter.create_histogram(
            name="rest_query_request_duration_seconds",
            description="Send attempt duration in seconds",
            unit="s",
        )
        self.active_requests: UpDownCounter = self.meter.create_up_down_counter(
            name="rest_query_active_requests",
            description="Number of in-flight send attempts",
            unit="requests",
        )

        # id(request) -> start time
        self._start_times: Dict[int, float] = {}

    @staticmethod
    def _labels(request: httpx.Request, status: Optional[str] = None) -> Dict[str, str]:
        labels = {
            "method": request.method,
            "host": request.url.host or "unknown",
        }
        if status is not None:
            labels["status"] = status
        return labels

    def _finish(self, request: httpx.Request, status: str) -> None:
        start = self._start_times.pop(id(request), None)
        if start is None:
            return
        duration = time.monotonic() - start

        self.active_requests.add(-1, self._labels(request))
        labels = self._labels(request, status)
        self.request_counter.add(1, labels)
        self.request_duration.record(duration, labels)

    async def before_send(self, request: httpx.Request) -> httpx.Request:
        self.active_requests.add(1, self._labels(request))
        self._start_times[id(request)] = time.monotonic()
        return request

    async def after_response(self, response: httpx.Response) -> httpx.Response:
        self._finish(response.request, str(response.status_code))
        return response

    async def on_error(self, error: Exception, **kwargs: Any) -> None:
        request = kwargs.get("request")
        if request is not None:
            self._finish(request, "error")

    def __repr__(self) -> str:
        return f"OpenTelemetryMetrics(meter={self.meter})"
