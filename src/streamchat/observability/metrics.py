"""Prometheus metrics collection for monitoring.

This module provides Prometheus metrics for tracking chat turns, upstream
failures and HTTP traffic.
"""

from typing import Optional

from prometheus_client import Counter, Histogram, generate_latest

chat_turns_total = Counter(
    "chat_turns_total",
    "Total number of chat turns by outcome",
    labelnames=["outcome", "model"],
)

chat_turn_duration_seconds = Histogram(
    "chat_turn_duration_seconds",
    "Time from request to end of the assistant stream",
    labelnames=["outcome"],
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
)

upstream_errors_total = Counter(
    "upstream_errors_total",
    "Total number of completion provider failures",
    labelnames=["status"],
)

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


class MetricsCollector:
    """Collects and exposes Prometheus metrics."""

    def record_turn(self, outcome: str, model: str, duration_seconds: float) -> None:
        """Record the end of a chat turn.

        Args:
            outcome: committed, aborted or cancelled
            model: Model identifier used for the turn
            duration_seconds: Turn duration in seconds

        Example:
            >>> get_metrics_collector().record_turn("committed", "gpt-4o-mini", 1.2)
        """
        chat_turns_total.labels(outcome=outcome, model=model).inc()
        chat_turn_duration_seconds.labels(outcome=outcome).observe(duration_seconds)

    def record_upstream_error(self, status: Optional[int]) -> None:
        """Record a completion provider failure.

        Args:
            status: Provider status code, if known
        """
        upstream_errors_total.labels(status=str(status) if status else "unknown").inc()

    def record_http_request(
        self,
        method: str,
        endpoint: str,
        status_code: int,
        duration_seconds: float,
    ) -> None:
        """Record an HTTP request event.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Request endpoint path
            status_code: HTTP status code
            duration_seconds: Request duration in seconds
        """
        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=status_code,
        ).inc()

        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration_seconds)

    def generate_metrics(self) -> bytes:
        """Generate Prometheus metrics in text format."""
        return generate_latest()


# Singleton instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get the global MetricsCollector instance."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector
