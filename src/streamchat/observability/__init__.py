"""Observability: structured logging and Prometheus metrics."""

from streamchat.observability.logging import get_logger, setup_logging
from streamchat.observability.metrics import MetricsCollector, get_metrics_collector

__all__ = [
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics_collector",
]
