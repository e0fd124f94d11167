"""Middleware module for the API."""

from api.middleware.metrics import MetricsMiddleware, get_metrics, get_metrics_content_type
from api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "MetricsMiddleware",
    "RequestContextMiddleware",
    "get_metrics",
    "get_metrics_content_type",
]
