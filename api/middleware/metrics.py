"""Prometheus metrics middleware for request monitoring.

Tracks:
- postboard_http_requests_total: Counter by method, route, status
- postboard_http_request_duration_seconds: Histogram by method, route
- postboard_http_requests_active: Gauge of in-flight requests
"""

import time
from typing import Callable, Iterable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import BaseRoute, Match

REQUEST_COUNT = Counter(
    "postboard_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

REQUEST_LATENCY = Histogram(
    "postboard_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "postboard_http_requests_active",
    "Number of in-flight HTTP requests",
)

# Scrapes and static media would drown out API traffic
UNTRACKED_PREFIXES = ("/metrics", "/uploads")


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records count, latency and concurrency for each API request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(UNTRACKED_PREFIXES):
            return await call_next(request)

        route = route_template(request.app.routes, request.scope)
        method = request.method

        ACTIVE_REQUESTS.inc()
        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            ACTIVE_REQUESTS.dec()
            REQUEST_COUNT.labels(method=method, route=route, status=str(status_code)).inc()
            REQUEST_LATENCY.labels(method=method, route=route).observe(
                time.perf_counter() - start_time
            )


def route_template(routes: Iterable[BaseRoute], scope: dict) -> str:
    """Route pattern instead of the raw path.

    /api/posts/<uuid> is reported as /api/posts/{post_id} so each post
    does not get its own label set. Entries without a path (mounted
    sub-routers on some FastAPI releases) are skipped.
    """
    for route in routes:
        path = getattr(route, "path", None)
        if path is None:
            continue
        match, _ = route.matches(scope)
        if match == Match.FULL:
            return path
    return "unmatched"


def get_metrics() -> bytes:
    """Prometheus metrics in text exposition format."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
