"""Prometheus HTTP request metrics middleware for the registration API.

Tracks:
- ``addrhooks_http_requests_total`` (counter) — requests by method, route, status
- ``addrhooks_http_request_duration_seconds`` (histogram) — duration by method, route
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from collections.abc import Callable

    from prometheus_client import CollectorRegistry
    from starlette.requests import Request
    from starlette.responses import Response


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that records request count and duration."""

    def __init__(self, app: object, *, registry: CollectorRegistry) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._requests = Counter(
            "addrhooks_http_requests",
            "Registration API requests",
            ("method", "route", "status_code"),
            registry=registry,
        )
        self._duration = Histogram(
            "addrhooks_http_request_duration_seconds",
            "Registration API request duration in seconds",
            ("method", "route"),
            registry=registry,
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:  # type: ignore[type-arg]
        """Time the request and count it under its route template."""
        start = time.monotonic()
        response: Response = await call_next(request)
        elapsed = time.monotonic() - start

        # Label by route template so unmatched paths cannot grow cardinality.
        route = request.scope.get("route")
        template = getattr(route, "path", "unmatched")

        self._requests.labels(
            method=request.method,
            route=template,
            status_code=str(response.status_code),
        ).inc()
        self._duration.labels(method=request.method, route=template).observe(elapsed)
        return response
