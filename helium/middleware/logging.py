"""
Helium — Request Logging Middleware
=====================================

What:  Logs method, route, status and duration of every request and records the
       same numbers in telemetry.
Why:   One interceptor at the routing layer covers every endpoint, so handlers
       carry no logging or timing code of their own.
How:   Times call_next(); picks the log level from the status code; reports to
       the TelemetryService on app.state.services when the app has one.

What we log vs what we DON'T log:
    ✅ method, path, status, duration, client IP, request ID
    ❌ request bodies, Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from helium.middleware.request_id import request_id_var

logger = logging.getLogger("helium.access")

# Probes and scrapes are too frequent to log
QUIET_PATHS = {"/healthz", "/metrics"}

# Route label for requests no route matched (404 on unknown paths)
UNMATCHED_ROUTE = "<unmatched>"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log + HTTP request telemetry."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        status = response.status_code

        # Label by route template ("/api/movies/{movie_id}"); unrouted paths share one label
        route = getattr(request.scope.get("route"), "path", None) or UNMATCHED_ROUTE

        services = getattr(request.app.state, "services", None)
        if services is not None and path not in QUIET_PATHS:
            services.telemetry.track_request(method, route, status, duration)

        if path in QUIET_PATHS:
            return response

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration * 1000,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "route": route,
                "status": status,
                "duration_ms": round(duration * 1000, 2),
                "client_ip": client_ip,
            },
        )
        return response
