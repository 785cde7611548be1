"""
Helium — Middleware Package
=============================

Cross-cutting concerns applied uniformly to every request.

Middleware Chain:
    Request → [Request ID] → [Logging + telemetry] → [CORS] → Route Handler

    Request ID runs first so the access log line and any error body carry it.
"""
