# Middleware package init
"""
Postboard Backend: Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route

    - Request ID first so every later log line and error body can carry it.
    - Logging wraps the rate limiter so rejected (429) requests are logged.
    - Rate Limit only counts /api/ paths.
"""
