# Middleware package init
"""
FileRelay — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and every pipeline log
    of the request carry the same ID.
"""
