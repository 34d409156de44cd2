"""
Catalog API — Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Request ID wraps the access log so every access line carries the
    correlation ID. Both are added last in create_app(), which makes them
    the outermost layers.
"""
