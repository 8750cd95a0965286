# Middleware package init
"""
Storefront Backend - Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route Handler

    1. Request ID first: every response, 429s included, carries X-Request-ID
    2. Logging: one access line per request, rejected ones too
    3. Rate Limit: reject abusive clients before any route work
    4. GZip / CORS: FastAPI's stock middleware

Responses pass back through the chain in reverse, which is where the
X-Request-ID header and the access log duration are added.
"""
