# Middleware package init
"""
Affiliate Tracker Backend: Middleware Package
=============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: rejected requests do no further work
    2. Request ID: correlation id for every log line of the request
    3. Logging: method, path, status, duration with the request id
    4. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
