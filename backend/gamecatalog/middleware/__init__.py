"""
Game Catalog API — Middleware Package
=======================================

Applied to every request, outermost first:

    RateLimit → RequestID → Logging → GZip → CORS → route handler

- rate_limit.py:  per-IP sliding window, 429 with Retry-After
- request_id.py:  X-Request-ID correlation id (ContextVar)
- logging.py:     access log on ``gamecatalog.access``
"""
