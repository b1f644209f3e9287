"""
HTTP hardening: security headers on every response and the general
per-client rate limit.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.services.rate_limiter import RateLimiter, client_key

logger = logging.getLogger(__name__)

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "style-src 'self' 'unsafe-inline'",
    "script-src 'self' 'unsafe-inline'",
    "img-src 'self' data:",
    "connect-src 'self'",
    "font-src 'self'",
    "object-src 'none'",
    "frame-src 'none'",
    "base-uri 'self'",
    "form-action 'self'",
])

SECURITY_HEADERS = {
    "Content-Security-Policy":           CONTENT_SECURITY_POLICY,
    "Cross-Origin-Opener-Policy":        "same-origin",
    "Cross-Origin-Resource-Policy":      "same-origin",
    "Origin-Agent-Cluster":              "?1",
    "Referrer-Policy":                   "no-referrer",
    "Strict-Transport-Security":         "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options":            "nosniff",
    "X-DNS-Prefetch-Control":            "off",
    "X-Frame-Options":                   "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection":                  "0",
}


async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def general_rate_limit(request: Request, call_next):
    limiter: RateLimiter = request.app.state.general_limiter
    key = client_key(request)
    decision = limiter.hit(key)
    if not decision.allowed:
        logger.warning(f"General rate limit exceeded for {key}")
        return JSONResponse(
            status_code=429,
            content={"error": limiter.message},
            headers=decision.headers(),
        )
    response = await call_next(request)
    # The refresh route sets its own, stricter RateLimit-* headers
    if "ratelimit-limit" not in response.headers:
        response.headers.update(decision.headers())
    return response
