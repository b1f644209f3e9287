"""
Rate Limiting
=============
Fixed-window, per-client request limiter.

  general  — 60 requests / 1 minute, every route (middleware in app.main)
  refresh  — 5 requests / 5 minutes, /api/refresh only (route dependency)

Windows live in memory; expired ones are dropped by the prune job in
app/scheduler.py.
"""

import logging
import math
import os
import time
from typing import Callable, Dict, NamedTuple, Tuple

from fastapi import Request, Response

logger = logging.getLogger(__name__)

TRUST_PROXY = os.getenv("TRUST_PROXY", "1").lower() not in ("0", "false", "no", "")


class RateLimitDecision(NamedTuple):
    allowed: bool
    limit: int
    remaining: int
    reset_after: int      # whole seconds until the window resets

    def headers(self) -> Dict[str, str]:
        headers = {
            "RateLimit-Limit":     str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset":     str(self.reset_after),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.reset_after)
        return headers


class RateLimitExceeded(Exception):
    """Raised by the refresh dependency; rendered as a 429 by app.main."""

    def __init__(self, decision: RateLimitDecision, message: str):
        self.decision = decision
        self.message = message
        super().__init__(message)


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        # client key → (window start, hits in window)
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        start, count = self._windows.get(key, (now, 0))
        if now - start >= self.window_seconds:
            start, count = now, 0

        count += 1
        self._windows[key] = (start, count)

        reset_after = max(0, math.ceil(start + self.window_seconds - now))
        return RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=reset_after,
        )

    def prune(self) -> int:
        """Drop windows that have expired. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._windows[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


def build_general_limiter() -> RateLimiter:
    return RateLimiter(60, 60, "Too many requests, please try again later")


def build_refresh_limiter() -> RateLimiter:
    return RateLimiter(5, 5 * 60, "Too many refresh requests, please wait before trying again")


# ──────────────────────────────────────────────
# Request helpers
# ──────────────────────────────────────────────

def client_key(request: Request) -> str:
    """
    Identify the caller. Behind one reverse proxy the rightmost
    X-Forwarded-For entry is the address the proxy saw.
    """
    if TRUST_PROXY:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [h.strip() for h in forwarded.split(",") if h.strip()]
        if hops:
            return hops[-1]
    return request.client.host if request.client else "unknown"


async def limit_refresh(request: Request, response: Response) -> None:
    """Route dependency enforcing the refresh limiter."""
    limiter: RateLimiter = request.app.state.refresh_limiter
    key = client_key(request)
    decision = limiter.hit(key)
    if not decision.allowed:
        logger.warning(f"Refresh rate limit exceeded for {key}")
        raise RateLimitExceeded(decision, limiter.message)
    response.headers.update(decision.headers())
