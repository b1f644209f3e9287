"""
Background Scheduler
====================
Runs one recurring job:

  prune_rate_limits — every 5 minutes
      • drops expired per-client windows from every RateLimiter so the
        in-memory client table does not grow with each new address

The park status itself is never fetched in the background: upstream is
only queried on a cache miss or an explicit refresh.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import logging
from typing import Iterable

from app.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

PRUNE_INTERVAL_MINUTES = 5


def build_scheduler(limiters: Iterable[RateLimiter]) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        prune_rate_limits,
        trigger=IntervalTrigger(minutes=PRUNE_INTERVAL_MINUTES),
        args=[list(limiters)],
        id="prune_rate_limits",
        name=f"Prune expired rate-limit windows (every {PRUNE_INTERVAL_MINUTES} min)",
        replace_existing=True,
    )
    return scheduler


async def prune_rate_limits(limiters: Iterable[RateLimiter]):
    removed = 0
    for limiter in limiters:
        try:
            removed += limiter.prune()
        except Exception as e:
            logger.error(f"Rate-limit prune failed: {e}", exc_info=True)
    if removed:
        logger.info(f"Pruned {removed} expired rate-limit windows.")
