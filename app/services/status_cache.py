"""
Status Cache
============
Single-entry TTL cache in front of a park status resolver.

  get_status()     — serves the cached status while younger than TTL,
                     otherwise resolves upstream
  force_refresh()  — always resolves upstream, ignoring TTL

Only a resolved=True status is ever stored, so the last good value survives
upstream outages until it expires. Neither method raises.

Fetches are single-flight: the freshness check and the start of a fetch
run with no await between them, and requests arriving while a fetch is in
flight await that same task. Concurrent misses therefore cost one upstream
call, whether it succeeds or fails.
"""

import asyncio
import logging
from datetime import datetime, timezone, timedelta
from typing import Callable, Optional, Tuple

from app.parks.base import BaseStatusResolver, error_status
from app.models.schemas import NormalizedStatus, StatusResult

logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusCache:
    def __init__(
        self,
        resolver: BaseStatusResolver,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.resolver = resolver
        self._clock = clock
        # (status, fetched_at) — both set or the whole entry is None
        self._entry: Optional[Tuple[NormalizedStatus, datetime]] = None
        self._inflight: Optional["asyncio.Task[StatusResult]"] = None

    @property
    def entry(self) -> Optional[Tuple[NormalizedStatus, datetime]]:
        return self._entry

    async def get_status(self) -> StatusResult:
        now = self._clock()
        if self._entry is not None:
            status, fetched_at = self._entry
            age = now - fetched_at
            if age < CACHE_TTL:
                return StatusResult(
                    **status.model_dump(),
                    served_from_cache=True,
                    cache_age_seconds=max(0, int(age.total_seconds())),
                    fetched_at=fetched_at,
                )

        task = self._inflight
        if task is None or task.done():
            task = self._start_refresh(now)
        # shield: a disconnecting client must not cancel the fetch others await
        return await asyncio.shield(task)

    async def force_refresh(self) -> StatusResult:
        return await asyncio.shield(self._start_refresh(self._clock()))

    def _start_refresh(self, now: datetime) -> "asyncio.Task[StatusResult]":
        task = asyncio.ensure_future(self._refresh(now))
        self._inflight = task
        task.add_done_callback(self._clear_inflight)
        return task

    def _clear_inflight(self, task: "asyncio.Task[StatusResult]") -> None:
        if self._inflight is task:
            self._inflight = None

    async def _refresh(self, now: datetime) -> StatusResult:
        try:
            status = await self.resolver.resolve()
        except Exception as e:
            logger.error(f"Resolver raised instead of returning an error status: {e}", exc_info=True)
            status = error_status(f"Unexpected error: {e}")

        if status.resolved:
            # An older fetch finishing late must not replace a newer entry
            if self._entry is None or now >= self._entry[1]:
                self._entry = (status, now)
                logger.info(f"Status cached: {status.state.value} (code {status.status_code})")
        elif self._entry is not None:
            logger.warning("Upstream resolution failed — keeping previously cached status")

        return StatusResult(
            **status.model_dump(),
            served_from_cache=False,
            fetched_at=now,
        )
