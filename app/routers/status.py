import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from app.models.schemas import ParkStatusResponse, StatusResult
from app.services.markdown import render_status_markdown
from app.services.rate_limiter import limit_refresh
from app.services.status_cache import StatusCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

STATUS_CACHE_CONTROL = "public, max-age=300"


def get_status_cache(request: Request) -> StatusCache:
    return request.app.state.status_cache


def _payload(cache: StatusCache, result: StatusResult) -> ParkStatusResponse:
    resolver = cache.resolver
    return ParkStatusResponse(
        park=resolver.park_name,
        park_es=resolver.park_name_es,
        status=result.state,
        color=result.color,
        message=result.message,
        message_es=result.message_es,
        status_code=result.status_code,
        park_name=result.park_name,
        schedule=result.schedule,
        incident_date=result.incident_date,
        reopening=result.reopening,
        observations=result.observations,
        resolved=result.resolved,
        error=result.error,
        served_from_cache=result.served_from_cache,
        cache_age_seconds=result.cache_age_seconds,
        fetched_at=result.fetched_at,
        source_url=resolver.source_url,
        last_updated=datetime.now(timezone.utc),
    )


@router.get("/status", summary="Current park status", response_model=ParkStatusResponse)
async def get_status(response: Response, cache: StatusCache = Depends(get_status_cache)):
    """
    Normalized park status. Served from the in-memory cache for up to one
    hour; an upstream outage is reported as status "error" with HTTP 200.
    """
    try:
        payload = _payload(cache, await cache.get_status())
    except Exception as e:
        logger.error(f"Status endpoint error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={
            "park":       cache.resolver.park_name,
            "status":     "error",
            "color":      "gray",
            "message":    "Server error - please try again later",
            "source_url": cache.resolver.source_url,
        })
    response.headers["Cache-Control"] = STATUS_CACHE_CONTROL
    return payload


@router.get(
    "/refresh",
    summary="Force a refresh from upstream (rate limited)",
    response_model=ParkStatusResponse,
    dependencies=[Depends(limit_refresh)],
)
async def refresh_status(cache: StatusCache = Depends(get_status_cache)):
    """Bypasses the cache. Limited to 5 requests per 5 minutes per client."""
    try:
        return _payload(cache, await cache.force_refresh())
    except Exception as e:
        logger.error(f"Refresh endpoint error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={
            "park":    cache.resolver.park_name,
            "status":  "error",
            "message": "Could not refresh status",
        })


@router.get("/status.md", summary="Park status as markdown", response_class=PlainTextResponse)
async def get_status_markdown(cache: StatusCache = Depends(get_status_cache)):
    payload = _payload(cache, await cache.get_status())
    return PlainTextResponse(
        render_status_markdown(payload),
        media_type="text/markdown; charset=utf-8",
        headers={"Cache-Control": STATUS_CACHE_CONTROL},
    )


@router.get("/health", summary="Liveness check")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
