from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import os

from app.parks import build_resolver
from app.routers import status
from app.scheduler import build_scheduler
from app.security import SECURITY_HEADERS, security_headers, general_rate_limit
from app.services.rate_limiter import (
    RateLimitExceeded, build_general_limiter, build_refresh_limiter,
)
from app.services.status_cache import StatusCache

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(os.getenv("STATIC_DIR", Path(__file__).resolve().parent.parent / "public"))
API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Retiro Park Status API...")
    # Cache starts empty: the first request after a restart always goes upstream
    app.state.status_cache = StatusCache(build_resolver())
    app.state.general_limiter = build_general_limiter()
    app.state.refresh_limiter = build_refresh_limiter()
    scheduler = build_scheduler([app.state.general_limiter, app.state.refresh_limiter])
    scheduler.start()
    yield
    logger.info("Shutting down...")
    scheduler.shutdown(wait=False)


app = FastAPI(
    title="Retiro Park Status",
    description=(
        "Real-time open/closed/restricted status of Madrid's Retiro Park, "
        "normalized from the city's open-data park alerts."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

# Registered last → runs first: rate limiting sits inside the security headers
app.middleware("http")(general_rate_limit)
app.middleware("http")(security_headers)

app.include_router(status.router, tags=["status"])


@app.get("/api", tags=["root"])
async def root():
    return {
        "api": "Retiro Park Status API",
        "version": API_VERSION,
        "endpoints": ["/api/status", "/api/status.md", "/api/refresh", "/api/health"],
        "docs": "/docs",
    }


# ──────────────────────────────────────────────
# Error handlers
# ──────────────────────────────────────────────

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"error": exc.message},
        headers=exc.decision.headers(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    # Runs in ServerErrorMiddleware, outside the security_headers middleware
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
        headers=SECURITY_HEADERS,
    )


# ──────────────────────────────────────────────
# Static site
# ──────────────────────────────────────────────

class CachedStaticFiles(StaticFiles):
    """StaticFiles with a one-hour public Cache-Control."""

    async def get_response(self, path: str, scope):
        response = await super().get_response(path, scope)
        if response.status_code == 200:
            response.headers["Cache-Control"] = "public, max-age=3600"
        return response


# Mounted after the API routes so /api/* is never shadowed
if STATIC_DIR.is_dir():
    app.mount("/", CachedStaticFiles(directory=STATIC_DIR, html=True), name="static")
else:
    logger.warning(f"Static directory {STATIC_DIR} not found — serving API only.")
