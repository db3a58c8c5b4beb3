"""
staffdash/main.py: Staff dashboard data service
Startup: schedules the global preload so the cache is warm before the first
dashboard request. Every endpoint reads through the shared TTL cache.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staffdash.core.config import API_BASE, CACHE_TTL_S, ENDPOINTS, LOG_LEVEL, REPORTING_RANGES
from staffdash.core.context import DataContext, get_context
from staffdash.core.http_client import close_all
from staffdash.preloader import GlobalPreloader, auto_preload, get_preloader
from staffdash.routers import dashboard, preload

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("main")

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"🚀 Staff dashboard service v{VERSION} starting (upstream {API_BASE})...")
    task = asyncio.create_task(auto_preload())
    yield
    log.info("🛑 Shutting down...")
    task.cancel()
    get_preloader().cancel()
    await close_all()


app = FastAPI(
    title="Staff Dashboard Data Service",
    description=(
        "Cache-first read layer for the staff / shift / cash-register dashboards. "
        f"Upstream responses are cached in memory for {CACHE_TTL_S:g}s; "
        "concurrent reads of the same dataset share one upstream request."
    ),
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(dashboard.router)
app.include_router(preload.router)


@app.get("/", tags=["meta"])
async def root():
    return {
        "status":   "online",
        "version":  VERSION,
        "upstream": API_BASE,
        "ttl_s":    CACHE_TTL_S,
        "endpoints": {
            "resource":  "/dashboard/{resource}",
            "refresh":   "/dashboard/{resource}/refresh",
            "reporting": "/dashboard/reporting?range={range}&compare={range}",
            "range":     "/dashboard/ranges/{range}?compare={range}",
            "preload":   "/preload",
            "health":    "/health",
            "docs":      "/docs",
        },
        "resources": list(ENDPOINTS),
        "ranges":    list(REPORTING_RANGES),
    }


@app.get("/health", tags=["meta"])
async def health(
    ctx: DataContext      = Depends(get_context),
    p:   GlobalPreloader  = Depends(get_preloader),
):
    """Cache ages and preload progress. No upstream calls."""
    summary = ctx.cache.summary(ctx.ttl_s)
    status  = p.status
    return {
        "status":     "healthy" if summary else "warming_up",
        "cache_keys": summary,
        "in_flight":  len(ctx.inflight),
        "preload":    status.as_dict(),
    }
