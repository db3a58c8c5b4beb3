"""
staffdash/routers/dashboard.py
═══════════════════════════════════════════════════════════════════════════════
Endpoints:
  GET  /dashboard/reporting?range=&compare=  → totals for one range + summary
                                               (compareError if the comparison failed)
  GET  /dashboard/ranges/{range}?compare=     → one range out of /api/dashboard
  GET  /dashboard/{resource}                  → hook state for a resource
  POST /dashboard/{resource}/refresh          → forced refetch (cache bypass)

Every request mounts a fresh hook over the shared cache: a second request
inside the TTL is served without touching upstream. Upstream failures come
back as 200 with "error" set, the same shape a widget binds to.
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from staffdash.core.config import REPORTING_RANGES
from staffdash.core.context import DataContext, get_context
from staffdash.hooks.base import DataHook
from staffdash.hooks.dashboard import DashboardHook
from staffdash.hooks.registry import HOOKS
from staffdash.hooks.reporting import ReportingHook

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _check_range(rng: Optional[str], field: str = "range") -> None:
    if rng is not None and rng not in REPORTING_RANGES:
        raise HTTPException(400, detail=f"Unknown {field} '{rng}'. Expected one of {list(REPORTING_RANGES)}")


def _hook_for(resource: str, ctx: DataContext) -> DataHook:
    cls = HOOKS.get(resource)
    if cls is None:
        raise HTTPException(404, detail=f"Resource '{resource}' not found")
    return cls(ctx)


def _body(hook: DataHook, ctx: DataContext) -> dict:
    return {
        **hook.state.as_dict(),
        "cacheAgeS": ctx.cache.age(hook.cache_key()),
        **hook.extras(),
    }


async def _mounted(hook: DataHook, force: bool = False) -> DataHook:
    try:
        if force:
            await hook.refresh()
        else:
            await hook.load()
    finally:
        hook.close()
    return hook


@router.get("/reporting")
async def get_reporting(
    rng:     str           = Query("today", alias="range"),
    compare: Optional[str] = Query(None),
    ctx:     DataContext   = Depends(get_context),
):
    _check_range(rng)
    _check_range(compare, "compare")
    main = ReportingHook(ctx, rng)
    if compare:
        other = ReportingHook(ctx, compare)
        await asyncio.gather(_mounted(main), _mounted(other))
        compare_data  = other.state.data
        compare_error = other.state.error
    else:
        await _mounted(main)
        compare_data = compare_error = None
    return {
        **_body(main, ctx),
        "range":        rng,
        "compareError": compare_error,
        "summary":      main.summary(compare_data, compare),
    }


@router.post("/reporting/refresh")
async def refresh_reporting(
    rng:   str         = Query("today", alias="range"),
    ctx:   DataContext = Depends(get_context),
):
    _check_range(rng)
    hook = await _mounted(ReportingHook(ctx, rng), force=True)
    return {**_body(hook, ctx), "range": rng}


@router.get("/ranges/{rng}")
async def get_range(
    rng:     str,
    compare: Optional[str] = Query(None),
    ctx:     DataContext   = Depends(get_context),
):
    _check_range(rng)
    _check_range(compare, "compare")
    hook = await _mounted(DashboardHook(ctx))
    return {"range": rng, **hook.range_data(rng, compare)}


@router.get("/{resource}")
async def get_resource(resource: str, ctx: DataContext = Depends(get_context)):
    hook = await _mounted(_hook_for(resource, ctx))
    return _body(hook, ctx)


@router.post("/{resource}/refresh")
async def refresh_resource(resource: str, ctx: DataContext = Depends(get_context)):
    hook = await _mounted(_hook_for(resource, ctx), force=True)
    return _body(hook, ctx)
