"""
staffdash/routers/preload.py
Endpoints:
  GET  /preload  → current preload status
  POST /preload  → start a preload (no-op while one is running)
"""

from fastapi import APIRouter, Depends

from staffdash.preloader import GlobalPreloader, get_preloader

router = APIRouter(prefix="/preload", tags=["preload"])


@router.get("")
async def preload_status(p: GlobalPreloader = Depends(get_preloader)):
    return p.status.as_dict()


@router.post("", status_code=202)
async def start_preload(p: GlobalPreloader = Depends(get_preloader)):
    started = p.start_preload() is not None
    return {"started": started, **p.status.as_dict()}
