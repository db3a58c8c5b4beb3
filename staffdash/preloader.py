"""
staffdash/preloader.py
═══════════════════════════════════════════════════════════════════════════════
Global preloader. Warms the shared cache before the first dashboard request.

  1. ONE preload at a time (start while running → ignored)
  2. Every API is fetched concurrently; one failure never cancels the others
  3. completed counts every settled API, success or failure
  4. perApi[name] is True only for successes; failures go to errors
  5. Results land in the same cache the hooks read → later loads are hits
  6. No retry: a failed API stays failed until the next preload
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from staffdash.core.config import PRELOAD_APIS, PRELOAD_DELAY_S
from staffdash.core.context import DataContext, get_context
from staffdash.hooks.base import DataHook, HookStatus
from staffdash.hooks.registry import HOOKS

log = logging.getLogger("preloader")

Listener = Callable[[], None]


@dataclass
class PreloadStatus:
    per_api:       dict[str, bool] = field(default_factory=dict)
    completed:     int = 0
    total:         int = 0
    errors:        list[str] = field(default_factory=list)
    is_preloading: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for ok in self.per_api.values() if ok)

    @property
    def progress(self) -> int:
        return round(self.completed / self.total * 100) if self.total else 0

    @property
    def is_complete(self) -> bool:
        return not self.is_preloading and self.total > 0 and self.completed == self.total

    def as_dict(self) -> dict:
        return {
            "isPreloading":  self.is_preloading,
            "preloadStatus": dict(self.per_api),
            "completedApis": self.completed,
            "totalApis":     self.total,
            "succeededApis": self.succeeded,
            "errors":        list(self.errors),
            "progress":      self.progress,
            "isComplete":    self.is_complete,
        }


class GlobalPreloader:
    def __init__(
        self,
        ctx_factory: Callable[[], DataContext] = get_context,
        apis: Optional[list[str]] = None,
    ):
        self._ctx_factory = ctx_factory
        self.apis = list(PRELOAD_APIS if apis is None else apis)
        unknown = [a for a in self.apis if a not in HOOKS]
        if unknown:
            raise ValueError(f"Unknown preload APIs: {unknown}")
        self.status = self._fresh_status()
        self._listeners: set[Listener] = set()
        self._hooks: list[DataHook] = []
        self._task: Optional[asyncio.Task] = None

    def _fresh_status(self) -> PreloadStatus:
        return PreloadStatus(per_api={a: False for a in self.apis}, total=len(self.apis))

    # ── Listeners ─────────────────────────────────────────────────────────────

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        self._listeners.add(callback)
        return lambda: self._listeners.discard(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            try:
                cb()
            except Exception as ex:
                log.warning(f"Preload listener failed: {ex}")

    # ── Preload ───────────────────────────────────────────────────────────────

    def start_preload(self) -> Optional[asyncio.Task]:
        """Fire and forget. Returns the running task, or None if one is already running."""
        if self.status.is_preloading:
            log.info("Already preloading, ignoring start")
            return None
        status, hooks = self._begin()
        self._task = asyncio.ensure_future(self._run(status, hooks))
        return self._task

    async def preload_all(self) -> PreloadStatus:
        if self.status.is_preloading:
            log.info("Already preloading, ignoring start")
            return self.status
        status, hooks = self._begin()
        return await self._run(status, hooks)

    def _begin(self) -> tuple[PreloadStatus, list[DataHook]]:
        ctx = self._ctx_factory()
        status = self._fresh_status()
        status.is_preloading = True
        hooks = [HOOKS[name](ctx) for name in self.apis]
        self.status, self._hooks = status, hooks
        self._notify()
        log.info(f"Starting global preload of {status.total} APIs: {self.apis}")
        return status, hooks

    async def _run(self, status: PreloadStatus, hooks: list[DataHook]) -> PreloadStatus:
        # status/hooks belong to this run; after reset() they are no longer self's
        t0 = time.time()
        results = await asyncio.gather(
            *(self._preload_one(status, hook) for hook in hooks),
            return_exceptions=True,
        )
        for hook, res in zip(hooks, results):
            if isinstance(res, BaseException) and not isinstance(res, asyncio.CancelledError):
                log.error(f"Preload of {hook.name} crashed: {res!r}")

        status.is_preloading = False
        if self._hooks is hooks:
            self._hooks = []
        if self.status is status:
            self._notify()

        elapsed = time.time() - t0
        log.info(
            f"Global preload completed in {elapsed:.1f}s: "
            f"{status.succeeded}/{status.total} APIs loaded"
        )
        if status.errors:
            log.warning(f"Some APIs failed to preload: {status.errors}")
        return status

    async def _preload_one(self, status: PreloadStatus, hook: DataHook) -> None:
        log.debug(f"Loading {hook.name}...")
        try:
            state = await hook.load()
        except Exception as ex:
            self._record(status, hook.name, str(ex) or type(ex).__name__)
            raise
        if hook.is_closed and state.status is not HookStatus.SUCCESS:
            self._record(status, hook.name, "cancelled")
            return
        self._record(status, hook.name, state.error)

    def _record(self, status: PreloadStatus, name: str, error: Optional[str]) -> None:
        if error:
            log.error(f"Failed to preload {name}: {error}")
            status.errors.append(f"{name}: {error}")
        else:
            log.info(f"✅ {name} preloaded")
            status.per_api[name] = True
        status.completed += 1
        if self.status is status:
            self._notify()

    def cancel(self) -> None:
        """
        Stop waiting on every in-flight preload request. Each API still pending
        settles as "<name>: cancelled", so completed reaches total.
        """
        for hook in self._hooks:
            hook.close()

    def reset(self) -> None:
        """Discard status (navigation away). Running requests are cancelled."""
        self.cancel()
        self.status = self._fresh_status()
        self._notify()


_preloader: Optional[GlobalPreloader] = None


def get_preloader() -> GlobalPreloader:
    global _preloader
    if _preloader is None:
        _preloader = GlobalPreloader()
    return _preloader


async def auto_preload(delay_s: float = PRELOAD_DELAY_S) -> None:
    """Called once at startup. Small delay so the app finishes booting first."""
    await asyncio.sleep(delay_s)
    p = get_preloader()
    if p.status.is_preloading or p.status.is_complete:
        return
    log.info("Starting automatic preload...")
    try:
        await p.preload_all()
    except Exception as ex:
        log.error(f"Startup preload error: {ex}")
