"""
staffdash/hooks/base.py
═══════════════════════════════════════════════════════════════════════════════
DataHook: one per consumer (request, screen, preload slot).

State machine:   idle → loading → success | error
                  (success/error → loading again on refresh or stale read)

  load()     cache hit + fresh  → success, zero network calls
             miss or stale      → loading → GET → write-through → success
                                  join an in-flight request for the same key
                                  instead of issuing a second one
  refresh()  always a new GET, even when the cache is fresh
  close()    unmount: stop waiting; the upstream request is cancelled once
             no other hook is waiting on it

Failures never escape: they land in state.error and the cache is untouched.
No automatic retry: callers refresh() again.
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from staffdash.core.cache import CacheEntry, is_fresh
from staffdash.core.context import DataContext


class HookStatus(str, Enum):
    IDLE    = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR   = "error"


@dataclass
class HookState:
    data:       Any = None
    is_loading: bool = False
    error:      Optional[str] = None
    status:     HookStatus = HookStatus.IDLE
    fetched_at: Optional[float] = None

    def as_dict(self) -> dict:
        return {
            "data":      self.data,
            "isLoading": self.is_loading,
            "error":     self.error,
            "status":    self.status.value,
            "fetchedAt": self.fetched_at,
        }


class DataHook:
    name: str = ""
    path: str = ""

    def __init__(
        self,
        ctx: DataContext,
        *,
        ttl_s: Optional[float] = None,
        log: Optional[logging.Logger] = None,
    ):
        self._ctx    = ctx
        self.ttl_s   = ctx.ttl_s if ttl_s is None else ttl_s
        self.log     = log or logging.getLogger(f"hooks.{self.name}")
        self.state   = HookState()
        self._waiter: Optional[asyncio.Future] = None
        self._closed = False

    # ── Overridables ─────────────────────────────────────────────────────────

    def cache_key(self) -> str:
        return self.name

    def params(self) -> Optional[dict]:
        return None

    def transform(self, payload: Any) -> Any:
        return payload

    def extras(self) -> dict:
        """Derived fields served next to the state. Empty by default."""
        return {}

    # ── Public API ───────────────────────────────────────────────────────────

    async def load(self) -> HookState:
        if self._closed:
            return self.state
        key   = self.cache_key()
        cache = self._ctx.cache
        entry = cache.get(key)
        if entry is not None and is_fresh(entry, self.ttl_s, cache.now()):
            self.log.debug(f"[{key}] cache hit (age {cache.now() - entry.fetched_at:.1f}s)")
            return self._succeed(entry)

        task = self._ctx.inflight.get(key)
        if task is None:
            self.log.debug(f"[{key}] cache {'stale' if entry else 'miss'} → fetching")
            task = self._ctx.inflight.start(key, lambda: self._fetch(key))
        else:
            self.log.debug(f"[{key}] joining in-flight request")
        return await self._wait(key, task)

    async def refresh(self) -> HookState:
        if self._closed:
            return self.state
        key = self.cache_key()
        self.log.info(f"[{key}] forced refresh")
        task = self._ctx.inflight.start(key, lambda: self._fetch(key))
        return await self._wait(key, task)

    def close(self) -> None:
        self._closed = True
        if self._waiter is not None and not self._waiter.done():
            self._waiter.cancel()

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ── Internals ────────────────────────────────────────────────────────────

    async def _fetch(self, key: str) -> CacheEntry:
        cache = self._ctx.cache
        gen   = cache.next_generation(key)
        body  = await self._ctx.client.get_json(self.path, self.params())
        payload = self.transform(body)
        if not cache.set(key, payload, generation=gen):
            self.log.debug(f"[{key}] response #{gen} superseded by a newer request")
        return cache.get(key)

    async def _wait(self, key: str, task: asyncio.Task) -> HookState:
        if self._closed:
            return self.state
        self._set_loading(key)
        inflight = self._ctx.inflight
        inflight.acquire(task)
        self._waiter = asyncio.shield(task)
        try:
            entry = await self._waiter
        except asyncio.CancelledError:
            if not self._closed:
                raise
            self.log.debug(f"[{key}] closed while loading")
            self.state.is_loading = False
            self.state.status = HookStatus.IDLE
            return self.state
        except Exception as ex:
            return self._fail(key, ex)
        finally:
            self._waiter = None
            inflight.release(task)
        return self._succeed(entry)

    def _set_loading(self, key: str) -> None:
        self.state.is_loading = True
        self.state.error = None
        self.state.status = HookStatus.LOADING
        self.log.debug(f"[{key}] → loading")

    def _succeed(self, entry: CacheEntry) -> HookState:
        self.state = HookState(
            data=entry.payload,
            status=HookStatus.SUCCESS,
            fetched_at=entry.fetched_at,
        )
        self.log.debug(f"[{entry.key}] → success")
        return self.state

    def _fail(self, key: str, ex: Exception) -> HookState:
        msg = str(ex) or type(ex).__name__
        self.state.is_loading = False
        self.state.error = msg
        self.state.status = HookStatus.ERROR
        self.log.error(f"[{key}] → error: {msg}")
        return self.state
