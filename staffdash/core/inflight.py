"""
staffdash/core/inflight.py
Per-key registry of in-flight upstream requests.
  • Two concurrent cache misses on the same key share one request
  • A forced refresh replaces the registered task with its own
  • Waiters are counted per task: when the last waiter leaves (hook closed,
    caller cancelled) an unfinished request is cancelled
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional


class InflightRegistry:
    def __init__(self):
        self._tasks:   dict[str, asyncio.Task] = {}
        self._waiters: dict[asyncio.Task, int] = {}

    def get(self, key: str) -> Optional[asyncio.Task]:
        task = self._tasks.get(key)
        if task is not None and task.done():
            return None
        return task

    def start(self, key: str, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        task = asyncio.ensure_future(factory())
        self._tasks[key] = task
        task.add_done_callback(lambda t, k=key: self._discard(k, t))
        return task

    def acquire(self, task: asyncio.Task) -> None:
        self._waiters[task] = self._waiters.get(task, 0) + 1

    def release(self, task: asyncio.Task) -> None:
        left = self._waiters.get(task, 0) - 1
        if left > 0:
            self._waiters[task] = left
            return
        self._waiters.pop(task, None)
        if not task.done():
            # unregister now: cancellation only lands on the next loop turn
            for key in [k for k, t in self._tasks.items() if t is task]:
                del self._tasks[key]
            task.cancel()

    def _discard(self, key: str, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    def __len__(self) -> int:
        return sum(1 for t in self._tasks.values() if not t.done())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
