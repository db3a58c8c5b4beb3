import asyncio

import httpx
import pytest

from staffdash.hooks.chart import ChartHook
from staffdash.hooks.staff import StaffHook
from staffdash.preloader import GlobalPreloader, PreloadStatus


def _all_ok(upstream):
    upstream.ok("/api/dashboard", {"yesterday": {"TTC": 100, "HT": 80}})
    upstream.ok("/api/turnover", [{"HT": 1, "TTC": 1.2}])
    upstream.ok("/api/staff", [{"_id": "1"}])
    upstream.ok("/api/cash-entry", [])


@pytest.fixture
def preloader(ctx):
    return GlobalPreloader(lambda: ctx)


@pytest.mark.asyncio
async def test_all_apis_loaded(preloader, upstream, ctx):
    _all_ok(upstream)
    status = await preloader.preload_all()

    assert status.completed == status.total == 4
    assert status.succeeded == 4
    assert status.errors == []
    assert status.per_api == {"dashboard": True, "chart": True, "staff": True, "cash_entries": True}
    assert not status.is_preloading
    assert status.is_complete
    assert status.progress == 100
    for key in ("dashboard", "chart", "staff", "cash_entries"):
        assert ctx.cache.has(key)


@pytest.mark.asyncio
async def test_failures_are_collected_not_fatal(preloader, upstream):
    _all_ok(upstream)
    upstream.reply("/api/staff", 500, {})
    upstream.fail("/api/turnover", httpx.ConnectError("refused"))

    status = await preloader.preload_all()

    assert status.completed == 4
    assert status.succeeded == 2
    assert status.per_api["staff"] is False
    assert status.per_api["chart"] is False
    assert status.per_api["dashboard"] is True
    assert sorted(e.split(":")[0] for e in status.errors) == ["chart", "staff"]
    assert "staff: HTTP error! status: 500" in status.errors


@pytest.mark.asyncio
async def test_requests_run_concurrently(preloader, upstream):
    _all_ok(upstream)
    gates = [upstream.gate(p) for p in ("/api/dashboard", "/api/turnover", "/api/staff", "/api/cash-entry")]

    task = preloader.start_preload()
    for _ in range(10):
        await asyncio.sleep(0)
    # every request is on the wire before any has answered
    assert len(upstream.calls) == 4
    assert preloader.status.is_preloading
    assert preloader.status.completed == 0

    for g in gates:
        g.set()
    await task
    assert preloader.status.completed == 4


@pytest.mark.asyncio
async def test_hooks_hit_preloaded_cache(preloader, upstream, ctx):
    _all_ok(upstream)
    await preloader.preload_all()
    before = len(upstream.calls)

    await StaffHook(ctx).load()
    await ChartHook(ctx).load()
    assert len(upstream.calls) == before


@pytest.mark.asyncio
async def test_second_start_while_running_is_ignored(preloader, upstream):
    _all_ok(upstream)
    gate = upstream.gate("/api/dashboard")

    first = preloader.start_preload()
    assert first is not None
    assert preloader.status.is_preloading
    assert preloader.start_preload() is None

    gate.set()
    await first
    assert upstream.count("/api/dashboard") == 1


@pytest.mark.asyncio
async def test_listeners_notified(preloader, upstream):
    _all_ok(upstream)
    seen = []
    unsubscribe = preloader.subscribe(lambda: seen.append(preloader.status.completed))

    await preloader.preload_all()
    # start, one per API, finish
    assert seen == [0, 1, 2, 3, 4, 4]

    unsubscribe()
    await preloader.preload_all()
    assert len(seen) == 6


@pytest.mark.asyncio
async def test_reset_discards_status_and_stops_waiting(preloader, upstream, ctx):
    _all_ok(upstream)
    upstream.gate("/api/staff")

    task = preloader.start_preload()
    for _ in range(10):
        await asyncio.sleep(0)
    preloader.reset()
    await task

    assert preloader.status.completed == 0
    assert not preloader.status.is_preloading
    assert not ctx.cache.has("staff")


def test_unknown_api_rejected(ctx):
    with pytest.raises(ValueError):
        GlobalPreloader(lambda: ctx, apis=["dashboard", "payroll"])


def test_status_dict_shape():
    status = PreloadStatus(per_api={"staff": True, "chart": False}, completed=2, total=2,
                           errors=["chart: boom"])
    assert status.as_dict() == {
        "isPreloading":  False,
        "preloadStatus": {"staff": True, "chart": False},
        "completedApis": 2,
        "totalApis":     2,
        "succeededApis": 1,
        "errors":        ["chart: boom"],
        "progress":      100,
        "isComplete":    True,
    }


@pytest.mark.asyncio
async def test_restart_after_reset_is_not_disturbed_by_old_run(preloader, upstream, ctx):
    _all_ok(upstream)
    old_gate = upstream.gate("/api/staff")

    old = preloader.start_preload()
    for _ in range(10):
        await asyncio.sleep(0)
    preloader.reset()
    new_gate = upstream.gate("/api/staff")
    new = preloader.start_preload()
    assert new is not None
    old_gate.set()
    await old
    for _ in range(10):
        await asyncio.sleep(0)

    # the new run still owns the status and is still waiting on staff
    assert preloader.status.is_preloading
    assert preloader.start_preload() is None
    assert preloader.status.completed == 3

    new_gate.set()
    status = await new
    assert status is preloader.status
    assert status.completed == status.succeeded == 4
    assert not status.is_preloading


@pytest.mark.asyncio
async def test_restarted_run_can_still_be_cancelled(preloader, upstream):
    _all_ok(upstream)
    upstream.gate("/api/staff")

    old = preloader.start_preload()
    for _ in range(10):
        await asyncio.sleep(0)
    preloader.reset()
    new = preloader.start_preload()
    await old
    for _ in range(10):
        await asyncio.sleep(0)

    preloader.cancel()
    status = await new
    assert "staff: cancelled" in status.errors


@pytest.mark.asyncio
async def test_cancel_settles_pending_apis_as_cancelled(preloader, upstream):
    _all_ok(upstream)
    upstream.gate("/api/staff")

    task = preloader.start_preload()
    for _ in range(10):
        await asyncio.sleep(0)
    preloader.cancel()
    status = await task

    assert status.completed == status.total == 4
    assert status.succeeded == 3
    assert status.per_api["staff"] is False
    assert status.errors == ["staff: cancelled"]
    assert not status.is_preloading
