import asyncio

import pytest

from custom_components.vornado_oscr37.cache import StatusCache
from custom_components.vornado_oscr37.exceptions import (
    InitializationTimeout,
    NoDeviceState,
    UpstreamQueryFailure,
)
from custom_components.vornado_oscr37.models import FanStatus


class _Upstream:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        await asyncio.sleep(0)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


ON = FanStatus(connected=True, is_on=True, fan_intensity="2", is_oscillating=False)


@pytest.mark.asyncio
async def test_concurrent_reads_share_one_fetch():
    upstream = _Upstream(ON)
    cache = StatusCache(upstream.fetch, throttle_window=0.01)

    results = await asyncio.gather(*(cache.current() for _ in range(5)))

    assert upstream.calls == 1
    assert all(r is results[0] for r in results)
    assert results[0] == ON
    assert not cache.is_pending


@pytest.mark.asyncio
async def test_refresh_requests_collapse_into_next_fetch():
    upstream = _Upstream(ON)
    cache = StatusCache(upstream.fetch, throttle_window=0.01)

    first = cache.request_refresh()
    second = cache.request_refresh()
    third = cache.request_refresh()
    assert first is second is third
    assert await first is ON
    assert upstream.calls == 1


@pytest.mark.asyncio
async def test_reads_after_resolution_trigger_a_new_fetch():
    upstream = _Upstream(ON, FanStatus(connected=True, is_on=False))
    cache = StatusCache(upstream.fetch, throttle_window=0)

    assert (await cache.current()).is_on is True
    assert (await cache.current()).is_on is False
    assert upstream.calls == 2
    assert cache.fetch_count == 2


@pytest.mark.asyncio
async def test_poll_reports_no_change_for_identical_state():
    upstream = _Upstream(ON, FanStatus(connected=False, is_on=True, fan_intensity="2", is_oscillating=False))
    cache = StatusCache(upstream.fetch, throttle_window=0)

    assert await cache.poll() == ON
    assert await cache.poll() is None


@pytest.mark.asyncio
async def test_reset_baseline_reports_unchanged_state_again():
    upstream = _Upstream(ON)
    cache = StatusCache(upstream.fetch, throttle_window=0)

    assert await cache.poll() == ON
    assert await cache.poll() is None

    cache.reset_baseline()
    assert await cache.poll() == ON
    assert await cache.poll() is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "changed",
    [
        FanStatus(connected=True, is_on=False, fan_intensity="2", is_oscillating=False),
        FanStatus(connected=True, is_on=True, fan_intensity="3", is_oscillating=False),
        FanStatus(connected=True, is_on=True, fan_intensity="2", is_oscillating=True),
    ],
)
async def test_poll_reports_changed_state(changed):
    upstream = _Upstream(ON, changed)
    cache = StatusCache(upstream.fetch, throttle_window=0)

    await cache.poll()
    assert await cache.poll() == changed


@pytest.mark.asyncio
async def test_query_failure_degrades_to_disconnected_then_recovers():
    upstream = _Upstream(UpstreamQueryFailure("boom"), ON)
    cache = StatusCache(upstream.fetch, throttle_window=0)

    degraded = await cache.current()
    assert degraded == FanStatus(connected=False)
    assert cache.failure_count == 1
    assert cache.last_error == "boom"

    assert await cache.current() == ON


@pytest.mark.asyncio
async def test_poll_treats_recovery_after_failure_as_change():
    upstream = _Upstream(UpstreamQueryFailure("boom"), ON)
    cache = StatusCache(upstream.fetch, throttle_window=0)

    assert await cache.poll() == FanStatus(connected=False)
    assert await cache.poll() == ON


@pytest.mark.asyncio
async def test_non_transport_errors_reach_every_waiter():
    upstream = _Upstream(NoDeviceState("none"))
    cache = StatusCache(upstream.fetch, throttle_window=0.01)

    results = await asyncio.gather(
        cache.current(), cache.current(), return_exceptions=True
    )
    assert all(isinstance(r, NoDeviceState) for r in results)
    assert upstream.calls == 1
    assert not cache.is_pending


@pytest.mark.asyncio
async def test_readiness_timeout_propagates_without_hanging():
    async def never_ready():
        raise InitializationTimeout("not ready")

    cache = StatusCache(never_ready, throttle_window=0)
    with pytest.raises(InitializationTimeout):
        await asyncio.wait_for(cache.current(), 1.0)


@pytest.mark.asyncio
async def test_unawaited_refresh_request_is_harmless():
    upstream = _Upstream(NoDeviceState("none"))
    cache = StatusCache(upstream.fetch, throttle_window=0)

    cache.request_refresh()
    await asyncio.sleep(0.01)
    assert upstream.calls == 1
    assert not cache.is_pending


@pytest.mark.asyncio
async def test_shutdown_cancels_pending_fetch():
    started = asyncio.Event()

    async def slow():
        started.set()
        await asyncio.sleep(10)
        return ON

    cache = StatusCache(slow, throttle_window=0)
    future = cache.request_refresh()
    await started.wait()
    await cache.async_shutdown()
    assert future.cancelled()
    assert not cache.is_pending
