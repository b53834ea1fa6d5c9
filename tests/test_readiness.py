import asyncio

import pytest

from custom_components.vornado_oscr37.exceptions import InitializationTimeout
from custom_components.vornado_oscr37.readiness import ReadinessGate


@pytest.mark.asyncio
async def test_wait_ready_times_out_when_never_ready():
    gate = ReadinessGate()
    gate.report(False)
    with pytest.raises(InitializationTimeout):
        await gate.wait_ready(0.01)


@pytest.mark.asyncio
async def test_false_reports_do_not_release_waiters():
    gate = ReadinessGate()
    waiter = asyncio.ensure_future(gate.wait_ready(1.0))
    gate.report(False)
    gate.report(False)
    await asyncio.sleep(0)
    assert not waiter.done()
    assert gate.not_ready_reports == 2

    gate.report(True)
    await asyncio.wait_for(waiter, 1.0)
    assert gate.is_ready


@pytest.mark.asyncio
async def test_ready_is_terminal():
    gate = ReadinessGate()
    gate.report(True)
    gate.report(False)
    assert gate.is_ready
    assert gate.not_ready_reports == 0
    await gate.wait_ready(0)
