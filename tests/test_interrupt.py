import asyncio

import pytest

from ecplatform.interrupt import InterruptSignal, InterruptState, Signal


class FakeInput:
    def __init__(self):
        self.low = asyncio.Event()

    async def wait_for_low(self):
        await self.low.wait()


class FakeOutput:
    def __init__(self):
        self.levels = []

    def set_low(self):
        self.levels.append("low")

    def set_high(self):
        self.levels.append("high")


async def _until(predicate):
    async def poll():
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(poll(), 1.0)


@pytest.mark.asyncio
async def test_signal_hands_over_value_once():
    signal = Signal()
    signal.signal(5)
    assert signal.signaled()
    assert await signal.wait() == 5
    assert not signal.signaled()


@pytest.mark.asyncio
async def test_signal_latest_value_wins():
    signal = Signal()
    signal.signal(1)
    signal.signal(2)
    assert await signal.wait() == 2


@pytest.mark.asyncio
async def test_signal_wait_blocks_until_signalled():
    signal = Signal()
    task = asyncio.create_task(signal.wait())
    await asyncio.sleep(0)
    assert not task.done()
    signal.signal("x")
    assert await asyncio.wait_for(task, 1.0) == "x"


@pytest.mark.asyncio
async def test_full_cycle_deassert_then_release():
    inp, out = FakeInput(), FakeOutput()
    sig = InterruptSignal(inp, out)
    task = asyncio.create_task(sig.process())
    await asyncio.sleep(0)
    assert sig.state is InterruptState.IDLE
    assert out.levels == []

    inp.low.set()
    await _until(lambda: sig.state is InterruptState.ASSERTED)
    assert out.levels == ["low"]

    sig.deassert()
    assert sig.state is InterruptState.WAITING
    await _until(lambda: out.levels[-1] == "high")
    assert not task.done()

    sig.release()
    await asyncio.wait_for(task, 1.0)
    assert sig.state is InterruptState.IDLE
    assert out.levels == ["low", "high"]


@pytest.mark.asyncio
async def test_reset_while_asserted_finishes_process():
    inp, out = FakeInput(), FakeOutput()
    sig = InterruptSignal(inp, out)
    inp.low.set()
    task = asyncio.create_task(sig.process())
    await _until(lambda: sig.state is InterruptState.ASSERTED)
    sig.reset()
    await asyncio.wait_for(task, 1.0)
    assert sig.state is InterruptState.IDLE
    assert out.levels == ["low", "high"]


@pytest.mark.asyncio
async def test_reset_while_waiting_finishes_process():
    inp, out = FakeInput(), FakeOutput()
    sig = InterruptSignal(inp, out)
    inp.low.set()
    task = asyncio.create_task(sig.process())
    await _until(lambda: sig.state is InterruptState.ASSERTED)
    sig.deassert()
    await _until(lambda: out.levels[-1] == "high")
    sig.reset()
    await asyncio.wait_for(task, 1.0)
    assert sig.state is InterruptState.IDLE


@pytest.mark.asyncio
async def test_deassert_and_release_ignored_when_idle():
    sig = InterruptSignal(FakeInput(), FakeOutput())
    sig.deassert()
    assert sig.state is InterruptState.IDLE
    sig.release()
    assert sig.state is InterruptState.IDLE


@pytest.mark.asyncio
async def test_release_ignored_while_asserted():
    inp, out = FakeInput(), FakeOutput()
    sig = InterruptSignal(inp, out)
    inp.low.set()
    task = asyncio.create_task(sig.process())
    await _until(lambda: sig.state is InterruptState.ASSERTED)
    sig.release()
    assert sig.state is InterruptState.ASSERTED
    assert out.levels == ["low"]
    sig.reset()
    await asyncio.wait_for(task, 1.0)