import asyncio

import pytest

from ecplatform.i2c import (
    Access,
    BusCommand,
    BusError,
    HidServiceError,
    I2cSlave,
    PassthroughHost,
    run_interrupt_task,
    serve_host_once,
    wait_access,
)
from ecplatform.interrupt import InterruptSignal, InterruptState


class FakeBus(I2cSlave):
    def __init__(self, script):
        self.script = list(script)
        self.sent = []

    async def listen(self):
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def respond_to_write(self, size):
        return bytes(size)

    async def respond_to_read(self, data):
        self.sent.append(bytes(data))


class RecordingHost(PassthroughHost):
    def __init__(self, bus, fail_process=False, fail_send=False):
        super().__init__(bus)
        self.fail_process = fail_process
        self.fail_send = fail_send
        self.handled = []
        self.responses = 0

    async def process_request(self, access):
        if self.fail_process:
            raise HidServiceError("invalid register address")
        self.handled.append(access)

    async def send_response(self):
        if self.fail_send:
            raise HidServiceError("timeout")
        self.responses += 1
        await self.bus.respond_to_read(b"\x01\x02")


class RecordingInterrupt:
    def __init__(self):
        self.calls = []

    def deassert(self):
        self.calls.append("deassert")

    def release(self):
        self.calls.append("release")

    def reset(self):
        self.calls.append("reset")


@pytest.mark.asyncio
async def test_wait_access_skips_probes():
    bus = FakeBus([BusCommand.PROBE, BusCommand.PROBE, BusCommand.WRITE])
    assert await wait_access(bus) is Access.WRITE
    assert bus.script == []


@pytest.mark.asyncio
async def test_wait_access_read():
    assert await wait_access(FakeBus([BusCommand.READ])) is Access.READ


@pytest.mark.asyncio
async def test_wait_access_wraps_bus_failure():
    cause = OSError("nak")
    with pytest.raises(BusError) as info:
        await wait_access(FakeBus([cause]))
    assert info.value.cause is cause
    assert isinstance(info.value, HidServiceError)


@pytest.mark.asyncio
async def test_wait_access_passes_service_errors_through():
    error = HidServiceError("timeout")
    with pytest.raises(HidServiceError) as info:
        await wait_access(FakeBus([error]))
    assert info.value is error


def test_i2c_slave_is_abstract():
    with pytest.raises(TypeError):
        I2cSlave()


@pytest.mark.asyncio
async def test_serve_host_once_success_releases():
    bus = FakeBus([BusCommand.PROBE, BusCommand.READ])
    host = RecordingHost(bus)
    interrupt = RecordingInterrupt()
    assert await serve_host_once(host, interrupt) is None
    assert interrupt.calls == ["deassert", "release"]
    assert host.handled == [Access.READ]
    assert bus.sent == [b"\x01\x02"]


@pytest.mark.asyncio
async def test_serve_host_once_wait_failure_resets():
    host = RecordingHost(FakeBus([OSError("bus")]))
    interrupt = RecordingInterrupt()
    error = await serve_host_once(host, interrupt)
    assert isinstance(error, BusError)
    assert interrupt.calls == ["reset"]
    assert host.handled == []


@pytest.mark.asyncio
async def test_serve_host_once_process_failure_resets():
    host = RecordingHost(FakeBus([BusCommand.WRITE]), fail_process=True)
    interrupt = RecordingInterrupt()
    error = await serve_host_once(host, interrupt)
    assert str(error) == "invalid register address"
    assert interrupt.calls == ["deassert", "reset"]
    assert host.responses == 0


@pytest.mark.asyncio
async def test_serve_host_once_send_failure_resets():
    host = RecordingHost(FakeBus([BusCommand.WRITE]), fail_send=True)
    interrupt = RecordingInterrupt()
    error = await serve_host_once(host, interrupt)
    assert str(error) == "timeout"
    assert interrupt.calls == ["deassert", "reset"]
    assert host.handled == [Access.WRITE]


class AlwaysLow:
    async def wait_for_low(self):
        await asyncio.sleep(0)


class Output:
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
async def test_run_interrupt_task_counts_iterations():
    out = Output()
    sig = InterruptSignal(AlwaysLow(), out)
    task = asyncio.create_task(run_interrupt_task(sig, 2))
    for _ in range(2):
        await _until(lambda: sig.state is InterruptState.ASSERTED)
        sig.deassert()
        await _until(lambda: out.levels[-1] == "high")
        sig.release()
    assert await asyncio.wait_for(task, 1.0) == 2
    assert out.levels == ["low", "high", "low", "high"]