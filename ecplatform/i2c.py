"""HID over I2C passthrough: bus access types, errors and the host task loop."""

from __future__ import annotations

import abc
import enum
import logging
from typing import Optional

from .interrupt import InterruptSignal

_log = logging.getLogger(__name__)


class BusCommand(enum.Enum):
    """What the I2C controller did to us as a target."""

    PROBE = "probe"
    WRITE = "write"
    READ = "read"


class Access(enum.Enum):
    """A host access that needs serving."""

    READ = "read"
    WRITE = "write"


class HidServiceError(Exception):
    """The HID service failed to serve a request."""


class BusError(HidServiceError):
    """The underlying bus reported an error."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"bus error: {cause!r}")
        self.cause = cause


class I2cSlave(abc.ABC):
    """An I2C bus on which we are the target."""

    @abc.abstractmethod
    async def listen(self) -> BusCommand:
        """Wait for the controller to address us."""

    @abc.abstractmethod
    async def respond_to_write(self, size: int) -> bytes:
        """Accept up to size bytes written by the controller."""

    @abc.abstractmethod
    async def respond_to_read(self, data: bytes) -> None:
        """Supply data to a read by the controller."""


async def wait_access(bus: I2cSlave) -> Access:
    """Wait for a read or write from the host, skipping probes."""
    while True:
        _log.debug("Waiting for host")
        try:
            command = await bus.listen()
        except HidServiceError:
            raise
        except Exception as exc:
            _log.error("Bus error")
            raise BusError(exc) from exc
        if command is BusCommand.PROBE:
            continue
        return Access.READ if command is BusCommand.READ else Access.WRITE


class PassthroughHost(abc.ABC):
    """The host side of a passthrough: waits for, processes and answers requests."""

    def __init__(self, bus: I2cSlave) -> None:
        self.bus = bus

    async def wait_request(self) -> Access:
        """Wait for the host to access the bus."""
        return await wait_access(self.bus)

    @abc.abstractmethod
    async def process_request(self, access: Access) -> None:
        """Forward the host's request to the device."""

    @abc.abstractmethod
    async def send_response(self) -> None:
        """Return the device's response to the host."""


async def serve_host_once(host: PassthroughHost, int_signal: InterruptSignal) -> Optional[HidServiceError]:
    """Serve one host request, managing the interrupt line; return the error, if any."""
    try:
        access = await host.wait_request()
    except HidServiceError as exc:
        int_signal.reset()
        _log.error("Host error %s", exc)
        return exc

    # Deassert before processing so the host does not see a spurious interrupt.
    int_signal.deassert()

    try:
        await host.process_request(access)
        await host.send_response()
    except HidServiceError as exc:
        _log.error("Host error %s", exc)
        int_signal.reset()
        return exc

    int_signal.release()
    return None


async def run_interrupt_task(int_signal: InterruptSignal, iterations: Optional[int] = None) -> int:
    """Process interrupts forever, or for the given number; return how many were handled."""
    _log.info("Starting interrupt task")
    handled = 0
    while iterations is None or handled < iterations:
        await int_signal.process()
        handled += 1
    return handled