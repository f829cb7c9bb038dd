"""Passes a device interrupt through to the host, held off while a request is served."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Generic, Optional, Protocol, TypeVar

_log = logging.getLogger(__name__)

T = TypeVar("T")
_EMPTY: Any = object()


class Signal(Generic[T]):
    """Single-slot notification: the latest signalled value is handed to one waiter."""

    def __init__(self) -> None:
        self._value: Any = _EMPTY
        self._event: Optional[asyncio.Event] = None

    def _get_event(self) -> asyncio.Event:
        if self._event is None:
            self._event = asyncio.Event()
        return self._event

    def signal(self, value: T = None) -> None:  # type: ignore[assignment]
        """Store value, replacing any unread one, and wake the waiter."""
        self._value = value
        self._get_event().set()

    async def wait(self) -> T:
        """Wait for a value and take it, leaving the signal empty."""
        event = self._get_event()
        while self._value is _EMPTY:
            event.clear()
            await event.wait()
        value = self._value
        self._value = _EMPTY
        event.clear()
        return value

    def signaled(self) -> bool:
        """Whether a value is waiting to be taken."""
        return self._value is not _EMPTY


class _InterruptInput(Protocol):
    async def wait_for_low(self) -> None: ...


class _InterruptOutput(Protocol):
    def set_low(self) -> None: ...

    def set_high(self) -> None: ...


class InterruptState(enum.Enum):
    IDLE = "idle"
    ASSERTED = "asserted"
    WAITING = "waiting"
    RESET = "reset"


class InterruptSignal:
    """Mirrors a device interrupt line onto the host interrupt line.

    A device interrupt asserts the host line. The line is deasserted when the
    host makes a request, and further device interrupts are ignored until the
    response has been sent and the signal released.
    """

    def __init__(self, int_in: _InterruptInput, int_out: _InterruptOutput) -> None:
        self.int_in = int_in
        self.int_out = int_out
        self._state = InterruptState.IDLE
        self._signal: Signal[None] = Signal()

    @property
    def state(self) -> InterruptState:
        return self._state

    def deassert(self) -> None:
        """Deassert the host interrupt if it is asserted."""
        if self._state is InterruptState.ASSERTED:
            self._state = InterruptState.WAITING
            self._signal.signal(None)

    def release(self) -> None:
        """Let device interrupts through again after a deassert."""
        if self._state is InterruptState.WAITING:
            self._state = InterruptState.IDLE
            self._signal.signal(None)

    def reset(self) -> None:
        """Deassert and release in one step."""
        self._state = InterruptState.RESET
        self._signal.signal(None)

    async def process(self) -> None:
        """Handle one device interrupt from assertion through release."""
        _log.debug("Waiting for interrupt")
        await self.int_in.wait_for_low()

        self.int_out.set_low()
        self._state = InterruptState.ASSERTED
        _log.debug("Interrupt received")

        await self._signal.wait()
        self.int_out.set_high()
        _log.debug("Interrupt deasserted")

        if self._state is InterruptState.RESET:
            self._state = InterruptState.IDLE
            return

        await self._signal.wait()
        self._state = InterruptState.IDLE
        _log.debug("Interrupt cleared")