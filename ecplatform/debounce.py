"""Integrating debouncer for a push button on a digital input."""

from __future__ import annotations

import asyncio
import enum
from typing import Protocol


class _InputPin(Protocol):
    def is_low(self) -> bool: ...

    def is_high(self) -> bool: ...


class ActiveState(enum.Enum):
    """Which input level means the button is pressed."""

    ACTIVE_LOW = "active_low"
    ACTIVE_HIGH = "active_high"


class Debouncer:
    """Debounces a button by integrating samples up to a threshold.

    The defaults are a threshold of 3, a 10 ms sampling interval and active low.
    """

    def __init__(
        self,
        threshold: int = 3,
        sample_interval: float = 0.010,
        active_state: ActiveState = ActiveState.ACTIVE_LOW,
    ) -> None:
        if not 0 <= threshold <= 0xFF:
            raise ValueError(f"threshold must fit in 8 bits, not {threshold}")
        if sample_interval < 0:
            raise ValueError("sample interval must not be negative")
        self.threshold = threshold
        self.sample_interval = sample_interval
        self.active_state = active_state
        self.integrator = 0
        self.pressed = False

    def _sample(self, pin: _InputPin) -> bool:
        try:
            if self.active_state is ActiveState.ACTIVE_LOW:
                return bool(pin.is_low())
            return bool(pin.is_high())
        except Exception:
            # A pin that cannot be read counts as not pressed.
            return False

    async def debounce(self, pin: _InputPin) -> bool:
        """Sample until the debounced state changes; return True on press, False on release."""
        while True:
            if self._sample(pin):
                if self.integrator < self.threshold:
                    self.integrator += 1
            elif self.integrator > 0:
                self.integrator -= 1

            if self.integrator >= self.threshold and not self.pressed:
                self.pressed = True
                return True
            if self.integrator == 0 and self.pressed:
                self.pressed = False
                return False

            await asyncio.sleep(self.sample_interval)