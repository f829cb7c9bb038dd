"""A debounced push button that measures how long it was held."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from .debounce import Debouncer

_RELEASE_POLL = 0.010


def _now() -> float:
    return time.monotonic()


@dataclass(frozen=True)
class ButtonState:
    """Debounced button state and the monotonic time it was observed."""

    pressed: bool
    instant: float


@dataclass
class ButtonConfig:
    """Debouncer and timing thresholds of a button, in seconds."""

    debouncer: Debouncer = field(default_factory=Debouncer)
    short_press_threshold: float = 2.0
    timeout: float = 5.0


class Button:
    """A button on an input pin, read through its configured debouncer."""

    def __init__(self, gpio: Any, config: Optional[ButtonConfig] = None) -> None:
        self.gpio = gpio
        self.config = config if config is not None else ButtonConfig()

    async def get_button_state(self) -> ButtonState:
        """Wait for the debounced state to change and return it."""
        pressed = await self.config.debouncer.debounce(self.gpio)
        return ButtonState(pressed, _now())

    async def get_press_duration(self) -> Optional[float]:
        """Seconds the button was held, capped near the timeout; None if it was a release."""
        state = await self.get_button_state()
        if not state.pressed:
            return None

        start = _now()

        async def released() -> float:
            while (await self.get_button_state()).pressed:
                await asyncio.sleep(_RELEASE_POLL)
            return _now()

        try:
            end = await asyncio.wait_for(released(), self.config.timeout)
        except asyncio.TimeoutError:
            end = _now()
        return end - start