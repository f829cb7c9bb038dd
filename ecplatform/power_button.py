"""Power button demo: button presses toggle red, green and blue LEDs."""

from __future__ import annotations

import argparse
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .button import Button, ButtonConfig
from .button_interpreter import Message, check_button_press
from .debounce import ActiveState, Debouncer

_log = logging.getLogger(__name__)


@dataclass
class Led:
    """An LED that starts off."""

    name: str
    lit: bool = False

    def toggle(self) -> bool:
        """Flip the LED and return its new state."""
        self.lit = not self.lit
        return self.lit


class LedPanel:
    """Red, green and blue LEDs driven by button messages."""

    def __init__(self) -> None:
        self.red = Led("red")
        self.green = Led("green")
        self.blue = Led("blue")

    def handle(self, message: Message) -> Led:
        """Toggle the LED for the message: short green, long blue, hold red."""
        led = {
            Message.SHORT_PRESS: self.green,
            Message.LONG_PRESS: self.blue,
            Message.PRESS_AND_HOLD: self.red,
        }[message]
        led.toggle()
        return led


async def button_task(
    button: Button, queue: "asyncio.Queue[Message]", presses: Optional[int] = None
) -> List[Message]:
    """Forward classified presses to the queue; stop after `presses` messages if given."""
    sent: List[Message] = []
    while presses is None or len(sent) < presses:
        message = await check_button_press(button)
        if message is None:
            continue
        _log.info(message.value)
        await queue.put(message)
        sent.append(message)
    return sent


async def led_task(
    queue: "asyncio.Queue[Message]", panel: LedPanel, count: Optional[int] = None
) -> List[Message]:
    """Apply queued messages to the panel; stop after `count` messages if given."""
    handled: List[Message] = []
    while count is None or len(handled) < count:
        message = await queue.get()
        panel.handle(message)
        handled.append(message)
    return handled


class _ScriptedPin:
    """Active-low input pulled up, held low during scripted press windows."""

    def __init__(self, presses: Sequence[float], gap: float) -> None:
        start = time.monotonic() + gap
        self._windows = []
        for duration in presses:
            self._windows.append((start, start + duration))
            start += duration + gap

    def is_low(self) -> bool:
        now = time.monotonic()
        return any(begin <= now < end for begin, end in self._windows)

    def is_high(self) -> bool:
        return not self.is_low()


async def _demo(presses_ms: Sequence[int]) -> List[Message]:
    debouncer = Debouncer(3, 0.010, ActiveState.ACTIVE_LOW)
    config = ButtonConfig(debouncer, 1.0, 2.0)
    button = Button(_ScriptedPin([ms / 1000 for ms in presses_ms], 0.1), config)
    panel = LedPanel()
    queue: "asyncio.Queue[Message]" = asyncio.Queue()
    sent, _ = await asyncio.gather(
        button_task(button, queue, len(presses_ms)),
        led_task(queue, panel, len(presses_ms)),
    )
    for message in sent:
        print(message.value)
    for led in (panel.red, panel.green, panel.blue):
        print(f"{led.name}: {'on' if led.lit else 'off'}")
    return sent


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Simulate presses of the given lengths in milliseconds and show the LEDs."""
    parser = argparse.ArgumentParser(description="Simulate power button presses.")
    parser.add_argument("presses", nargs="*", type=int, default=[200, 1300, 2500], help="press lengths in ms")
    args = parser.parse_args(argv)
    if any(ms <= 0 for ms in args.presses):
        parser.error("press lengths must be positive")
    asyncio.run(_demo(args.presses))
    return 0