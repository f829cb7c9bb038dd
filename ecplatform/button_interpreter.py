"""Turns measured button presses into short, long and press-and-hold messages."""

from __future__ import annotations

import enum
from typing import Optional

from .button import Button, ButtonConfig


class Message(enum.Enum):
    """Kinds of button press."""

    LONG_PRESS = "Long press"
    SHORT_PRESS = "Short press"
    PRESS_AND_HOLD = "Press and hold"


def _millis(seconds: float) -> int:
    return int(round(seconds * 1_000_000)) // 1000


def classify_press(duration: float, config: ButtonConfig) -> Message:
    """Classify a press duration against a config, comparing whole milliseconds."""
    held = _millis(duration)
    if held >= _millis(config.timeout):
        return Message.PRESS_AND_HOLD
    if held >= _millis(config.short_press_threshold):
        return Message.LONG_PRESS
    return Message.SHORT_PRESS


async def check_button_press(button: Button) -> Optional[Message]:
    """Wait for a press and classify it; None for a release after a timed-out hold."""
    duration = await button.get_press_duration()
    if duration is None:
        return None
    return classify_press(duration, button.config)