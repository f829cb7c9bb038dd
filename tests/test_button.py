import math
import time

import pytest

from ecplatform.button import Button, ButtonConfig, ButtonState
from ecplatform.debounce import ActiveState, Debouncer


class TimedPin:
    """Active-low pin held low for a while after creation."""

    def __init__(self, hold):
        self.release_at = time.monotonic() + hold

    def release(self):
        self.release_at = time.monotonic()

    def is_low(self):
        return time.monotonic() < self.release_at

    def is_high(self):
        return not self.is_low()


def fast_config(short, timeout):
    return ButtonConfig(Debouncer(1, 0.001, ActiveState.ACTIVE_LOW), short, timeout)


def test_default_config():
    config = ButtonConfig()
    assert config.short_press_threshold == pytest.approx(2.0)
    assert config.timeout == pytest.approx(5.0)
    assert config.debouncer.threshold == 3


def test_config_can_be_replaced():
    button = Button(TimedPin(0))
    config = fast_config(0.1, 0.2)
    button.config = config
    assert button.config is config
    assert button.config.timeout == pytest.approx(0.2)


@pytest.mark.asyncio
async def test_button_state_reports_press_with_time():
    button = Button(TimedPin(math.inf), fast_config(0.1, 0.2))
    before = time.monotonic()
    state = await button.get_button_state()
    after = time.monotonic()
    assert isinstance(state, ButtonState)
    assert state.pressed is True
    assert before <= state.instant <= after


@pytest.mark.asyncio
async def test_press_duration_tracks_hold():
    hold = 0.08
    config = fast_config(0.5, 1.0)
    button = Button(TimedPin(hold), config)
    duration = await button.get_press_duration()
    assert duration is not None
    assert 0 < duration <= hold + 0.1
    assert duration < config.timeout


@pytest.mark.asyncio
async def test_press_duration_capped_by_timeout_then_release_ignored():
    pin = TimedPin(math.inf)
    config = fast_config(0.02, 0.05)
    button = Button(pin, config)
    duration = await button.get_press_duration()
    assert duration >= config.timeout
    assert duration < config.timeout + 0.5

    pin.release()
    assert await button.get_press_duration() is None