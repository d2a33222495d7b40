"""Tests for the non-blocking :class:`ElapsedTimer`."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

timer_mod = importlib.import_module("buzzer_melody.timer")
ElapsedTimer = timer_mod.ElapsedTimer


class FakeClock:
    """Manually advanced microsecond counter."""

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


def test_fresh_timer_never_fires():
    """A timer that was never armed reports nothing."""

    clock = FakeClock()
    timer = ElapsedTimer(0, clock=clock)

    assert not timer.armed
    assert not timer.is_elapsed()


def test_fires_once_interval_has_passed():
    """The timer fires at the interval boundary and re-arms itself."""

    clock = FakeClock(5)
    timer = ElapsedTimer(clock=clock)
    timer.arm(1000)

    clock.now = 1004
    assert not timer.is_elapsed()
    clock.now = 1005
    assert timer.is_elapsed()
    # Reference moved to 1005, so the next fire needs another full interval.
    assert not timer.is_elapsed()
    clock.now = 2004
    assert not timer.is_elapsed()
    clock.now = 2005
    assert timer.is_elapsed()


def test_arm_without_value_reuses_interval():
    """``arm()`` keeps the interval given at construction."""

    clock = FakeClock()
    timer = ElapsedTimer(300, clock=clock)
    timer.arm()

    clock.now = 300
    assert timer.is_elapsed()
    assert timer.interval_us == 300


def test_disarm_blocks_until_next_arm():
    """A disarmed timer stays silent however much time passes."""

    clock = FakeClock()
    timer = ElapsedTimer(clock=clock)
    timer.arm(10)
    timer.disarm()

    clock.now = 10_000
    assert not timer.is_elapsed()

    timer.arm(10)
    clock.now = 10_010
    assert timer.is_elapsed()


def test_wraparound_of_32_bit_counter():
    """Elapsed time is correct when the counter overflows mid-interval."""

    period = 1 << 32
    clock = FakeClock(period - 500)
    timer = ElapsedTimer(clock=clock, counter_bits=32)
    timer.arm(1000)

    clock.now = period + 499
    assert not timer.is_elapsed()
    clock.now = period + 500
    assert timer.is_elapsed()


def test_update_interval_keeps_reference():
    """Changing the interval does not restart the measurement."""

    clock = FakeClock()
    timer = ElapsedTimer(clock=clock)
    timer.arm(1000)

    clock.now = 600
    assert not timer.is_elapsed()
    timer.update_interval(500)
    assert timer.is_elapsed()


def test_restart_moves_reference():
    """``restart`` measures the interval from the current time."""

    clock = FakeClock()
    timer = ElapsedTimer(clock=clock)
    timer.arm(100)

    clock.now = 90
    timer.restart()
    clock.now = 150
    assert not timer.is_elapsed()
    clock.now = 190
    assert timer.is_elapsed()


def test_negative_intervals_rejected():
    """Intervals cannot be negative."""

    timer = ElapsedTimer(clock=FakeClock())
    with pytest.raises(ValueError):
        timer.arm(-1)
    with pytest.raises(ValueError):
        timer.update_interval(-1)


def test_default_clock_is_monotonic():
    """The default clock returns non-decreasing microsecond values."""

    first = timer_mod.monotonic_us()
    second = timer_mod.monotonic_us()
    assert second >= first
