"""Non-blocking interval timer built on a wrapping microsecond counter.

:class:`ElapsedTimer` never sleeps. A caller arms it with an interval and
then asks :meth:`ElapsedTimer.is_elapsed` from its control loop; the timer
answers by comparing the current counter against the timestamp captured when
it was armed.

Hardware counters are fixed width and wrap around (a 32-bit microsecond
counter overflows after roughly 71 minutes). The elapsed time is therefore
computed with modular subtraction, ``(now - start) mod 2**bits``, which stays
correct across a single overflow as long as the interval is shorter than the
counter period.

Example
-------
>>> ticks = iter([0, 400, 1000])
>>> timer = ElapsedTimer(1000, clock=lambda: next(ticks))
>>> timer.arm()
>>> timer.is_elapsed()
False
>>> timer.is_elapsed()
True
"""

from __future__ import annotations

import time
from typing import Callable, Optional

__all__ = ["ElapsedTimer", "monotonic_us"]

# Default counter width. 64 bits never wraps in practice; 32 mirrors the
# microcontroller ``micros()`` counter and is what the tests exercise.
DEFAULT_COUNTER_BITS = 64


def monotonic_us() -> int:
    """Return the monotonic clock in whole microseconds."""

    return time.monotonic_ns() // 1000


class ElapsedTimer:
    """Track whether a configurable interval has passed since it was armed.

    Parameters
    ----------
    interval_us:
        Interval in microseconds used by :meth:`arm` when no explicit value is
        given.
    clock:
        Zero-argument callable returning the current counter value in
        microseconds. Defaults to :func:`monotonic_us`.
    counter_bits:
        Width of the counter; values returned by ``clock`` are reduced modulo
        ``2**counter_bits``.
    """

    def __init__(
        self,
        interval_us: int = 0,
        clock: Optional[Callable[[], int]] = None,
        *,
        counter_bits: int = DEFAULT_COUNTER_BITS,
    ) -> None:
        if counter_bits <= 0:
            raise ValueError("counter_bits must be positive")
        if interval_us < 0:
            raise ValueError("interval_us must be non-negative")
        self._clock = clock or monotonic_us
        self._mask = (1 << counter_bits) - 1
        self._interval = interval_us
        self._start = 0
        # A fresh timer is disarmed so it never fires before ``arm``.
        self._armed = False

    @property
    def interval_us(self) -> int:
        return self._interval

    @property
    def armed(self) -> bool:
        return self._armed

    def _now(self) -> int:
        return self._clock() & self._mask

    def arm(self, interval_us: Optional[int] = None) -> None:
        """Capture the current time and start measuring ``interval_us``."""

        if interval_us is not None:
            if interval_us < 0:
                raise ValueError("interval_us must be non-negative")
            self._interval = interval_us
        self._start = self._now()
        self._armed = True

    def is_elapsed(self) -> bool:
        """Return ``True`` once the interval has passed since arming.

        When the interval has passed the reference timestamp is moved to the
        current time, so the next ``True`` requires another full interval.
        A disarmed timer always returns ``False``.
        """

        if not self._armed:
            return False
        now = self._now()
        if (now - self._start) & self._mask >= self._interval:
            self._start = now
            return True
        return False

    def disarm(self) -> None:
        """Stop tracking time until the next :meth:`arm`."""

        self._armed = False

    def restart(self) -> None:
        """Move the reference timestamp to the current time."""

        self._start = self._now()

    def update_interval(self, interval_us: int) -> None:
        """Change the interval without touching the reference timestamp."""

        if interval_us < 0:
            raise ValueError("interval_us must be non-negative")
        self._interval = interval_us
