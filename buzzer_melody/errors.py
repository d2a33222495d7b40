"""Exception types shared across Buzzer Melody components.

The builder never raises these directly; it records the first failure as its
status so fluent call chains keep working. Stand-alone helpers such as
:func:`buzzer_melody.durations.to_ms` and :func:`buzzer_melody.utils.parse_score`
raise them so callers get a precise reason.
"""

from __future__ import annotations

__all__ = [
    "MelodyError",
    "InvalidArgument",
    "InvalidConversion",
    "CapacityExceeded",
    "SignalGeneratorError",
]


class MelodyError(ValueError):
    """Base class for melody compilation failures."""


class InvalidArgument(MelodyError):
    """Raised when a tempo, gap, duration or frequency is out of range."""


class InvalidConversion(InvalidArgument):
    """Raised when a notated duration cannot be converted to milliseconds.

    This happens when either the duration denominator or the tempo is zero so
    the formula has no meaningful result.
    """


class CapacityExceeded(MelodyError):
    """Raised (or recorded) when a step buffer has no room left."""


class SignalGeneratorError(RuntimeError):
    """Raised when a signal generator backend cannot be initialised."""
