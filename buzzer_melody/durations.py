"""Notated note durations and their conversion to milliseconds.

Durations are written as denominators relative to a whole note, so a quarter
note is ``4`` and an eighth note ``8``. How long that lasts depends on the
tempo. With the beat being a quarter note:

* one beat lasts ``60000 / bpm`` milliseconds;
* a note of denominator ``d`` lasts ``4 / d`` beats.

Combining both gives ``ms = 240000 / (bpm * d)``. At 120 bpm a quarter note
is 500 ms, a half note 1000 ms and a whole note 2000 ms.

Example
-------
>>> to_ms(QUARTER, 120)
500
"""

from __future__ import annotations

import logging

from .errors import InvalidArgument, InvalidConversion

__all__ = [
    "WHOLE",
    "HALF",
    "QUARTER",
    "EIGHTH",
    "SIXTEENTH",
    "THIRTY_SECOND",
    "DURATION_NAMES",
    "MAX_DURATION_DENOMINATOR",
    "MAX_TEMPO",
    "to_ms",
]

logger = logging.getLogger(__name__)

WHOLE = 1
HALF = 2
QUARTER = 4
EIGHTH = 8
SIXTEENTH = 16
THIRTY_SECOND = 32

DURATION_NAMES = {
    "whole": WHOLE,
    "half": HALF,
    "quarter": QUARTER,
    "eighth": EIGHTH,
    "sixteenth": SIXTEENTH,
    "thirty_second": THIRTY_SECOND,
}

# Denominators are stored in 8 bits and tempos in 16 bits.
MAX_DURATION_DENOMINATOR = 0xFF
MAX_TEMPO = 0xFFFF

# 60000 ms per minute times 4 quarter-note beats per whole note.
_MS_PER_WHOLE_NOTE_AT_1_BPM = 60000 * 4


def to_ms(duration: int, bpm: int) -> int:
    """Return the length in milliseconds of a ``duration`` note at ``bpm``.

    Parameters
    ----------
    duration:
        Notated denominator (``1`` whole, ``4`` quarter, ...), ``1-255``.
    bpm:
        Tempo in quarter-note beats per minute, ``1-65535``.

    Returns
    -------
    int
        Floor of ``240000 / (bpm * duration)``, never less than ``1`` so no
        zero-length step is produced at very high tempos.

    Raises
    ------
    InvalidConversion
        If ``duration`` or ``bpm`` is zero.
    InvalidArgument
        If either value is negative, not an integer or too large.
    """

    for name, value, limit in (
        ("duration", duration, MAX_DURATION_DENOMINATOR),
        ("bpm", bpm, MAX_TEMPO),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgument(f"{name} must be an integer, got {value!r}")
        if value == 0:
            raise InvalidConversion(f"{name} must be non-zero to compute a duration")
        if not 0 < value <= limit:
            raise InvalidArgument(f"{name} {value} outside 1-{limit}")

    note_ms = _MS_PER_WHOLE_NOTE_AT_1_BPM // (bpm * duration)
    # Floor at 1 ms: very fast tempos with short notes would otherwise round
    # down to a step that never sounds.
    if note_ms == 0:
        note_ms = 1

    logger.debug("to_ms bpm=%d duration=%d -> %d", bpm, duration, note_ms)
    return note_ms
