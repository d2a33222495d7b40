"""Helpers for writing scores as text and validating user input.

Scores can be typed on the command line or stored in settings as a
whitespace or comma separated list of ``PITCH/DURATION`` tokens. ``PITCH`` is
a note name (``G5``, ``C#4``, ``Bb3``), ``R``/``REST`` for silence, or a
frequency in Hz. ``DURATION`` is the notated denominator or one of the names
in :data:`~buzzer_melody.durations.DURATION_NAMES`.

Usage Example
-------------
>>> parse_score("G5/4 R/8 784/quarter")
[ScoreNote(frequency_hz=784, duration=4), ScoreNote(frequency_hz=0, duration=8), ScoreNote(frequency_hz=784, duration=4)]
>>> validate_tempo(120)
120
"""

from __future__ import annotations

import re
from typing import List

from .core import MAX_FREQUENCY_HZ, MelodyContext, ScoreNote
from .durations import DURATION_NAMES, MAX_DURATION_DENOMINATOR
from .errors import InvalidArgument
from .note_utils import note_to_hz

__all__ = ["parse_score", "parse_score_token", "validate_tempo", "validate_gap"]

_TOKEN_SPLIT = re.compile(r"[\s,]+")


def _parse_pitch(pitch: str) -> int:
    if pitch.isdigit():
        hz = int(pitch)
        if hz > MAX_FREQUENCY_HZ:
            raise InvalidArgument(f"frequency {hz} outside 0-{MAX_FREQUENCY_HZ} Hz")
        return hz
    return note_to_hz(pitch)


def _parse_duration(duration: str) -> int:
    name = duration.strip().lower()
    if name in DURATION_NAMES:
        return DURATION_NAMES[name]
    if not name.isdigit():
        raise InvalidArgument(f"Invalid duration: {duration}")
    value = int(name)
    if not 1 <= value <= MAX_DURATION_DENOMINATOR:
        raise InvalidArgument(
            f"duration {value} outside 1-{MAX_DURATION_DENOMINATOR}"
        )
    return value


def parse_score_token(token: str) -> ScoreNote:
    """Parse a single ``PITCH/DURATION`` token."""

    pitch, sep, duration = token.partition("/")
    if not sep or not pitch or not duration:
        raise InvalidArgument(f"Score token must look like PITCH/DURATION: {token!r}")
    return ScoreNote(_parse_pitch(pitch), _parse_duration(duration))


def parse_score(text: str) -> List[ScoreNote]:
    """Parse a whole score written as text.

    Raises
    ------
    InvalidArgument
        If the text is empty or any token is malformed.
    """

    tokens = [tok for tok in _TOKEN_SPLIT.split(text.strip()) if tok]
    if not tokens:
        raise InvalidArgument("score is empty")
    return [parse_score_token(tok) for tok in tokens]


def validate_tempo(bpm: int) -> int:
    """Return ``bpm`` when it lies in the builder's accepted range."""

    if not MelodyContext.MIN_BPM <= bpm <= MelodyContext.MAX_BPM:
        raise InvalidArgument(
            f"tempo {bpm} outside {MelodyContext.MIN_BPM}-{MelodyContext.MAX_BPM} bpm"
        )
    return bpm


def validate_gap(gap_ms: int) -> int:
    """Return ``gap_ms`` when it lies in ``0-1000``."""

    if not 0 <= gap_ms <= MelodyContext.MAX_GAP_MS:
        raise InvalidArgument(f"gap {gap_ms} outside 0-{MelodyContext.MAX_GAP_MS} ms")
    return gap_ms
