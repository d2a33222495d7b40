"""Conversions between note names, MIDI numbers and frequencies.

Scores handed to :class:`~buzzer_melody.builder.MelodyBuilder` carry
frequencies in whole Hertz because that is what the signal generator takes.
These helpers let callers write ``"G5"`` instead of ``784``.

Example
-------
>>> note_to_hz("A4")
440
>>> note_to_hz("C4")
262
>>> note_to_hz("rest")
0
"""

from __future__ import annotations

import logging
import math
import re
from functools import lru_cache

from .errors import InvalidArgument

__all__ = [
    "REST",
    "NOTE_TO_SEMITONE",
    "NOTES",
    "note_to_midi",
    "midi_to_note",
    "midi_to_hz",
    "hz_to_midi",
    "note_to_hz",
]

logger = logging.getLogger(__name__)

# Frequency used for silence throughout the package.
REST = 0

_REST_NAMES = {"R", "REST"}

# Both sharp and flat spellings map to the same semitone so enharmonic input
# such as ``Db4`` and ``C#4`` is accepted.
NOTE_TO_SEMITONE = {
    "C": 0,
    "B#": 0,
    "C#": 1,
    "Db": 1,
    "D": 2,
    "D#": 3,
    "Eb": 3,
    "E": 4,
    "Fb": 4,
    "E#": 5,
    "F": 5,
    "F#": 6,
    "Gb": 6,
    "G": 7,
    "G#": 8,
    "Ab": 8,
    "A": 9,
    "A#": 10,
    "Bb": 10,
    "B": 11,
    "Cb": 11,
}

NOTES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Concert pitch reference: A4 is MIDI note 69 at 440 Hz.
_A4_MIDI = 69
_A4_HZ = 440.0


@lru_cache(maxsize=None)
def note_to_midi(note: str) -> int:
    """Convert a note string such as ``C#4`` into a MIDI number.

    Raises
    ------
    InvalidArgument
        If ``note`` is malformed or outside the MIDI range ``0-127``.
    """

    match = re.fullmatch(r"([A-Ga-g][#b]?)(-?\d+)", note.strip())
    if not match:
        logger.error("Invalid note format: %s", note)
        raise InvalidArgument(f"Invalid note format: {note}")

    name, octave_str = match.groups()
    name = name[0].upper() + name[1:]
    # MIDI octaves start one below scientific pitch notation, so C4 is 60.
    midi_val = NOTE_TO_SEMITONE[name] + (int(octave_str) + 1) * 12
    if not 0 <= midi_val <= 127:
        raise InvalidArgument(
            f"Computed MIDI value {midi_val} out of range 0-127 for note {note}"
        )
    return midi_val


def midi_to_note(midi_note: int) -> str:
    """Convert a MIDI number into a sharp-spelled note name like ``C#4``."""

    if not 0 <= midi_note <= 127:
        raise InvalidArgument(f"MIDI note {midi_note} out of range 0-127")
    return f"{NOTES[midi_note % 12]}{midi_note // 12 - 1}"


def midi_to_hz(midi_note: int) -> int:
    """Return the equal-tempered frequency of ``midi_note`` rounded to 1 Hz."""

    if not 0 <= midi_note <= 127:
        raise InvalidArgument(f"MIDI note {midi_note} out of range 0-127")
    return int(round(_A4_HZ * 2 ** ((midi_note - _A4_MIDI) / 12)))


def hz_to_midi(frequency_hz: float) -> int:
    """Return the MIDI note closest to ``frequency_hz``, clamped to ``0-127``."""

    if frequency_hz <= 0:
        raise InvalidArgument("frequency must be positive to map to a MIDI note")
    midi_val = int(round(_A4_MIDI + 12 * math.log2(frequency_hz / _A4_HZ)))
    return max(0, min(127, midi_val))


def note_to_hz(note: str) -> int:
    """Return the frequency of ``note`` in whole Hz; ``R``/``REST`` give ``0``."""

    if note.strip().upper() in _REST_NAMES:
        return REST
    return midi_to_hz(note_to_midi(note))
