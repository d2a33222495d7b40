"""Export compiled melodies as Standard MIDI Files.

A compiled :class:`~buzzer_melody.core.Melody` has absolute millisecond
durations, so the MIDI file uses a fixed reference tempo and converts times
with :func:`mido.second2tick`. Tone steps become note on/off pairs at the
nearest MIDI pitch; rest steps only contribute delta time. Absolute tick
positions are derived from the running millisecond total so rounding never
accumulates across a long melody.

Example
-------
>>> from buzzer_melody.core import Melody, Step
>>> mid = melody_to_midi(Melody([Step(440, 500), Step(0, 250)], 2))
>>> [msg.type for msg in mid.tracks[0] if not msg.is_meta]
['program_change', 'note_on', 'note_off']
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from .backends import SQUARE_LEAD_PROGRAM
from .core import Melody
from .note_utils import hz_to_midi

if TYPE_CHECKING:
    from mido import MidiFile

__all__ = ["melody_to_midi"]

logger = logging.getLogger(__name__)

REFERENCE_BPM = 120


def melody_to_midi(
    melody: Melody,
    path: Optional[Union[str, Path]] = None,
    *,
    ticks_per_beat: int = 480,
    program: int = SQUARE_LEAD_PROGRAM,
    velocity: int = 100,
) -> "MidiFile":
    """Convert ``melody`` into a single-track ``MidiFile``.

    Parameters
    ----------
    melody:
        Compiled melody to export.
    path:
        When given, the file is also written there. The parent directory is
        created if needed.
    ticks_per_beat:
        MIDI resolution.
    program:
        General MIDI program for the track; defaults to the square lead.
    velocity:
        Note-on velocity, ``1-127``.

    Returns
    -------
    MidiFile
        In-memory file so callers can inspect it without re-reading disk.
    """

    try:
        import mido
        from mido import Message, MetaMessage, MidiFile, MidiTrack
    except ModuleNotFoundError as exc:
        raise ImportError(
            "mido is required to export MIDI files; install it with 'pip install mido'"
        ) from exc

    if not 0 <= program <= 127:
        raise ValueError("program must be between 0 and 127")
    if not 1 <= velocity <= 127:
        raise ValueError("velocity must be between 1 and 127")

    tempo = mido.bpm2tempo(REFERENCE_BPM)
    mid = MidiFile(ticks_per_beat=ticks_per_beat)
    track = MidiTrack()
    mid.tracks.append(track)
    track.append(MetaMessage("set_tempo", tempo=tempo, time=0))
    track.append(Message("program_change", program=program, time=0))

    def to_tick(ms: int) -> int:
        return int(mido.second2tick(ms / 1000.0, ticks_per_beat, tempo))

    elapsed_ms = 0
    last_tick = 0
    for step in melody:
        start_tick = to_tick(elapsed_ms)
        elapsed_ms += step.duration_ms
        if step.is_rest:
            continue
        end_tick = to_tick(elapsed_ms)
        note = hz_to_midi(step.frequency_hz)
        track.append(
            Message("note_on", note=note, velocity=velocity, time=start_tick - last_tick)
        )
        track.append(Message("note_off", note=note, velocity=0, time=end_tick - start_tick))
        last_tick = end_tick

    # Trailing rests still lengthen the file.
    track.append(MetaMessage("end_of_track", time=to_tick(elapsed_ms) - last_tick))

    if path is not None:
        out = Path(path)
        if out.parent and not out.parent.exists():
            out.parent.mkdir(parents=True, exist_ok=True)
        mid.save(str(out))
        logger.info("Wrote MIDI file %s (%d steps)", out, len(melody))
    return mid
