"""Tests for exporting compiled melodies as MIDI files."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

mido = pytest.importorskip("mido")

midi_io = importlib.import_module("buzzer_melody.midi_io")
core = importlib.import_module("buzzer_melody.core")

Step = core.Step


def _events(mid):
    return [
        (msg.type, getattr(msg, "note", None), msg.time)
        for msg in mid.tracks[0]
        if msg.type in ("note_on", "note_off")
    ]


def test_tones_and_rests_become_note_pairs():
    """Tone steps map to note on/off; rests only add delta time."""

    melody = core.Melody([Step(440, 500), Step(0, 250), Step(523, 250)], 3)
    mid = midi_io.melody_to_midi(melody)

    assert mid.ticks_per_beat == 480
    assert _events(mid) == [
        ("note_on", 69, 0),
        ("note_off", 69, 480),
        ("note_on", 72, 240),
        ("note_off", 72, 240),
    ]


def test_program_and_tempo_messages():
    """The track selects the square lead patch at the reference tempo."""

    mid = midi_io.melody_to_midi(core.Melody([Step(440, 100)], 1))
    track = mid.tracks[0]

    tempo = next(msg for msg in track if msg.type == "set_tempo")
    program = next(msg for msg in track if msg.type == "program_change")
    assert tempo.tempo == mido.bpm2tempo(midi_io.REFERENCE_BPM)
    assert program.program == 80


def test_trailing_rest_extends_track():
    """A final rest is kept as delta time before the end of the track."""

    mid = midi_io.melody_to_midi(core.Melody([Step(440, 500), Step(0, 250)], 2))

    assert mid.tracks[0][-1].type == "end_of_track"
    assert mid.tracks[0][-1].time == 240


def test_save_creates_parent_directory(tmp_path):
    """Passing a path writes a readable file, creating directories."""

    out = tmp_path / "nested" / "tune.mid"
    midi_io.melody_to_midi(core.Melody([Step(784, 250)], 1), out)

    loaded = mido.MidiFile(str(out))
    notes = [msg.note for msg in loaded.tracks[0] if msg.type == "note_on"]
    assert notes == [79]


def test_invalid_velocity_rejected():
    """Velocities outside 1-127 raise ``ValueError``."""

    with pytest.raises(ValueError):
        midi_io.melody_to_midi(core.Melody(), velocity=0)
