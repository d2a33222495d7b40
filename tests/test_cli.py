"""Tests for the command line interface.

Every invocation passes ``--settings-file`` inside ``tmp_path`` so the
user's real settings never influence the results.
"""

from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

cli = importlib.import_module("buzzer_melody.cli")


@pytest.fixture
def run(tmp_path):
    settings = tmp_path / "settings.json"

    def _run(*args):
        cli.run_cli(["--settings-file", str(settings), *args])

    _run.settings = settings
    return _run


def test_list_presets(run, capsys):
    """``--list-presets`` prints one name per line."""

    run("--list-presets")
    lines = capsys.readouterr().out.split()

    assert "success" in lines
    assert "button_click" in lines


def test_dump_score_without_playing(run, capsys):
    """``--dump`` prints the compiled steps and their total."""

    run("--score", "G5/4", "--bpm", "76", "--gap", "15", "--dump", "--no-play")
    out = capsys.readouterr().out

    assert "784 Hz" in out
    assert "774 ms" in out
    assert "2 steps, 789 ms" in out


def test_settings_file_supplies_defaults(run, capsys):
    """Values from the settings file are used when flags are absent."""

    run.settings.write_text(json.dumps({"bpm": 60}))
    run("--score", "A4/4", "--dump", "--no-play")

    assert "1 steps, 1000 ms" in capsys.readouterr().out


def test_dry_run_prints_generator_commands(run, capsys):
    """``--dry-run`` simulates playback and prints timed commands."""

    run("--score", "A4/4 R/8 C5/8", "--dry-run")
    lines = capsys.readouterr().out.splitlines()

    assert lines == [
        "       0 ms  start 440 Hz",
        "     500 ms  stop",
        "     750 ms  start 523 Hz",
        "    1000 ms  stop",
    ]


def test_export_midi_and_wav(run, tmp_path, capsys):
    """Exports are written and reported."""

    pytest.importorskip("mido")
    midi = tmp_path / "out" / "tune.mid"
    wav = tmp_path / "out" / "tune.wav"

    run("--preset", "success", "--export-midi", str(midi), "--render-wav", str(wav), "--no-play")
    out = capsys.readouterr().out

    assert midi.exists() and wav.exists()
    assert f"MIDI file saved to {midi}" in out
    assert f"WAV file saved to {wav}" in out


@pytest.mark.parametrize(
    "args",
    [
        (),
        ("--score", "G5/4", "--bpm", "0", "--no-play"),
        ("--score", "G5/x", "--no-play"),
        ("--preset", "fanfare", "--no-play"),
        ("--score", "G5/4 A5/4 B5/4", "--capacity", "2", "--no-play"),
    ],
)
def test_errors_exit_with_status_one(run, args):
    """Invalid input exits with status 1."""

    with pytest.raises(SystemExit) as excinfo:
        run(*args)
    assert excinfo.value.code == 1
