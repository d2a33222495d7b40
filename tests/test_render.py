"""Tests for offline square-wave rendering."""

import importlib
import sys
import wave
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

render = importlib.import_module("buzzer_melody.render")
core = importlib.import_module("buzzer_melody.core")

Step = core.Step


def _melody():
    return core.Melody([Step(1000, 10), Step(0, 5)], 2)


def test_square_wave_shape():
    """Tones alternate between +/- amplitude; rests are silent."""

    samples = render.render_square_wave(_melody(), sample_rate=8000, amplitude=0.5)

    assert samples.dtype == np.float32
    assert len(samples) == 120
    assert np.all(samples[0:4] == 0.5)
    assert np.all(samples[5:8] == -0.5)
    assert np.all(samples[80:] == 0.0)


def test_empty_melody_renders_nothing():
    """An empty melody produces no samples."""

    assert len(render.render_square_wave(core.Melody())) == 0


@pytest.mark.parametrize("kwargs", [{"sample_rate": 0}, {"amplitude": 1.5}])
def test_invalid_parameters(kwargs):
    """Non-positive sample rates and amplitudes above 1 are rejected."""

    with pytest.raises(ValueError):
        render.render_square_wave(_melody(), **kwargs)


def test_write_wav(tmp_path):
    """The WAV file is 16-bit mono with one frame per sample."""

    out = render.write_wav(_melody(), tmp_path / "out" / "tone.wav", sample_rate=8000)

    with wave.open(str(out), "rb") as wav:
        assert wav.getnchannels() == 1
        assert wav.getsampwidth() == 2
        assert wav.getframerate() == 8000
        assert wav.getnframes() == 120
