"""Offline square-wave rendering of compiled melodies.

The signal generators in :mod:`buzzer_melody.backends` play in real time.
This module instead renders the whole melody at once into a NumPy array,
mirroring what a buzzer driven with a 50% duty cycle would emit, and can
store it as a 16-bit mono WAV file for listening on a desktop.
"""

from __future__ import annotations

import logging
import wave
from pathlib import Path
from typing import Union

import numpy as np

from .core import Melody

__all__ = ["render_square_wave", "write_wav"]

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100


def _samples_for(duration_ms: int, sample_rate: int) -> int:
    return int(round(duration_ms * sample_rate / 1000.0))


def render_square_wave(
    melody: Melody,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    amplitude: float = 0.3,
) -> np.ndarray:
    """Return ``melody`` as float32 samples in ``[-amplitude, amplitude]``.

    Rest steps are rendered as zeros. Each step restarts the waveform phase
    at zero, as a hardware tone generator does when it is retuned.
    """

    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    if not 0.0 <= amplitude <= 1.0:
        raise ValueError("amplitude must be between 0 and 1")

    total = sum(_samples_for(step.duration_ms, sample_rate) for step in melody)
    out = np.zeros(total, dtype=np.float32)
    pos = 0
    for step in melody:
        n = _samples_for(step.duration_ms, sample_rate)
        if step.frequency_hz > 0 and n:
            t = np.arange(n, dtype=np.float64) / sample_rate
            # Sign of the phase within each period gives a 50% duty cycle.
            phase = (t * step.frequency_hz) % 1.0
            out[pos : pos + n] = np.where(phase < 0.5, amplitude, -amplitude)
        pos += n
    return out


def write_wav(
    melody: Melody,
    path: Union[str, Path],
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    amplitude: float = 0.3,
) -> Path:
    """Render ``melody`` and write it to ``path`` as 16-bit mono PCM."""

    samples = render_square_wave(melody, sample_rate, amplitude)
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(out), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm.tobytes())
    logger.info("Wrote %s (%.2f s)", out, len(pcm) / sample_rate)
    return out
