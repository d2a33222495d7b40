"""Signal generator backends driven by the melody player.

A signal generator is anything that can start a square wave at a frequency
and stop it again. :class:`~buzzer_melody.player.MelodyPlayer` only talks to
the :class:`SignalGenerator` interface, so playback logic is identical
whether the tone comes from a hardware PWM pin, a software synthesizer or a
recorder used in tests.

Available backends
------------------
``NullSignalGenerator``
    Logs and ignores commands. Used when no audio hardware is present.
``RecordingSignalGenerator``
    Keeps a list of commands with timestamps for dry runs and tests.
``FluidSynthSignalGenerator``
    Plays the nearest MIDI note with the General MIDI square lead patch via
    ``pyfluidsynth``. Requires a SoundFont, located from the argument, the
    ``SOUND_FONT`` environment variable or a platform default.
"""

from __future__ import annotations

import abc
import logging
import os
import sys
from typing import Callable, List, Optional, Tuple

from .errors import SignalGeneratorError
from .note_utils import hz_to_midi

__all__ = [
    "SignalGenerator",
    "NullSignalGenerator",
    "RecordingSignalGenerator",
    "FluidSynthSignalGenerator",
    "BACKENDS",
    "create_generator",
    "resolve_soundfont",
]

logger = logging.getLogger(__name__)

# General MIDI program 81 "Lead 1 (square)", zero-based.
SQUARE_LEAD_PROGRAM = 80


class SignalGenerator(abc.ABC):
    """Single-voice square wave source."""

    @abc.abstractmethod
    def start(self, frequency_hz: int) -> None:
        """Start (or retune) the tone at ``frequency_hz``."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Silence the output. Stopping a silent generator is a no-op."""

    def close(self) -> None:
        """Release any resources held by the backend."""


class NullSignalGenerator(SignalGenerator):
    """Backend for hosts without audio output."""

    def start(self, frequency_hz: int) -> None:
        logger.debug("tone f=%d (null backend)", frequency_hz)

    def stop(self) -> None:
        logger.debug("noTone (null backend)")


class RecordingSignalGenerator(SignalGenerator):
    """Record every command as ``(timestamp, action, frequency)``.

    ``clock`` supplies the timestamp; without it the command index is used.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock
        self.events: List[Tuple[int, str, Optional[int]]] = []
        self.frequency_hz: Optional[int] = None

    def _stamp(self) -> int:
        return self._clock() if self._clock else len(self.events)

    def start(self, frequency_hz: int) -> None:
        self.events.append((self._stamp(), "start", frequency_hz))
        self.frequency_hz = frequency_hz

    def stop(self) -> None:
        self.events.append((self._stamp(), "stop", None))
        self.frequency_hz = None

    @property
    def calls(self) -> List[Tuple[str, Optional[int]]]:
        """Commands without timestamps, handy for assertions."""

        return [(action, hz) for _, action, hz in self.events]

    @property
    def is_sounding(self) -> bool:
        return self.frequency_hz is not None


def resolve_soundfont(sf: Optional[str]) -> str:
    """Return the path to the SoundFont used by :class:`FluidSynthSignalGenerator`.

    The explicit argument wins, then the ``SOUND_FONT`` environment variable,
    then a platform-specific default.

    Raises
    ------
    SignalGeneratorError
        If no existing file can be located.
    """

    if sf:
        candidate = sf
    else:
        candidate = os.environ.get("SOUND_FONT")
        if not candidate:
            if sys.platform.startswith("win"):
                candidate = r"C:\\Windows\\System32\\drivers\\gm.dls"
            elif sys.platform == "darwin":
                candidate = "/Library/Audio/Sounds/Banks/FluidR3_GM.sf2"
            else:
                candidate = "/usr/share/sounds/sf2/TimGM6mb.sf2"

    candidate = os.path.expanduser(os.path.expandvars(candidate))
    if not os.path.isfile(candidate):
        raise SignalGeneratorError(
            "SoundFont not found. Provide a valid path via the argument or "
            "SOUND_FONT environment variable, or install a General MIDI soundfont."
        )
    return candidate


class FluidSynthSignalGenerator(SignalGenerator):
    """Software synthesizer backend built on ``pyfluidsynth``.

    Frequencies are mapped to the nearest MIDI note, so pitches between
    semitones are rounded. Only one note sounds at a time; starting a new
    frequency releases the previous one.
    """

    def __init__(
        self,
        soundfont: Optional[str] = None,
        *,
        velocity: int = 100,
        channel: int = 0,
        program: int = SQUARE_LEAD_PROGRAM,
    ) -> None:
        try:
            import fluidsynth  # type: ignore
        except FileNotFoundError as exc:
            raise SignalGeneratorError(
                "fluidsynth not installed. Install the FluidSynth library and "
                "pyFluidSynth package."
            ) from exc
        except ImportError as exc:
            raise SignalGeneratorError("PyFluidSynth is required for playback") from exc

        sf_path = resolve_soundfont(soundfont)
        try:
            self._synth = fluidsynth.Synth()
        except FileNotFoundError as exc:
            raise SignalGeneratorError(
                "fluidsynth not installed. Install the FluidSynth library and "
                "pyFluidSynth package."
            ) from exc
        try:
            self._synth.start()
            sfid = self._synth.sfload(sf_path)
            self._synth.program_select(channel, sfid, 0, program)
        except Exception as exc:
            self._synth.delete()
            raise SignalGeneratorError(f"Could not start audio driver: {exc}") from exc

        self._channel = channel
        self._velocity = velocity
        self._note: Optional[int] = None

    def start(self, frequency_hz: int) -> None:
        note = hz_to_midi(frequency_hz)
        self._release()
        logger.debug("noteon f=%d note=%d", frequency_hz, note)
        self._synth.noteon(self._channel, note, self._velocity)
        self._note = note

    def stop(self) -> None:
        self._release()

    def _release(self) -> None:
        if self._note is not None:
            self._synth.noteoff(self._channel, self._note)
            self._note = None

    def close(self) -> None:
        self._release()
        self._synth.delete()


BACKENDS = ("null", "fluidsynth")


def create_generator(name: str, soundfont: Optional[str] = None) -> SignalGenerator:
    """Instantiate the backend called ``name`` (one of :data:`BACKENDS`)."""

    if name == "null":
        return NullSignalGenerator()
    if name == "fluidsynth":
        return FluidSynthSignalGenerator(soundfont)
    raise ValueError(f"Unknown signal generator backend: {name}")
