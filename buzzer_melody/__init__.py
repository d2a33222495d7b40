"""Buzzer Melody library.

This package turns a declarative score into a timed sequence of tone and
silence steps and plays it on a single-tone signal generator without blocking
the host control loop. A typical workflow builds a melody with
:class:`MelodyBuilder` into a preallocated buffer, hands the result to
:class:`MelodyPlayer` and then calls :meth:`MelodyPlayer.poll` from the main
loop until playback ends.

Underlying Algorithm
--------------------
Each note's notated duration is converted to milliseconds at the current
tempo (``240000 / (bpm * denominator)``, never below 1 ms). Tones are then
split into an audible part and a trailing articulation gap, clamped so the
audible part keeps at least ``MIN_PLAYABLE_MS``. The player walks the steps
with a four-state machine paced by a wraparound-safe microsecond timer::

    IDLE -> START_STEP -> PLAYING_STEP -> ADVANCE_STEP -> START_STEP | IDLE

Example
-------
>>> from buzzer_melody import (
...     MelodyBuilder, MelodyPlayer, NullSignalGenerator, make_step_buffer,
... )
>>> builder = MelodyBuilder(make_step_buffer(64))
>>> melody = builder.set_tempo(76).set_gap(15).add_note(784, 4).build()
>>> builder.is_valid(), len(melody)
(True, 2)
>>> player = MelodyPlayer(NullSignalGenerator())
>>> player.play(melody)
>>> while player.is_playing():  # doctest: +SKIP
...     player.poll()

Features include:
- Fluent, bounded melody builder with a sticky validity status.
- Non-blocking player with loop and stop semantics.
- Built-in interface sound presets and a text score syntax.
- Square-wave WAV rendering and MIDI export of compiled melodies.
- Null, recording and FluidSynth signal generator backends.
- Command line interface with persistent JSON settings.
"""

__version__ = "0.1.0"

from .errors import (  # noqa: F401
    CapacityExceeded,
    InvalidArgument,
    InvalidConversion,
    MelodyError,
    SignalGeneratorError,
)
from .core import (  # noqa: F401
    Melody,
    MelodyContext,
    PlayerState,
    ScoreNote,
    ScoreView,
    Step,
    make_step_buffer,
)
from .durations import (  # noqa: F401
    EIGHTH,
    HALF,
    QUARTER,
    SIXTEENTH,
    THIRTY_SECOND,
    WHOLE,
    to_ms,
)
from .timer import ElapsedTimer  # noqa: F401
from .builder import Invalid, MelodyBuilder, Valid  # noqa: F401
from .backends import (  # noqa: F401
    FluidSynthSignalGenerator,
    NullSignalGenerator,
    RecordingSignalGenerator,
    SignalGenerator,
    create_generator,
)
from .player import MelodyPlayer  # noqa: F401
from .note_utils import REST, note_to_hz, note_to_midi, midi_to_note  # noqa: F401
from .presets import PresetId, get_preset, get_preset_by_name  # noqa: F401
from .utils import parse_score  # noqa: F401
from .config import PlayerSettings, load_settings, save_settings  # noqa: F401
from .app import AppContext, simulate  # noqa: F401


def run_cli():
    from .cli import run_cli as _run_cli
    _run_cli()


def main():
    from .cli import main as _main
    _main()


if __name__ == "__main__":
    main()
