"""Compile scores into fixed-capacity step sequences.

:class:`MelodyBuilder` translates sheet-music style input (pitches with
notated durations at a tempo) into :class:`~buzzer_melody.core.Step` objects
written into a buffer supplied by the caller. Three ways of feeding it are
supported:

1. chaining ``add_note`` / ``add_rest`` calls;
2. ``append_score`` with a list of notes, a :class:`ScoreView` or a reader
   callable returning the note at a given index;
3. ``compose`` with a function that receives the builder and adds whatever
   it likes.

Example
-------
>>> from buzzer_melody.core import make_step_buffer
>>> from buzzer_melody.durations import QUARTER, EIGHTH
>>> builder = MelodyBuilder(make_step_buffer(16))
>>> melody = (
...     builder.set_tempo(120)
...     .set_gap(20)
...     .add_note(440, QUARTER)
...     .add_rest(EIGHTH)
...     .build()
... )
>>> [(s.frequency_hz, s.duration_ms) for s in melody]
[(440, 480), (0, 20), (0, 250)]

Failure handling
----------------
The builder never raises. The first failure (bad tempo or gap, an
unconvertible duration, a full buffer) is recorded as an :class:`Invalid`
status and every later mutating call becomes a no-op that still returns the
builder, so a chain can be written without intermediate checks. Callers
inspect :meth:`MelodyBuilder.is_valid` once before trusting
:meth:`MelodyBuilder.build`; ignoring it yields a melody truncated at the
first failure, never a write past the buffer.

Articulation gap
----------------
A configured gap separates consecutive tones audibly by stealing the tail of
each note and turning it into silence. The gap is clamped so the tone keeps
at least ``MelodyContext.MIN_PLAYABLE_MS`` and the tone plus its gap always
add up to the note's converted duration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, MutableSequence, Optional, Sequence, Union

from .core import (
    MAX_DURATION_MS,
    MAX_FREQUENCY_HZ,
    Melody,
    MelodyContext,
    ScoreNote,
    ScoreView,
    Step,
)
from .durations import to_ms
from .errors import CapacityExceeded, InvalidArgument, MelodyError

__all__ = ["MelodyBuilder", "Valid", "Invalid", "ScoreReader"]

logger = logging.getLogger(__name__)

# ``index -> ScoreNote`` callable used to pull notes from lazy sources.
ScoreReader = Callable[[int], ScoreNote]
ScoreSource = Union[Sequence[ScoreNote], ScoreView, ScoreReader, None]


@dataclass(frozen=True)
class Valid:
    """Status of a builder that has not failed."""

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    """Status of a builder that failed; ``reason`` is the first error."""

    reason: MelodyError

    def __bool__(self) -> bool:
        return False


_VALID = Valid()


class MelodyBuilder:
    """Fluent compiler writing steps into a caller-owned buffer.

    Parameters
    ----------
    buffer:
        Preallocated mutable sequence (see
        :func:`~buzzer_melody.core.make_step_buffer`). Its length is the
        capacity; the builder overwrites slots in place and never resizes it.
    """

    def __init__(self, buffer: Optional[MutableSequence[Step]]) -> None:
        self._buffer = buffer
        self._capacity = len(buffer) if buffer is not None else 0
        self._length = 0
        self._ctx = MelodyContext()
        self._status = self._initial_status()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def _initial_status(self) -> Union[Valid, Invalid]:
        if self._buffer is None or self._capacity == 0:
            return Invalid(CapacityExceeded("builder has no step storage"))
        return _VALID

    def _fail(self, error: MelodyError) -> None:
        # Only the first failure is kept; later ones are consequences of it.
        if self._status:
            logger.warning("Melody builder invalid: %s", error)
            self._status = Invalid(error)

    @property
    def status(self) -> Union[Valid, Invalid]:
        return self._status

    @property
    def error(self) -> Optional[MelodyError]:
        """First recorded failure or ``None`` while valid."""

        return None if self._status else self._status.reason

    def is_valid(self) -> bool:
        return bool(self._status)

    def length(self) -> int:
        """Return the number of steps compiled so far."""

        return self._length

    def __len__(self) -> int:
        return self._length

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def context(self) -> MelodyContext:
        """Copy of the current tempo and gap settings."""

        return MelodyContext(bpm=self._ctx.bpm, gap_ms=self._ctx.gap_ms)

    # ------------------------------------------------------------------
    # Global parameters
    # ------------------------------------------------------------------
    def reset(self, to_default: bool = False) -> "MelodyBuilder":
        """Start a new melody in the same buffer.

        The compiled length drops to zero and the sticky failure is cleared.
        With ``to_default`` the tempo and gap also return to 120 bpm / 0 ms.
        """

        self._length = 0
        if to_default:
            self._ctx = MelodyContext()
        self._status = self._initial_status()
        return self

    def set_tempo(self, bpm: int) -> "MelodyBuilder":
        """Set the tempo in quarter-note beats per minute (``1-300``)."""

        if not self._status:
            return self
        if not _is_int(bpm) or not MelodyContext.MIN_BPM <= bpm <= MelodyContext.MAX_BPM:
            self._fail(
                InvalidArgument(
                    f"tempo {bpm!r} outside {MelodyContext.MIN_BPM}-{MelodyContext.MAX_BPM} bpm"
                )
            )
        else:
            self._ctx.bpm = bpm
        return self

    def set_gap(self, gap_ms: int) -> "MelodyBuilder":
        """Set the articulation gap between notes (``0-1000`` ms)."""

        if not self._status:
            return self
        if not _is_int(gap_ms) or not 0 <= gap_ms <= MelodyContext.MAX_GAP_MS:
            self._fail(
                InvalidArgument(f"gap {gap_ms!r} outside 0-{MelodyContext.MAX_GAP_MS} ms")
            )
        else:
            self._ctx.gap_ms = gap_ms
        return self

    # ------------------------------------------------------------------
    # Musical primitives
    # ------------------------------------------------------------------
    def add_note(self, frequency_hz: int, duration: int) -> "MelodyBuilder":
        """Add a note of notated ``duration``; ``0`` Hz adds a rest.

        Tones are split into an audible part and a trailing silence of the
        configured gap, clamped so the audible part never drops below
        ``MIN_PLAYABLE_MS``.
        """

        if not self._status or not self._check_frequency(frequency_hz):
            return self
        duration_ms = self._convert(duration)
        if duration_ms is None:
            return self

        if frequency_hz == 0:
            self._push(0, duration_ms)
            return self

        play_ms = duration_ms
        rest_ms = 0
        min_play = MelodyContext.MIN_PLAYABLE_MS
        if self._ctx.gap_ms > 0 and play_ms > min_play:
            max_gap = play_ms - min_play
            rest_ms = min(self._ctx.gap_ms, max_gap)
            play_ms -= rest_ms

        self._push(frequency_hz, play_ms)
        if rest_ms > 0:
            self._push(0, rest_ms)

        logger.debug(
            "add_note hz=%d duration=%d total=%d play=%d rest=%d",
            frequency_hz,
            duration,
            duration_ms,
            play_ms,
            rest_ms,
        )
        return self

    def add_rest(self, duration: int) -> "MelodyBuilder":
        """Add a silence of notated ``duration``; rests are never split."""

        if not self._status:
            return self
        duration_ms = self._convert(duration)
        if duration_ms is not None:
            self._push(0, duration_ms)
        return self

    # ------------------------------------------------------------------
    # Raw primitives
    # ------------------------------------------------------------------
    def add_tone_ms(self, frequency_hz: int, duration_ms: int) -> "MelodyBuilder":
        """Add a tone of exactly ``duration_ms`` milliseconds, no gap applied."""

        if not self._status or not self._check_frequency(frequency_hz):
            return self
        if self._check_raw_duration(duration_ms):
            self._push(frequency_hz, duration_ms)
        return self

    def add_rest_ms(self, duration_ms: int) -> "MelodyBuilder":
        """Add a silence of exactly ``duration_ms`` milliseconds."""

        if not self._status:
            return self
        if self._check_raw_duration(duration_ms):
            self._push(0, duration_ms)
        return self

    # ------------------------------------------------------------------
    # Composition helpers
    # ------------------------------------------------------------------
    def append_score(self, source: ScoreSource, count: Optional[int] = None) -> "MelodyBuilder":
        """Append every note of ``source`` with :meth:`add_note`.

        Parameters
        ----------
        source:
            A sequence of :class:`ScoreNote`, a :class:`ScoreView` or a reader
            callable returning the note at a given index.
        count:
            Number of notes to read. Defaults to the length of a sequence or
            view and is required for readers.

        Iteration stops as soon as the builder becomes invalid.
        """

        if not self._status:
            return self

        if isinstance(source, ScoreView):
            reader: ScoreReader = source.data.__getitem__
            available: Optional[int] = source.count
        elif callable(source):
            reader = source
            available = None
        elif source is None:
            if count:
                self._fail(InvalidArgument("score is missing but a note count was given"))
            return self
        else:
            reader = source.__getitem__
            available = len(source)

        if count is None:
            if available is None:
                self._fail(InvalidArgument("a note count is required for score readers"))
                return self
            count = available
        elif count < 0 or (available is not None and count > available):
            self._fail(
                InvalidArgument(f"note count {count} outside score of {available} notes")
            )
            return self

        for index in range(count):
            if not self._status:
                break
            note = reader(index)
            self.add_note(note.frequency_hz, note.duration)
        return self

    def compose(self, fn: Callable[["MelodyBuilder"], object]) -> "MelodyBuilder":
        """Call ``fn`` with this builder so a phrase can be grouped in code."""

        fn(self)
        return self

    def build(self) -> Melody:
        """Return a view over the steps compiled so far.

        Nothing is copied and the builder is not reset; calling ``reset``
        while the returned melody is playing changes what it refers to.
        """

        return Melody(self._buffer if self._buffer is not None else (), self._length)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _convert(self, duration: int) -> Optional[int]:
        try:
            return to_ms(duration, self._ctx.bpm)
        except MelodyError as exc:
            self._fail(exc)
            return None

    def _check_frequency(self, frequency_hz: int) -> bool:
        if not _is_int(frequency_hz) or not 0 <= frequency_hz <= MAX_FREQUENCY_HZ:
            self._fail(
                InvalidArgument(f"frequency {frequency_hz!r} outside 0-{MAX_FREQUENCY_HZ} Hz")
            )
            return False
        return True

    def _check_raw_duration(self, duration_ms: int) -> bool:
        if not _is_int(duration_ms) or not 0 < duration_ms <= MAX_DURATION_MS:
            self._fail(
                InvalidArgument(f"duration {duration_ms!r} outside 1-{MAX_DURATION_MS} ms")
            )
            return False
        return True

    def _push(self, frequency_hz: int, duration_ms: int) -> bool:
        if self._length >= self._capacity:
            logger.debug("push overflow len=%d cap=%d", self._length, self._capacity)
            self._fail(
                CapacityExceeded(f"step buffer full ({self._capacity} steps)")
            )
            return False
        logger.debug("push len=%d f=%d ms=%d", self._length, frequency_hz, duration_ms)
        self._buffer[self._length] = Step(frequency_hz, duration_ms)
        self._length += 1
        return True


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
