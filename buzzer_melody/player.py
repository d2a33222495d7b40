"""Cooperative, non-blocking melody player.

:class:`MelodyPlayer` walks a compiled :class:`~buzzer_melody.core.Melody`
one step at a time and drives a
:class:`~buzzer_melody.backends.SignalGenerator`. It never sleeps: the host
loop calls :meth:`MelodyPlayer.poll` as often as it can and each call does a
small, bounded amount of work before returning. A late poll only delays the
next step; it never skips or corrupts one.

State machine
-------------
``IDLE``
    Nothing to do. Initial state and the state after :meth:`stop`.
``START_STEP``
    Start the tone (or silence the generator for a rest), arm the step
    timer, go to ``PLAYING_STEP``.
``PLAYING_STEP``
    Wait for the step timer, then go to ``ADVANCE_STEP``.
``ADVANCE_STEP``
    Move to the next step; at the end either wrap to the first step when
    looping or stop and return to ``IDLE``.

Example
-------
>>> from buzzer_melody.backends import RecordingSignalGenerator
>>> from buzzer_melody.core import Melody, Step
>>> generator = RecordingSignalGenerator()
>>> player = MelodyPlayer(generator)
>>> player.play(Melody([Step(440, 100)], 1))
>>> player.poll()
>>> generator.calls
[('start', 440)]

The melody passed to :meth:`play` is borrowed: its backing buffer must stay
untouched until :meth:`is_playing` turns ``False``. The player never writes
to it.
"""

from __future__ import annotations

import logging
from typing import Optional

from .backends import SignalGenerator
from .core import Melody, PlayerState, Step
from .timer import ElapsedTimer

__all__ = ["MelodyPlayer"]

logger = logging.getLogger(__name__)

_US_PER_MS = 1000


class MelodyPlayer:
    """Schedule the steps of a melody on a signal generator.

    Parameters
    ----------
    generator:
        Backend producing the tone. The player assumes exclusive control of
        it while playing.
    timer:
        Step timer; defaults to an :class:`ElapsedTimer` on the monotonic
        clock. Tests pass one with a fake clock.
    """

    def __init__(self, generator: SignalGenerator, timer: Optional[ElapsedTimer] = None) -> None:
        self._generator = generator
        self._timer = timer if timer is not None else ElapsedTimer()
        self._melody: Optional[Melody] = None
        self._index = 0
        self._looping = False
        self._state = PlayerState.IDLE

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def index(self) -> int:
        """Index of the step being played."""

        return self._index

    @property
    def melody(self) -> Optional[Melody]:
        return self._melody

    @property
    def looping(self) -> bool:
        return self._looping

    @property
    def generator(self) -> SignalGenerator:
        return self._generator

    def is_playing(self) -> bool:
        return self._state is not PlayerState.IDLE

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------
    def play(self, melody: Melody, loop: bool = False) -> None:
        """Load ``melody`` and start it on the next :meth:`poll`.

        A melody already playing is stopped first so the generator is silent
        before the new one is set up. An empty melody is accepted and ends on
        the first poll.
        """

        logger.info("play count=%d loop=%s", len(melody), loop)
        if self.is_playing():
            self.stop()
        self._melody = melody
        self._looping = loop
        self._index = 0
        self._state = PlayerState.START_STEP

    def stop(self) -> None:
        """Silence the generator and return to ``IDLE``. Safe to repeat."""

        self._generator.stop()
        self._melody = None
        self._looping = False
        self._index = 0
        self._state = PlayerState.IDLE
        self._timer.disarm()

    def poll(self) -> None:
        """Run one transition of the state machine. Never blocks."""

        state = self._state
        if state is PlayerState.IDLE:
            return
        if state is PlayerState.START_STEP:
            self._start_step()
        elif state is PlayerState.PLAYING_STEP:
            if self._timer.is_elapsed():
                self._state = PlayerState.ADVANCE_STEP
        elif state is PlayerState.ADVANCE_STEP:
            self._advance()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _current_step(self) -> Optional[Step]:
        if self._melody is None or self._index >= len(self._melody):
            return None
        return self._melody[self._index]

    def _start_step(self) -> None:
        step = self._current_step()
        if step is None:
            # Zero-length melody: nothing to play.
            logger.info("empty melody, stopping")
            self.stop()
            return

        if step.frequency_hz > 0:
            self._generator.start(step.frequency_hz)
        else:
            self._generator.stop()
        self._timer.arm(step.duration_ms * _US_PER_MS)

        logger.debug(
            "step idx=%d f=%d ms=%d", self._index, step.frequency_hz, step.duration_ms
        )
        self._state = PlayerState.PLAYING_STEP

    def _advance(self) -> None:
        self._index += 1
        if self._melody is not None and self._index < len(self._melody):
            self._state = PlayerState.START_STEP
            return
        if self._melody is not None and self._looping:
            logger.debug("melody finished, looping")
            self._index = 0
            self._state = PlayerState.START_STEP
            return
        logger.info("melody finished")
        self.stop()
