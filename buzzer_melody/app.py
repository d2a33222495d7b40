"""Application wiring: one buffer, builder, player and generator per device.

:class:`AppContext` owns everything a playback session needs and is created
once at startup, then handed to whatever drives the poll loop. Nothing here is
global, so tests and multiple simulated devices can coexist in one process.

Example
-------
>>> from buzzer_melody.backends import RecordingSignalGenerator
>>> with AppContext(generator=RecordingSignalGenerator()) as ctx:
...     melody = ctx.compile_preset("button_click")
...     ctx.player.play(melody)
...     ctx.run()

:func:`simulate` plays a melody against a fake clock and records the
generator commands with their start times, which is useful for checking a
score without audio hardware and without waiting for it to play.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence, Union

from .backends import RecordingSignalGenerator, SignalGenerator, create_generator
from .builder import MelodyBuilder
from .config import PlayerSettings
from .core import Melody, PlayerState, ScoreNote, ScoreView, make_step_buffer
from .player import MelodyPlayer
from .presets import PresetId, get_preset, get_preset_by_name
from .timer import ElapsedTimer

__all__ = ["AppContext", "simulate"]

logger = logging.getLogger(__name__)


class AppContext:
    """Owner of the step buffer, builder, player and signal generator.

    Parameters
    ----------
    settings:
        Capacity, default tempo/gap, backend and poll interval. Validated on
        construction.
    generator:
        Backend to use instead of creating one from ``settings.backend``.
    timer:
        Step timer for the player, mainly for tests.
    """

    def __init__(
        self,
        settings: Optional[PlayerSettings] = None,
        generator: Optional[SignalGenerator] = None,
        timer: Optional[ElapsedTimer] = None,
    ) -> None:
        self.settings = (settings or PlayerSettings()).validate()
        self.buffer = make_step_buffer(self.settings.capacity)
        self.builder = MelodyBuilder(self.buffer)
        if generator is None:
            generator = create_generator(self.settings.backend, self.settings.soundfont)
        self.generator = generator
        self.player = MelodyPlayer(generator, timer)

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Stop playback and release the generator."""

        self.player.stop()
        self.generator.close()

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------
    def new_melody(self, bpm: Optional[int] = None, gap_ms: Optional[int] = None) -> MelodyBuilder:
        """Reset the builder and apply tempo and gap (settings by default).

        Any melody previously built from this context shares the buffer, so
        playback is stopped first.
        """

        if self.player.is_playing():
            self.player.stop()
        return (
            self.builder.reset(True)
            .set_tempo(self.settings.bpm if bpm is None else bpm)
            .set_gap(self.settings.gap_ms if gap_ms is None else gap_ms)
        )

    def finish(self) -> Melody:
        """Return the built melody, raising the builder's error if it failed."""

        if not self.builder.is_valid():
            raise self.builder.error
        melody = self.builder.build()
        logger.info("Compiled %d steps (%d ms)", len(melody), melody.total_duration_ms())
        return melody

    def compile_score(
        self,
        score: Union[Sequence[ScoreNote], ScoreView],
        bpm: Optional[int] = None,
        gap_ms: Optional[int] = None,
    ) -> Melody:
        """Compile ``score`` into the context buffer."""

        self.new_melody(bpm, gap_ms).append_score(score)
        return self.finish()

    def compile_preset(
        self,
        preset: Union[PresetId, str],
        bpm: Optional[int] = None,
        gap_ms: Optional[int] = None,
    ) -> Melody:
        """Compile a built-in preset given by id or name."""

        view = get_preset(preset) if isinstance(preset, PresetId) else get_preset_by_name(preset)
        return self.compile_score(view, bpm, gap_ms)

    # ------------------------------------------------------------------
    # Poll loop
    # ------------------------------------------------------------------
    def run(
        self,
        max_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Poll the player until it is idle or ``max_seconds`` have passed.

        The loop sleeps ``poll_interval_ms`` only while a step is sounding so
        state transitions happen back to back. Playback is stopped if the
        loop exits early, including on ``KeyboardInterrupt``.
        """

        deadline = None if max_seconds is None else time.monotonic() + max_seconds
        interval = self.settings.poll_interval_ms / 1000.0
        try:
            while self.player.is_playing():
                self.player.poll()
                if deadline is not None and time.monotonic() >= deadline:
                    logger.info("Playback time limit reached")
                    break
                if self.player.state is PlayerState.PLAYING_STEP and interval:
                    sleep(interval)
        finally:
            if self.player.is_playing():
                self.player.stop()


def simulate(
    melody: Melody,
    loop: bool = False,
    max_ms: Optional[int] = None,
    tick_us: int = 1000,
) -> RecordingSignalGenerator:
    """Play ``melody`` on a fake clock and return the recorded commands.

    The clock only advances while a step is sounding, by ``tick_us`` per
    poll, so recorded timestamps (in milliseconds) land on step boundaries.
    A looping melody needs ``max_ms`` to end.
    """

    if loop and max_ms is None:
        raise ValueError("max_ms is required when simulating a looping melody")
    if tick_us <= 0:
        raise ValueError("tick_us must be positive")

    now_us = 0

    def clock() -> int:
        return now_us

    generator = RecordingSignalGenerator(clock=lambda: now_us // 1000)
    player = MelodyPlayer(generator, ElapsedTimer(clock=clock))
    player.play(melody, loop)
    while player.is_playing():
        player.poll()
        if max_ms is not None and now_us >= max_ms * 1000:
            player.stop()
            break
        if player.state is PlayerState.PLAYING_STEP:
            now_us += tick_us
    return generator
