"""Tests for the cooperative :class:`MelodyPlayer` state machine."""

import importlib
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

player_mod = importlib.import_module("buzzer_melody.player")
backends = importlib.import_module("buzzer_melody.backends")
core = importlib.import_module("buzzer_melody.core")
timer_mod = importlib.import_module("buzzer_melody.timer")

PlayerState = core.PlayerState
Step = core.Step


class FakeClock:
    """Manually advanced microsecond counter."""

    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now

    def advance_ms(self, ms):
        self.now += ms * 1000


def _setup():
    clock = FakeClock()
    generator = backends.RecordingSignalGenerator()
    timer = timer_mod.ElapsedTimer(clock=clock)
    player = player_mod.MelodyPlayer(generator, timer)
    return clock, generator, timer, player


def _two_step_melody():
    return core.Melody([Step(440, 100), Step(0, 50)], 2)


def _finish_first_cycle(clock, player):
    """Drive the two-step melody up to the end of its last step."""

    player.poll()  # START_STEP -> tone
    clock.advance_ms(100)
    player.poll()  # PLAYING_STEP -> ADVANCE_STEP
    player.poll()  # ADVANCE_STEP -> START_STEP
    player.poll()  # START_STEP -> rest
    clock.advance_ms(50)
    player.poll()  # PLAYING_STEP -> ADVANCE_STEP


def test_idle_poll_does_nothing():
    """Polling an idle player never touches the generator."""

    _, generator, _, player = _setup()
    player.poll()

    assert player.state is PlayerState.IDLE
    assert not player.is_playing()
    assert generator.calls == []


def test_play_starts_on_next_poll():
    """``play`` only arms the machine; the tone starts on the next poll."""

    _, generator, timer, player = _setup()
    player.play(_two_step_melody())

    assert player.state is PlayerState.START_STEP
    assert player.is_playing()
    assert generator.calls == []

    player.poll()
    assert generator.calls == [("start", 440)]
    assert player.state is PlayerState.PLAYING_STEP
    assert timer.interval_us == 100_000


def test_step_waits_for_timer():
    """The player stays on a step until its duration has elapsed."""

    clock, _, _, player = _setup()
    player.play(_two_step_melody())
    player.poll()

    clock.advance_ms(99)
    player.poll()
    assert player.state is PlayerState.PLAYING_STEP

    clock.advance_ms(1)
    player.poll()
    assert player.state is PlayerState.ADVANCE_STEP
    player.poll()
    assert player.state is PlayerState.START_STEP
    assert player.index == 1


def test_rest_step_silences_generator():
    """A 0 Hz step stops the generator instead of starting a tone."""

    clock, generator, _, player = _setup()
    player.play(_two_step_melody())
    player.poll()
    clock.advance_ms(100)
    player.poll()
    player.poll()
    player.poll()

    assert generator.calls == [("start", 440), ("stop", None)]


def test_looping_wraps_to_first_step():
    """With ``loop=True`` the last step is followed by the first, not IDLE."""

    clock, generator, _, player = _setup()
    player.play(_two_step_melody(), loop=True)
    _finish_first_cycle(clock, player)

    player.poll()  # ADVANCE_STEP wraps around
    assert player.state is PlayerState.START_STEP
    assert player.index == 0
    assert player.is_playing()

    player.poll()
    assert generator.calls[-1] == ("start", 440)


def test_non_looping_stops_once_at_end():
    """Without looping the player stops the generator exactly once and idles."""

    clock, generator, timer, player = _setup()
    player.play(_two_step_melody())
    _finish_first_cycle(clock, player)
    before = len(generator.calls)

    player.poll()
    assert player.state is PlayerState.IDLE
    assert generator.calls[before:] == [("stop", None)]
    assert player.melody is None
    assert not timer.armed

    player.poll()
    assert len(generator.calls) == before + 1


def test_stop_is_idempotent():
    """Stopping twice leaves the same state as stopping once."""

    _, generator, timer, player = _setup()
    player.play(_two_step_melody(), loop=True)
    player.poll()

    player.stop()
    first = (player.state, player.melody, player.index, player.looping, generator.is_sounding)
    player.stop()
    second = (player.state, player.melody, player.index, player.looping, generator.is_sounding)

    assert first == second == (PlayerState.IDLE, None, 0, False, False)
    assert not timer.armed


def test_stop_from_idle_is_safe():
    """``stop`` on an idle player only silences the generator."""

    _, generator, _, player = _setup()
    player.stop()

    assert player.state is PlayerState.IDLE
    assert generator.calls == [("stop", None)]


def test_play_while_playing_stops_first():
    """Replacing a melody silences the generator before the new one starts."""

    _, generator, _, player = _setup()
    player.play(_two_step_melody())
    player.poll()

    other = core.Melody([Step(880, 10)], 1)
    player.play(other)
    assert generator.calls == [("start", 440), ("stop", None)]
    assert player.melody is other
    assert player.index == 0

    player.poll()
    assert generator.calls[-1] == ("start", 880)


def test_empty_melody_settles_to_idle():
    """A zero-length melody ends on the first poll without error."""

    _, generator, _, player = _setup()
    player.play(core.Melody(), loop=True)
    assert player.is_playing()

    player.poll()
    assert player.state is PlayerState.IDLE
    assert generator.calls == [("stop", None)]


def test_late_poll_delays_but_plays_every_step():
    """A long gap between polls does not skip any step."""

    clock, generator, _, player = _setup()
    melody = core.Melody([Step(440, 10), Step(494, 10), Step(523, 10)], 3)
    player.play(melody)

    while player.is_playing():
        player.poll()
        clock.advance_ms(1000)

    assert generator.calls == [
        ("start", 440),
        ("start", 494),
        ("start", 523),
        ("stop", None),
    ]


def test_player_does_not_modify_melody():
    """Playback leaves the borrowed buffer untouched."""

    clock, _, _, player = _setup()
    buffer = [Step(440, 5), Step(0, 5)]
    snapshot = list(buffer)
    player.play(core.Melody(buffer, 2))
    while player.is_playing():
        player.poll()
        clock.advance_ms(5)

    assert buffer == snapshot
