"""Data types describing scores and compiled melodies.

A *score* is what a musician writes: pitches with tempo-relative durations.
A *compiled melody* is what the signal generator plays: a flat list of
:class:`Step` objects holding a frequency and an absolute duration in
milliseconds. ``frequency_hz == 0`` denotes silence.

Example
-------
>>> buffer = make_step_buffer(4)
>>> buffer[0] = Step(440, 500)
>>> melody = Melody(buffer, 1)
>>> [step.frequency_hz for step in melody]
[440]

Both :class:`Melody` and :class:`ScoreView` are *borrowed views*: they keep a
reference to storage owned by someone else plus a count, and never copy it.
The owner must keep the storage alive and unmodified while a view is in use,
in particular while a :class:`~buzzer_melody.player.MelodyPlayer` is playing.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

__all__ = [
    "MAX_FREQUENCY_HZ",
    "MAX_DURATION_MS",
    "Step",
    "SILENT_STEP",
    "Melody",
    "ScoreNote",
    "ScoreView",
    "MelodyContext",
    "PlayerState",
    "make_step_buffer",
]

# Frequencies are stored in 16 bits and step durations in 32 bits on the
# target hardware, so the same ranges are enforced here.
MAX_FREQUENCY_HZ = 0xFFFF
MAX_DURATION_MS = 0xFFFFFFFF


@dataclass(frozen=True)
class Step:
    """One interval of constant frequency (tone) or silence (rest)."""

    frequency_hz: int
    duration_ms: int

    @property
    def is_rest(self) -> bool:
        return self.frequency_hz == 0


# Placeholder used to pre-fill step buffers.
SILENT_STEP = Step(0, 0)


def make_step_buffer(capacity: int) -> List[Step]:
    """Return a preallocated buffer able to hold ``capacity`` steps.

    The list never grows; :class:`~buzzer_melody.builder.MelodyBuilder`
    overwrites its slots in place so the same buffer can be reused across
    compilations.
    """

    if capacity < 0:
        raise ValueError("capacity must be non-negative")
    return [SILENT_STEP] * capacity


@dataclass(frozen=True)
class Melody:
    """Read-only view over the first ``count`` steps of ``steps``."""

    steps: Sequence[Step] = field(default=(), repr=False)
    count: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.count <= len(self.steps):
            raise ValueError(
                f"count {self.count} outside the backing storage of {len(self.steps)} steps"
            )

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Step]:
        for index in range(self.count):
            yield self.steps[index]

    def __getitem__(self, index: int) -> Step:
        if index < 0:
            index += self.count
        if not 0 <= index < self.count:
            raise IndexError("melody step index out of range")
        return self.steps[index]

    def total_duration_ms(self) -> int:
        """Return the summed duration of all steps in milliseconds."""

        return sum(step.duration_ms for step in self)


@dataclass(frozen=True)
class ScoreNote:
    """A note in a score.

    ``duration`` is the notated denominator: ``1`` for a whole note, ``4`` for
    a quarter, ``32`` for a thirty-second. ``frequency_hz`` is ``0`` for a rest.
    """

    frequency_hz: int
    duration: int


@dataclass(frozen=True)
class ScoreView:
    """Borrowed, read-only view over a score table.

    When ``count`` is omitted the whole of ``data`` is viewed.
    """

    data: Sequence[ScoreNote] = field(default=(), repr=False)
    count: Optional[int] = None

    def __post_init__(self) -> None:
        if self.count is None:
            # Frozen dataclasses need ``object.__setattr__`` to fill defaults.
            object.__setattr__(self, "count", len(self.data))
        elif not 0 <= self.count <= len(self.data):
            raise ValueError(
                f"count {self.count} outside the backing score of {len(self.data)} notes"
            )

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[ScoreNote]:
        for index in range(self.count):
            yield self.data[index]


@dataclass
class MelodyContext:
    """Mutable compilation settings used by the builder."""

    bpm: int = 120
    gap_ms: int = 0

    MIN_BPM = 1
    MAX_BPM = 300
    MAX_GAP_MS = 1000
    # Shortest tone still audible as a pitch; gap splitting never goes below it.
    MIN_PLAYABLE_MS = 10


class PlayerState(enum.Enum):
    """States of the playback scheduler."""

    IDLE = "idle"
    START_STEP = "start_step"
    PLAYING_STEP = "playing_step"
    ADVANCE_STEP = "advance_step"
