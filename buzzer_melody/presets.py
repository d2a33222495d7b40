"""Built-in scores for common interface sounds.

Each preset is a module-level tuple of :class:`~buzzer_melody.core.ScoreNote`
so it cannot be modified, and :func:`get_preset` hands out a
:class:`~buzzer_melody.core.ScoreView` over it without copying.

Example
-------
>>> from buzzer_melody.builder import MelodyBuilder
>>> from buzzer_melody.core import make_step_buffer
>>> melody = (
...     MelodyBuilder(make_step_buffer(32))
...     .set_tempo(120)
...     .append_score(get_preset(PresetId.SUCCESS))
...     .build()
... )
>>> len(melody)
4
"""

from __future__ import annotations

import enum
from typing import Dict, Tuple

from .core import ScoreNote, ScoreView
from .durations import EIGHTH, HALF, QUARTER, SIXTEENTH
from .note_utils import note_to_hz

__all__ = ["PresetId", "PRESETS", "get_preset", "get_preset_by_name", "preset_names"]


class PresetId(enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    NOTIFICATION = "notification"
    WARNING = "warning"
    STARTUP = "startup"
    SHUTDOWN = "shutdown"
    BUTTON_CLICK = "button_click"


def _score(*notes: Tuple[str, int]) -> Tuple[ScoreNote, ...]:
    return tuple(ScoreNote(note_to_hz(name), duration) for name, duration in notes)


PRESETS: Dict[PresetId, Tuple[ScoreNote, ...]] = {
    # Rising major arpeggio resolving up an octave.
    PresetId.SUCCESS: _score(("C5", EIGHTH), ("E5", EIGHTH), ("G5", QUARTER), ("C6", HALF)),
    # The same shape falling through an augmented chord.
    PresetId.ERROR: _score(("C6", EIGHTH), ("G#5", EIGHTH), ("E5", QUARTER), ("C5", HALF)),
    PresetId.NOTIFICATION: _score(
        ("E5", SIXTEENTH), ("G5", SIXTEENTH), ("C6", EIGHTH), ("G5", EIGHTH)
    ),
    PresetId.WARNING: _score(
        ("C5", EIGHTH), ("D5", EIGHTH), ("E5", EIGHTH), ("D5", EIGHTH), ("C5", QUARTER)
    ),
    PresetId.STARTUP: _score(
        ("G4", EIGHTH), ("C5", EIGHTH), ("E5", EIGHTH), ("G5", EIGHTH), ("C6", QUARTER)
    ),
    PresetId.SHUTDOWN: _score(
        ("C6", QUARTER), ("G5", EIGHTH), ("E5", EIGHTH), ("C5", EIGHTH), ("G4", EIGHTH)
    ),
    PresetId.BUTTON_CLICK: _score(("E5", SIXTEENTH), ("G5", SIXTEENTH)),
}


def get_preset(preset_id: PresetId) -> ScoreView:
    """Return a read-only view over the score for ``preset_id``."""

    return ScoreView(PRESETS[preset_id])


def get_preset_by_name(name: str) -> ScoreView:
    """Look up a preset by case-insensitive name such as ``"button-click"``.

    Raises
    ------
    ValueError
        If ``name`` does not match any preset.
    """

    key = name.strip().lower().replace("-", "_")
    try:
        return get_preset(PresetId(key))
    except ValueError:
        raise ValueError(f"Unknown preset: {name}") from None


def preset_names() -> Tuple[str, ...]:
    return tuple(preset.value for preset in PresetId)
