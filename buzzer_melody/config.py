"""Persistent user settings for the player.

Settings live in a small JSON file in the user's home directory so the CLI
remembers the preferred tempo, gap and backend between runs. The location can
be changed with the ``BUZZER_MELODY_SETTINGS`` environment variable. Values
from the file are merged over :class:`PlayerSettings` defaults and command
line flags override both.

Example settings file::

    {"bpm": 96, "gap_ms": 15, "backend": "fluidsynth", "capacity": 128}
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .backends import BACKENDS
from .errors import InvalidArgument
from .utils import validate_gap, validate_tempo

__all__ = [
    "DEFAULT_SETTINGS_FILE",
    "PlayerSettings",
    "load_settings",
    "save_settings",
]

logger = logging.getLogger(__name__)

env_path = os.environ.get("BUZZER_MELODY_SETTINGS")
if env_path:
    DEFAULT_SETTINGS_FILE = Path(env_path).expanduser()
else:
    DEFAULT_SETTINGS_FILE = Path.home() / ".buzzer_melody_settings.json"


@dataclass
class PlayerSettings:
    """Options used to wire an :class:`~buzzer_melody.app.AppContext`."""

    capacity: int = 64
    bpm: int = 120
    gap_ms: int = 0
    loop: bool = False
    backend: str = "null"
    soundfont: Optional[str] = None
    poll_interval_ms: float = 1.0

    def validate(self) -> "PlayerSettings":
        """Return ``self`` after checking every field, else raise ``InvalidArgument``."""

        for name in ("capacity", "bpm", "gap_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgument(f"{name} must be an integer, got {value!r}")
        if self.capacity <= 0:
            raise InvalidArgument("capacity must be a positive number of steps")
        validate_tempo(self.bpm)
        validate_gap(self.gap_ms)
        if self.backend not in BACKENDS:
            raise InvalidArgument(
                f"backend must be one of {', '.join(BACKENDS)}, got {self.backend!r}"
            )
        if not isinstance(self.poll_interval_ms, (int, float)) or self.poll_interval_ms < 0:
            raise InvalidArgument("poll_interval_ms must be non-negative")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerSettings":
        """Build settings from ``data``, ignoring unknown keys."""

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known}).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(path: Path = DEFAULT_SETTINGS_FILE) -> dict:
    """Load saved settings from ``path``; an empty dict when unavailable."""

    path = Path(path)
    if path.is_file():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.error("Could not load settings: %s", exc)
            return {}
        if not isinstance(data, dict):
            logger.error("Settings file %s does not contain an object", path)
            return {}
        return data
    return {}


def save_settings(settings: dict, path: Path = DEFAULT_SETTINGS_FILE) -> None:
    """Save ``settings`` to ``path`` as JSON; failures are logged only."""

    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2)
    except OSError as exc:
        logger.error("Could not save settings: %s", exc)
