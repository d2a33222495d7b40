"""Tests for text score parsing and range validation helpers."""

import importlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

utils = importlib.import_module("buzzer_melody.utils")
core = importlib.import_module("buzzer_melody.core")
errors = importlib.import_module("buzzer_melody.errors")

ScoreNote = core.ScoreNote


def test_parse_score_mixed_tokens():
    """Note names, rests, raw Hz and duration names are all accepted."""

    assert utils.parse_score("G5/4 R/8 784/quarter") == [
        ScoreNote(784, 4),
        ScoreNote(0, 8),
        ScoreNote(784, 4),
    ]


def test_parse_score_commas_and_whitespace():
    """Tokens may be separated by commas, spaces or newlines."""

    assert utils.parse_score(" A4/8,\nrest/eighth ,C4/1 ") == [
        ScoreNote(440, 8),
        ScoreNote(0, 8),
        ScoreNote(262, 1),
    ]


@pytest.mark.parametrize("text", ["", "   ", "G5", "G5/", "/4", "G5/0", "G5/256", "70000/4", "G5/long", "X9/4"])
def test_parse_score_rejects_bad_input(text):
    """Empty scores and malformed tokens raise ``InvalidArgument``."""

    with pytest.raises(errors.InvalidArgument):
        utils.parse_score(text)


def test_validate_tempo_and_gap():
    """Validators return in-range values and reject the rest."""

    assert utils.validate_tempo(300) == 300
    assert utils.validate_gap(0) == 0
    with pytest.raises(errors.InvalidArgument):
        utils.validate_tempo(0)
    with pytest.raises(errors.InvalidArgument):
        utils.validate_gap(1001)
