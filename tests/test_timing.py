"""Tests for the timing quality curve."""

import math

import pytest

from keygrade.models import NoteStatus
from keygrade.timing import score_timing, score_timing_for_difficulty, timing_config_for_difficulty


@pytest.mark.parametrize("tolerance,grace", [(1, 2), (25, 75), (75, 200), (0.5, 1000)])
def test_zero_offset_is_perfect(tolerance, grace):
    result = score_timing(0, tolerance, grace)
    assert result.score == 100
    assert result.status == NoteStatus.PERFECT


def test_within_tolerance_is_perfect():
    assert score_timing(25, 25, 75).status == NoteStatus.PERFECT
    assert score_timing(-25, 25, 75).score == 100


def test_good_ramp_is_linear():
    result = score_timing(50, 25, 75)
    assert result.status == NoteStatus.GOOD
    assert result.score == pytest.approx(85.0)
    assert score_timing(-75, 25, 75).score == pytest.approx(70.0)


def test_ok_band_decays_exponentially():
    result = score_timing(150, 25, 75)
    assert result.status == NoteStatus.OK
    assert result.score == pytest.approx(70 * math.exp(-1))
    assert score_timing(100, 25, 75).score < score_timing(80, 25, 75).score


def test_far_late_and_early():
    late = score_timing(400, 25, 75)
    assert (late.score, late.status) == (0, NoteStatus.LATE)
    early = score_timing(-200, 25, 75)
    assert (early.score, early.status) == (0, NoteStatus.EARLY)


def test_score_never_increases_with_offset():
    scores = [score_timing(ms, 25, 75).score for ms in range(0, 301, 5)]
    assert all(a >= b for a, b in zip(scores, scores[1:]))
    assert all(0 <= s <= 100 for s in scores)


def test_difficulty_presets_get_stricter():
    assert score_timing_for_difficulty(60, 1).status == NoteStatus.PERFECT
    assert score_timing_for_difficulty(60, 5).status == NoteStatus.GOOD


def test_unknown_difficulty_uses_medium():
    assert score_timing_for_difficulty(90, 9) == score_timing_for_difficulty(90, 3)


def test_timing_config_for_difficulty():
    config = timing_config_for_difficulty(4, passing_score=60)
    assert config.timing_tolerance_ms == 30
    assert config.timing_grace_period_ms == 100
    assert config.passing_score == 60
