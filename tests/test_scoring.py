"""Tests for breakdown, overall score, stars and XP."""

import pytest

from keygrade.models import CapturedNoteEvent, ExpectedNote, NoteOutcome, NoteStatus
from keygrade.scoring import (
    calculate_accuracy,
    calculate_average_timing,
    calculate_breakdown,
    calculate_completeness,
    calculate_final_score,
    calculate_precision,
    calculate_stars,
    calculate_xp,
    is_passed,
)

NOTE = ExpectedNote(pitch=60, start_beat=0, duration_beats=1)
EVENT = CapturedNoteEvent(pitch=60, velocity=80, timestamp_ms=0)


def _matched(score, status=NoteStatus.PERFECT):
    return NoteOutcome(NOTE, EVENT, 0.0, score, status, is_correct_pitch=True)


def _missed():
    return NoteOutcome(NOTE, None, 0.0, 0.0, NoteStatus.MISSED)


def _extra():
    return NoteOutcome(None, EVENT, 0.0, 0.0, NoteStatus.EXTRA)


def test_accuracy_with_nothing_expected():
    assert calculate_accuracy(0, 0) == 100
    assert calculate_completeness(0, 0) == 100


def test_accuracy_ratio():
    assert calculate_accuracy(3, 4) == 75
    assert calculate_completeness(1, 4) == 25


def test_average_timing_with_no_matches():
    assert calculate_average_timing([]) == 0


def test_precision_penalty_and_floor():
    assert calculate_precision(0) == 100
    assert calculate_precision(2) == 90
    assert calculate_precision(100) == 50
    assert calculate_precision(3, penalty_per_extra=10) == 70


def test_breakdown_mixed():
    outcomes = [_matched(100), _matched(70, NoteStatus.GOOD), _missed(), _missed(), _extra()]
    breakdown = calculate_breakdown(outcomes, total_expected=4)
    assert breakdown.accuracy == 50
    assert breakdown.completeness == 50
    assert breakdown.timing == 85
    assert breakdown.precision == 95


def test_breakdown_late_note_counts_as_attempted():
    breakdown = calculate_breakdown([_matched(0, NoteStatus.LATE)], total_expected=1)
    assert breakdown.completeness == 100
    assert breakdown.timing == 0


def test_final_score_weights():
    assert calculate_final_score(100, 100, 100, 100) == 100
    assert calculate_final_score(100, 0, 0, 0) == 40
    assert calculate_final_score(0, 100, 0, 0) == 35
    assert calculate_final_score(0, 0, 100, 0) == 15
    assert calculate_final_score(0, 0, 0, 100) == 10


def test_final_score_two_decimals():
    assert calculate_final_score(33.333, 66.667, 12.345, 99.999) == round(
        33.333 * 0.4 + 66.667 * 0.35 + 12.345 * 0.15 + 99.999 * 0.1, 2
    )


def test_stars_at_thresholds():
    thresholds = (70, 85, 95)
    assert calculate_stars(69.99, thresholds) == 0
    assert calculate_stars(70, thresholds) == 1
    assert calculate_stars(85, thresholds) == 2
    assert calculate_stars(95, thresholds) == 3
    assert calculate_stars(100, thresholds) == 3


def test_stars_monotonic():
    stars = [calculate_stars(x / 10, (60, 80, 90)) for x in range(0, 1001)]
    assert all(a <= b for a, b in zip(stars, stars[1:]))


def test_is_passed():
    assert is_passed(70, 70)
    assert not is_passed(69.99, 70)


def test_xp_baseline():
    assert calculate_xp(stars=0, is_first_attempt=False, is_perfect_run=False) == 10


@pytest.mark.parametrize("kwargs", [
    {"stars": 1},
    {"stars": 0, "is_perfect_run": True},
    {"stars": 0, "is_first_attempt": True},
])
def test_xp_bonuses_increase_payout(kwargs):
    assert calculate_xp(**kwargs) > calculate_xp(stars=0)


def test_xp_orderings():
    for stars in range(3):
        assert calculate_xp(stars + 1) >= calculate_xp(stars)
        assert calculate_xp(stars, is_perfect_run=True) > calculate_xp(stars)
        assert calculate_xp(stars, is_first_attempt=True) > calculate_xp(stars)
    assert calculate_xp(3, is_first_attempt=True, is_perfect_run=True) == 10 + 15 + 50 + 25
