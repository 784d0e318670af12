"""Timing quality curve: offset in milliseconds -> 0-100 score."""

from __future__ import annotations

import math

from keygrade.config import (
    DEFAULT_DIFFICULTY,
    DEFAULT_PASSING_SCORE,
    DEFAULT_STAR_THRESHOLDS,
    DEFAULT_TIMING_GRACE_PERIOD_MS,
    DEFAULT_TIMING_TOLERANCE_MS,
    DIFFICULTY_TIMING,
    GOOD_SCORE_FLOOR,
)
from keygrade.models import NoteStatus, ScoringConfig, TimingResult


def score_timing(
    offset_ms: float,
    tolerance_ms: float = DEFAULT_TIMING_TOLERANCE_MS,
    grace_period_ms: float = DEFAULT_TIMING_GRACE_PERIOD_MS,
) -> TimingResult:
    """Grade a timing offset (captured - expected, negative = early).

    Score curve:
        within tolerance         -> 100 (PERFECT)
        tolerance .. grace       -> linear 100 down to 70 (GOOD)
        grace .. 2 * grace       -> 70 * e^-((a - grace) / grace) (OK)
        beyond 2 * grace         -> 0 (EARLY or LATE)
    """
    abs_offset = abs(offset_ms)

    if abs_offset <= tolerance_ms:
        return TimingResult(score=100.0, status=NoteStatus.PERFECT)

    if abs_offset <= grace_period_ms:
        ramp = grace_period_ms - tolerance_ms
        decay = (abs_offset - tolerance_ms) / ramp * (100.0 - GOOD_SCORE_FLOOR)
        return TimingResult(score=max(0.0, 100.0 - decay), status=NoteStatus.GOOD)

    if abs_offset <= grace_period_ms * 2:
        score = GOOD_SCORE_FLOOR * math.exp(-(abs_offset - grace_period_ms) / grace_period_ms)
        return TimingResult(score=max(0.0, score), status=NoteStatus.OK)

    status = NoteStatus.LATE if offset_ms > 0 else NoteStatus.EARLY
    return TimingResult(score=0.0, status=status)


def _difficulty_window(difficulty: int) -> tuple[float, float]:
    return DIFFICULTY_TIMING.get(difficulty, DIFFICULTY_TIMING[DEFAULT_DIFFICULTY])


def score_timing_for_difficulty(offset_ms: float, difficulty: int) -> TimingResult:
    """Grade an offset with the tolerance/grace preset for a 1-5 difficulty."""
    tolerance, grace = _difficulty_window(difficulty)
    return score_timing(offset_ms, tolerance, grace)


def timing_config_for_difficulty(
    difficulty: int,
    passing_score: float = DEFAULT_PASSING_SCORE,
    star_thresholds: tuple[float, float, float] = DEFAULT_STAR_THRESHOLDS,
) -> ScoringConfig:
    """Build a ScoringConfig whose timing windows follow the difficulty preset."""
    tolerance, grace = _difficulty_window(difficulty)
    return ScoringConfig(
        timing_tolerance_ms=tolerance,
        timing_grace_period_ms=grace,
        passing_score=passing_score,
        star_thresholds=star_thresholds,
    )
