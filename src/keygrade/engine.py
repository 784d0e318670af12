"""Score a completed attempt at an exercise."""

from __future__ import annotations

import logging
from typing import Sequence

from keygrade.evaluator import build_note_outcomes, summarize_outcomes
from keygrade.matcher import match_notes
from keygrade.models import CapturedNoteEvent, Exercise, ScoreResult
from keygrade.scoring import (
    calculate_breakdown,
    calculate_final_score,
    calculate_stars,
    calculate_xp,
    is_passed,
)

logger = logging.getLogger(__name__)


def score_attempt(
    exercise: Exercise,
    captured_events: Sequence[CapturedNoteEvent],
    previous_high_score: float = 0.0,
) -> ScoreResult:
    """Score one attempt. Pure: identical inputs give an equal ScoreResult.

    A three-star attempt counts as a perfect run for the XP bonus.
    ``previous_high_score`` only decides ``is_new_high_score`` and whether the
    first-completion XP bonus applies (no prior score above zero).
    """
    ms_per_beat = exercise.ms_per_beat
    matching = match_notes(exercise.notes, captured_events, ms_per_beat)
    outcomes = build_note_outcomes(
        exercise.notes, captured_events, matching, ms_per_beat, exercise.scoring
    )

    breakdown = calculate_breakdown(outcomes, len(exercise.notes))
    overall = calculate_final_score(
        breakdown.accuracy, breakdown.timing, breakdown.completeness, breakdown.precision
    )
    stars = calculate_stars(overall, exercise.scoring.star_thresholds)
    xp = calculate_xp(
        stars,
        is_first_attempt=previous_high_score <= 0,
        is_perfect_run=stars == 3,
    )

    logger.debug(
        "Scored %s: overall=%.2f stars=%d matched=%d/%d extras=%d",
        exercise.id, overall, stars, len(matching.pairs), len(exercise.notes),
        len(matching.extras),
    )

    return ScoreResult(
        overall=overall,
        stars=stars,
        breakdown=breakdown,
        outcomes=tuple(outcomes),
        counts=summarize_outcomes(outcomes),
        xp_earned=xp,
        is_passed=is_passed(overall, exercise.scoring.passing_score),
        is_new_high_score=overall > previous_high_score,
    )
