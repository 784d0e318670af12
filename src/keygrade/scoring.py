"""Score arithmetic: breakdown dimensions, weighted overall, stars and XP."""

from __future__ import annotations

from typing import Sequence

from keygrade.config import (
    BASE_XP,
    EXTRA_NOTE_PENALTY,
    FIRST_COMPLETION_XP_BONUS,
    PERFECT_RUN_XP_BONUS,
    PRECISION_FLOOR,
    SCORE_WEIGHTS,
    STAR_XP_BONUS,
)
from keygrade.models import Breakdown, NoteOutcome, NoteStatus


def calculate_accuracy(correct_notes: int, total_expected: int) -> float:
    """Percentage of expected notes played at the right pitch; 100 if nothing was expected."""
    if total_expected <= 0:
        return 100.0
    return correct_notes / total_expected * 100.0


def calculate_completeness(attempted_notes: int, total_expected: int) -> float:
    if total_expected <= 0:
        return 100.0
    return attempted_notes / total_expected * 100.0


def calculate_average_timing(timing_scores: Sequence[float]) -> float:
    if not timing_scores:
        return 0.0
    return sum(timing_scores) / len(timing_scores)


def calculate_precision(extra_notes: int, penalty_per_extra: float = EXTRA_NOTE_PENALTY) -> float:
    """Penalty for unexpected notes, floored so stray notes are never catastrophic."""
    return max(PRECISION_FLOOR, 100.0 - extra_notes * penalty_per_extra)


def calculate_breakdown(
    outcomes: Sequence[NoteOutcome],
    total_expected: int,
    penalty_per_extra: float = EXTRA_NOTE_PENALTY,
) -> Breakdown:
    matched = [
        o for o in outcomes
        if o.status not in (NoteStatus.MISSED, NoteStatus.EXTRA)
    ]
    correct = sum(1 for o in matched if o.is_correct_pitch)
    extras = sum(1 for o in outcomes if o.status == NoteStatus.EXTRA)

    return Breakdown(
        accuracy=calculate_accuracy(correct, total_expected),
        timing=calculate_average_timing([o.timing_score for o in matched]),
        completeness=calculate_completeness(len(matched), total_expected),
        precision=calculate_precision(extras, penalty_per_extra),
    )


def calculate_final_score(
    accuracy: float,
    timing: float,
    completeness: float,
    precision: float,
) -> float:
    """Weighted overall score, rounded to 2 decimal places."""
    score = (
        accuracy * SCORE_WEIGHTS["accuracy"]
        + timing * SCORE_WEIGHTS["timing"]
        + completeness * SCORE_WEIGHTS["completeness"]
        + precision * SCORE_WEIGHTS["precision"]
    )
    return round(score, 2)


def calculate_stars(overall: float, thresholds: Sequence[float]) -> int:
    one, two, three = thresholds
    if overall >= three:
        return 3
    if overall >= two:
        return 2
    if overall >= one:
        return 1
    return 0


def is_passed(overall: float, passing_score: float) -> bool:
    return overall >= passing_score


def calculate_xp(stars: int, is_first_attempt: bool = False, is_perfect_run: bool = False) -> int:
    """XP payout: base + per-star bonus + perfect-run and first-completion bonuses."""
    xp = BASE_XP + stars * STAR_XP_BONUS
    if is_perfect_run:
        xp += PERFECT_RUN_XP_BONUS
    if is_first_attempt:
        xp += FIRST_COMPLETION_XP_BONUS
    return xp
