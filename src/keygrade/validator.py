"""Structural checks on exercise definitions, run once when content is loaded."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from keygrade.config import DIFFICULTY_TIMING, MIDI_NOTE_MAX, MIDI_NOTE_MIN, TYPICAL_TOLERANCE_RANGE_MS
from keygrade.models import Exercise

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.valid = False


def _check_notes(exercise: Exercise, result: ValidationResult) -> None:
    if not exercise.notes:
        result.add_error("Exercise must have at least one note")
    for i, note in enumerate(exercise.notes):
        if not MIDI_NOTE_MIN <= note.pitch <= MIDI_NOTE_MAX:
            result.add_error(
                f"Note {i}: MIDI note {note.pitch} is outside piano range "
                f"({MIDI_NOTE_MIN}-{MIDI_NOTE_MAX})"
            )
        if note.start_beat < 0:
            result.add_error(f"Note {i}: start_beat cannot be negative")
        if note.duration_beats <= 0:
            result.add_error(f"Note {i}: duration_beats must be positive")


def _check_scoring(exercise: Exercise, result: ValidationResult) -> None:
    scoring = exercise.scoring
    if not 0 <= scoring.passing_score <= 100:
        result.add_error("Passing score must be between 0 and 100")

    if scoring.timing_tolerance_ms <= 0:
        result.add_error("Timing tolerance must be positive")
    if scoring.timing_grace_period_ms <= scoring.timing_tolerance_ms:
        result.add_error("Timing grace period must be greater than timing tolerance")

    lo, hi = TYPICAL_TOLERANCE_RANGE_MS
    if scoring.timing_tolerance_ms > 0 and not lo <= scoring.timing_tolerance_ms <= hi:
        result.warnings.append(
            f"Timing tolerance {scoring.timing_tolerance_ms:g}ms seems extreme. "
            f"Typical range: {lo:g}-{hi:g}ms"
        )

    thresholds = tuple(scoring.star_thresholds)
    if len(thresholds) != 3:
        result.add_error("Star thresholds must have exactly three values")
        return
    one, two, three = thresholds
    if not (one < two < three):
        result.add_error("Star thresholds must be in ascending order")
    if any(not 0 <= t <= 100 for t in thresholds):
        result.add_error("Star thresholds must be between 0 and 100")
    if one < scoring.passing_score:
        result.warnings.append(
            f"First star threshold ({one:g}) is less than passing score ({scoring.passing_score:g})"
        )


def validate_exercise(exercise: Exercise) -> ValidationResult:
    """Check an exercise definition. Never raises and never modifies the exercise."""
    result = ValidationResult()

    if not exercise.id:
        result.add_error("Exercise must have an id")
    if not exercise.title:
        result.add_error("Exercise must have a title")
    if exercise.settings.tempo_bpm <= 0:
        result.add_error("Tempo must be positive")
    if exercise.metadata.difficulty not in DIFFICULTY_TIMING:
        result.warnings.append(
            f"Difficulty {exercise.metadata.difficulty} is outside 1-5"
        )

    _check_notes(exercise, result)
    _check_scoring(exercise, result)
    return result


def validate_exercise_set(exercises: Iterable[Exercise]) -> dict[str, ValidationResult]:
    """Validate a body of content: each exercise, plus ids and prerequisites across the set.

    Exercises sharing an id are reported under that id once, flagged as duplicates.
    """
    exercises = list(exercises)
    id_counts = Counter(ex.id for ex in exercises)
    known_ids = set(id_counts)
    results: dict[str, ValidationResult] = {}

    for exercise in exercises:
        if exercise.id in results:
            continue
        result = validate_exercise(exercise)
        if id_counts[exercise.id] > 1:
            result.add_error(
                f"Exercise id {exercise.id!r} is used by {id_counts[exercise.id]} exercises"
            )
        for prereq in exercise.metadata.prerequisites:
            if prereq not in known_ids:
                result.add_error(f"Prerequisite references non-existent exercise: {prereq}")
        for warning in result.warnings:
            logger.info("%s: %s", exercise.id, warning)
        results[exercise.id] = result

    return results


def get_expected_note_sequence(exercise: Exercise) -> list[int]:
    return [note.pitch for note in exercise.notes]
