"""Note evaluation — turn a matching into per-note outcomes and tallies."""

from __future__ import annotations

from typing import Sequence

from keygrade.matcher import NoteMatching
from keygrade.models import (
    CapturedNoteEvent,
    ExpectedNote,
    NoteCounts,
    NoteOutcome,
    NoteStatus,
    ScoringConfig,
)
from keygrade.timing import score_timing

# Every status lands in exactly one tally. EARLY/LATE notes were played at the
# right pitch, so they count as attempted (ok) rather than missed.
STATUS_BUCKETS: dict[NoteStatus, str] = {
    NoteStatus.PERFECT: "perfect",
    NoteStatus.GOOD: "good",
    NoteStatus.OK: "ok",
    NoteStatus.EARLY: "ok",
    NoteStatus.LATE: "ok",
    NoteStatus.MISSED: "missed",
    NoteStatus.EXTRA: "extra",
}


def evaluate_note(
    expected: ExpectedNote,
    captured: CapturedNoteEvent,
    ms_per_beat: float,
    config: ScoringConfig,
) -> NoteOutcome:
    """Grade a single matched pair on timing."""
    offset_ms = captured.timestamp_ms - expected.start_beat * ms_per_beat
    timing = score_timing(offset_ms, config.timing_tolerance_ms, config.timing_grace_period_ms)
    return NoteOutcome(
        expected=expected,
        captured=captured,
        timing_offset_ms=offset_ms,
        timing_score=timing.score,
        status=timing.status,
        is_correct_pitch=True,
    )


def missed_note(expected: ExpectedNote) -> NoteOutcome:
    return NoteOutcome(
        expected=expected,
        captured=None,
        timing_offset_ms=0.0,
        timing_score=0.0,
        status=NoteStatus.MISSED,
    )


def extra_note(captured: CapturedNoteEvent) -> NoteOutcome:
    return NoteOutcome(
        expected=None,
        captured=captured,
        timing_offset_ms=0.0,
        timing_score=0.0,
        status=NoteStatus.EXTRA,
    )


def build_note_outcomes(
    expected: Sequence[ExpectedNote],
    captured: Sequence[CapturedNoteEvent],
    matching: NoteMatching,
    ms_per_beat: float,
    config: ScoringConfig,
) -> list[NoteOutcome]:
    """One outcome per expected note (in order), then one per extra captured note."""
    outcomes: list[NoteOutcome] = []
    for exp_idx, note in enumerate(expected):
        cap_idx = matching.captured_for(exp_idx)
        if cap_idx is None:
            outcomes.append(missed_note(note))
        else:
            outcomes.append(evaluate_note(note, captured[cap_idx], ms_per_beat, config))

    for cap_idx in matching.extras:
        outcomes.append(extra_note(captured[cap_idx]))
    return outcomes


def summarize_outcomes(outcomes: Sequence[NoteOutcome]) -> NoteCounts:
    """Tally outcomes by status bucket in a single pass."""
    tally = {bucket: 0 for bucket in set(STATUS_BUCKETS.values())}
    for outcome in outcomes:
        tally[STATUS_BUCKETS[outcome.status]] += 1
    return NoteCounts(**tally)
