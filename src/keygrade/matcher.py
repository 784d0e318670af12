"""Pair expected notes with captured note events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from keygrade.config import MATCH_WINDOW_MS
from keygrade.models import CapturedNoteEvent, ExpectedNote


@dataclass
class NoteMatching:
    pairs: dict[int, int] = field(default_factory=dict)  # expected index -> captured index
    extras: list[int] = field(default_factory=list)  # unconsumed captured indices, in capture order

    def captured_for(self, expected_idx: int) -> int | None:
        return self.pairs.get(expected_idx)


def match_notes(
    expected: Sequence[ExpectedNote],
    captured: Sequence[CapturedNoteEvent],
    ms_per_beat: float,
    match_window_ms: float = MATCH_WINDOW_MS,
) -> NoteMatching:
    """Greedily match each expected note to the closest same-pitch captured note.

    Expected notes are visited in their given order, so when two expected
    notes of the same pitch compete for one captured note the earlier one
    wins. This is not an optimal assignment; exercises are short and
    same-pitch collisions within the window are rare.

    A captured note is consumed at most once. Its distance to the expected
    time must be strictly below ``match_window_ms``; ties keep the earliest
    captured note.
    """
    matching = NoteMatching()
    consumed: set[int] = set()

    for exp_idx, note in enumerate(expected):
        expected_time_ms = note.start_beat * ms_per_beat
        best_idx: int | None = None
        best_distance = float("inf")

        for cap_idx, event in enumerate(captured):
            if cap_idx in consumed or event.pitch != note.pitch:
                continue
            distance = abs(event.timestamp_ms - expected_time_ms)
            if distance < match_window_ms and distance < best_distance:
                best_distance = distance
                best_idx = cap_idx

        if best_idx is not None:
            consumed.add(best_idx)
            matching.pairs[exp_idx] = best_idx

    matching.extras = [i for i in range(len(captured)) if i not in consumed]
    return matching
