"""Core data models shared across the scoring engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from keygrade.config import (
    DEFAULT_PASSING_SCORE,
    DEFAULT_STAR_THRESHOLDS,
    DEFAULT_TEMPO_BPM,
    DEFAULT_TIMING_GRACE_PERIOD_MS,
    DEFAULT_TIMING_TOLERANCE_MS,
)


class NoteStatus(Enum):
    PERFECT = auto()
    GOOD = auto()
    OK = auto()
    EARLY = auto()
    LATE = auto()
    MISSED = auto()
    EXTRA = auto()


class Hand(Enum):
    LEFT = auto()
    RIGHT = auto()


@dataclass(frozen=True)
class ExpectedNote:
    """A single note an exercise asks the learner to play."""

    pitch: int  # MIDI note number 0-127
    start_beat: float  # beats from exercise start
    duration_beats: float
    hand: Hand | None = None
    finger: int | None = None  # 1 (thumb) - 5


@dataclass(frozen=True)
class CapturedNoteEvent:
    """A note-on captured from the learner's instrument."""

    pitch: int
    velocity: int
    timestamp_ms: float  # ms from exercise start


@dataclass(frozen=True)
class ScoringConfig:
    timing_tolerance_ms: float = DEFAULT_TIMING_TOLERANCE_MS
    timing_grace_period_ms: float = DEFAULT_TIMING_GRACE_PERIOD_MS
    passing_score: float = DEFAULT_PASSING_SCORE
    star_thresholds: tuple[float, float, float] = DEFAULT_STAR_THRESHOLDS


@dataclass(frozen=True)
class ExerciseSettings:
    tempo_bpm: float = DEFAULT_TEMPO_BPM
    time_signature: tuple[int, int] = (4, 4)
    key_signature: str = "C"
    count_in: int = 4


@dataclass(frozen=True)
class ExerciseMetadata:
    title: str = ""
    description: str = ""
    difficulty: int = 1  # 1-5
    skills: tuple[str, ...] = ()
    prerequisites: tuple[str, ...] = ()  # exercise ids


@dataclass(frozen=True)
class Exercise:
    """A timed note sequence plus the rules used to score attempts at it."""

    id: str
    metadata: ExerciseMetadata = field(default_factory=ExerciseMetadata)
    settings: ExerciseSettings = field(default_factory=ExerciseSettings)
    notes: tuple[ExpectedNote, ...] = ()
    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def ms_per_beat(self) -> float:
        if self.settings.tempo_bpm <= 0:
            return 0.0
        return 60_000.0 / self.settings.tempo_bpm


@dataclass(frozen=True)
class TimingResult:
    score: float  # 0-100
    status: NoteStatus


@dataclass(frozen=True)
class NoteOutcome:
    """Scored result for one expected note, or for one unexpected captured note."""

    expected: ExpectedNote | None  # None for EXTRA
    captured: CapturedNoteEvent | None  # None for MISSED
    timing_offset_ms: float  # negative = early, positive = late
    timing_score: float
    status: NoteStatus
    is_correct_pitch: bool = False


@dataclass(frozen=True)
class Breakdown:
    accuracy: float = 0.0
    timing: float = 0.0
    completeness: float = 0.0
    precision: float = 0.0


@dataclass(frozen=True)
class NoteCounts:
    perfect: int = 0
    good: int = 0
    ok: int = 0
    missed: int = 0
    extra: int = 0


@dataclass(frozen=True)
class ScoreResult:
    overall: float
    stars: int
    breakdown: Breakdown
    outcomes: tuple[NoteOutcome, ...]
    counts: NoteCounts
    xp_earned: int
    is_passed: bool
    is_new_high_score: bool
