"""Global constants and default scoring settings."""

from pathlib import Path

# Piano range (standard 88 keys: A0 = MIDI 21, C8 = MIDI 108)
MIDI_NOTE_MIN = 21
MIDI_NOTE_MAX = 108

DEFAULT_TEMPO_BPM = 120.0

# Note matching: a captured note must land strictly inside this window
MATCH_WINDOW_MS = 200.0

# Timing curve (milliseconds)
DEFAULT_TIMING_TOLERANCE_MS = 25.0
DEFAULT_TIMING_GRACE_PERIOD_MS = 75.0
GOOD_SCORE_FLOOR = 70.0  # score at the end of the linear "good" ramp

# Difficulty -> (tolerance_ms, grace_period_ms); stricter as difficulty rises
DIFFICULTY_TIMING: dict[int, tuple[float, float]] = {
    1: (75.0, 200.0),
    2: (50.0, 150.0),
    3: (40.0, 125.0),
    4: (30.0, 100.0),
    5: (20.0, 75.0),
}
DEFAULT_DIFFICULTY = 3

# Pass / star cutoffs on the 0-100 overall score
DEFAULT_PASSING_SCORE = 70.0
DEFAULT_STAR_THRESHOLDS: tuple[float, float, float] = (70.0, 85.0, 95.0)

# Breakdown
EXTRA_NOTE_PENALTY = 5.0
PRECISION_FLOOR = 50.0

SCORE_WEIGHTS: dict[str, float] = {
    "accuracy": 0.40,
    "timing": 0.35,
    "completeness": 0.15,
    "precision": 0.10,
}

# XP payout
BASE_XP = 10
STAR_XP_BONUS = 5
PERFECT_RUN_XP_BONUS = 50
FIRST_COMPLETION_XP_BONUS = 25

# Content validation warnings
TYPICAL_TOLERANCE_RANGE_MS: tuple[float, float] = (25.0, 100.0)

DEFAULT_DB_PATH = Path.home() / ".keygrade" / "progress.db"
