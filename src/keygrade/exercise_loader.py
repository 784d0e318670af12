"""Load exercises and recorded performances from JSON, MIDI and MusicXML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import mido

from keygrade.config import DEFAULT_TEMPO_BPM
from keygrade.models import (
    CapturedNoteEvent,
    Exercise,
    ExerciseMetadata,
    ExerciseSettings,
    ExpectedNote,
    Hand,
    ScoringConfig,
)

logger = logging.getLogger(__name__)

EXERCISE_SUFFIXES = (".json", ".mid", ".midi", ".xml", ".mxl", ".musicxml")


class ExerciseLoadError(Exception):
    """Raised when an exercise or performance file cannot be parsed."""


def load_exercise(file_path: str | Path) -> Exercise:
    """Load an exercise definition.

    Args:
        file_path: Path to a .json exercise, or a .mid/.midi/.xml/.mxl/.musicxml
            score whose notes become the expected notes (default scoring).

    Raises:
        ExerciseLoadError: If the file cannot be parsed.
    """
    path = Path(file_path)
    try:
        if path.suffix == ".json":
            exercise = exercise_from_dict(json.loads(path.read_text(encoding="utf-8")))
        elif path.suffix in (".mid", ".midi"):
            exercise = _load_midi_exercise(path)
        elif path.suffix in (".xml", ".mxl", ".musicxml"):
            exercise = _load_musicxml_exercise(path)
        else:
            raise ExerciseLoadError(f"Unsupported file format: {path.suffix}")
    except ExerciseLoadError:
        raise
    except Exception as exc:
        raise ExerciseLoadError(f"Failed to load {path.name}: {exc}") from exc

    logger.debug("Loaded exercise %s (%d notes) from %s", exercise.id, len(exercise.notes), path)
    return exercise


def exercise_files(directory: str | Path) -> list[Path]:
    """Every file under a directory with an exercise suffix, in sorted order."""
    return [p for p in sorted(Path(directory).rglob("*")) if p.suffix in EXERCISE_SUFFIXES]


def load_exercises(directory: str | Path) -> list[Exercise]:
    """Load every exercise file under a directory, skipping ones that fail to parse."""
    exercises: list[Exercise] = []
    for path in exercise_files(directory):
        try:
            exercises.append(load_exercise(path))
        except ExerciseLoadError as exc:
            logger.warning("Skipping %s: %s", path, exc)
    return exercises


def _parse_hand(value: Any) -> Hand | None:
    if value is None:
        return None
    return Hand[str(value).upper()]


def _note_from_dict(data: dict[str, Any]) -> ExpectedNote:
    return ExpectedNote(
        pitch=int(data["note"] if "note" in data else data["pitch"]),
        start_beat=float(data["startBeat"]),
        duration_beats=float(data["durationBeats"]),
        hand=_parse_hand(data.get("hand")),
        finger=data.get("finger"),
    )


def exercise_from_dict(data: dict[str, Any]) -> Exercise:
    """Build an Exercise from its JSON content form (camelCase keys)."""
    meta = data.get("metadata", {})
    settings = data.get("settings", {})
    scoring = data.get("scoring", {})
    defaults = ScoringConfig()

    return Exercise(
        id=str(data.get("id", "")),
        metadata=ExerciseMetadata(
            title=meta.get("title", ""),
            description=meta.get("description", ""),
            difficulty=int(meta.get("difficulty", 1)),
            skills=tuple(meta.get("skills", ())),
            prerequisites=tuple(meta.get("prerequisites", ())),
        ),
        settings=ExerciseSettings(
            tempo_bpm=float(settings.get("tempoBpm", settings.get("tempo", DEFAULT_TEMPO_BPM))),
            time_signature=tuple(settings.get("timeSignature", (4, 4))),
            key_signature=settings.get("keySignature", "C"),
            count_in=int(settings.get("countIn", 4)),
        ),
        notes=tuple(_note_from_dict(n) for n in data.get("notes", ())),
        scoring=ScoringConfig(
            timing_tolerance_ms=float(scoring.get("timingToleranceMs", defaults.timing_tolerance_ms)),
            timing_grace_period_ms=float(
                scoring.get("timingGracePeriodMs", defaults.timing_grace_period_ms)
            ),
            passing_score=float(scoring.get("passingScore", defaults.passing_score)),
            star_thresholds=tuple(
                float(t) for t in scoring.get("starThresholds", defaults.star_thresholds)
            ),
        ),
    )


def _first_tempo(mid: mido.MidiFile) -> int:
    for track in mid.tracks:
        for msg in track:
            if msg.type == "set_tempo":
                return msg.tempo
    return mido.bpm2tempo(DEFAULT_TEMPO_BPM)


def _load_midi_exercise(path: Path) -> Exercise:
    """Expected notes in beats straight from ticks; tempo from the first set_tempo."""
    mid = mido.MidiFile(str(path))
    tpb = mid.ticks_per_beat
    notes: list[ExpectedNote] = []

    for track_idx, track in enumerate(mid.tracks):
        abs_ticks = 0
        pending: dict[int, int] = {}  # pitch -> start tick
        for msg in track:
            abs_ticks += msg.time
            if msg.type == "note_on" and msg.velocity > 0:
                if msg.note in pending:
                    start = pending.pop(msg.note)
                    notes.append(_midi_note(msg.note, start, abs_ticks, tpb, track_idx))
                pending[msg.note] = abs_ticks
            elif msg.type in ("note_off", "note_on") and msg.note in pending:
                start = pending.pop(msg.note)
                notes.append(_midi_note(msg.note, start, abs_ticks, tpb, track_idx))

    notes.sort(key=lambda n: (n.start_beat, n.pitch))
    return Exercise(
        id=path.stem,
        metadata=ExerciseMetadata(title=path.stem),
        settings=ExerciseSettings(tempo_bpm=round(mido.tempo2bpm(_first_tempo(mid)), 3)),
        notes=tuple(notes),
    )


def _midi_note(pitch: int, start: int, end: int, tpb: int, track_idx: int) -> ExpectedNote:
    return ExpectedNote(
        pitch=pitch,
        start_beat=start / tpb,
        duration_beats=max(end - start, 1) / tpb,
        hand=Hand.LEFT if track_idx % 2 == 1 else Hand.RIGHT,
    )


def _load_musicxml_exercise(path: Path) -> Exercise:
    from music21 import converter, tempo as m21tempo

    score = converter.parse(str(path))
    marks = list(score.flatten().getElementsByClass(m21tempo.MetronomeMark))
    tempo_bpm = float(marks[0].number) if marks and marks[0].number else DEFAULT_TEMPO_BPM

    notes: list[ExpectedNote] = []
    for part_idx, part in enumerate(score.parts):
        hand = Hand.RIGHT if part_idx == 0 else Hand.LEFT
        for n in part.flatten().notes:
            pitches = n.pitches if hasattr(n, "pitches") else [n.pitch]
            for p in pitches:
                notes.append(
                    ExpectedNote(
                        pitch=p.midi,
                        start_beat=float(n.offset),  # quarterLength == beats
                        duration_beats=float(n.duration.quarterLength),
                        hand=hand,
                    )
                )

    notes.sort(key=lambda n: (n.start_beat, n.pitch))
    title = score.metadata.title if score.metadata and score.metadata.title else path.stem
    return Exercise(
        id=path.stem,
        metadata=ExerciseMetadata(title=title),
        settings=ExerciseSettings(tempo_bpm=tempo_bpm),
        notes=tuple(notes),
    )


def load_performance(file_path: str | Path) -> list[CapturedNoteEvent]:
    """Load a recorded attempt as captured note-on events, ms from recording start.

    Accepts a .json list of ``{"note"|"pitch", "velocity", "timestamp"|"timestampMs"}``
    objects, or a .mid/.midi recording.

    Raises:
        ExerciseLoadError: If the performance file cannot be parsed. Exercise and
            performance files share one load error.
    """
    path = Path(file_path)
    try:
        if path.suffix == ".json":
            events = [_event_from_dict(e) for e in json.loads(path.read_text(encoding="utf-8"))]
        elif path.suffix in (".mid", ".midi"):
            events = _load_midi_performance(path)
        else:
            raise ExerciseLoadError(f"Unsupported performance format: {path.suffix}")
    except ExerciseLoadError:
        raise
    except Exception as exc:
        raise ExerciseLoadError(f"Failed to load {path.name}: {exc}") from exc

    events.sort(key=lambda e: e.timestamp_ms)
    return events


def _event_from_dict(data: dict[str, Any]) -> CapturedNoteEvent:
    return CapturedNoteEvent(
        pitch=int(data["note"] if "note" in data else data["pitch"]),
        velocity=int(data.get("velocity", 64)),
        timestamp_ms=float(data["timestampMs"] if "timestampMs" in data else data["timestamp"]),
    )


def _load_midi_performance(path: Path) -> list[CapturedNoteEvent]:
    mid = mido.MidiFile(str(path))
    events: list[CapturedNoteEvent] = []
    elapsed = 0.0
    # Iterating a MidiFile merges tracks and converts delta times to seconds.
    for msg in mid:
        elapsed += msg.time
        if msg.type == "note_on" and msg.velocity > 0:
            events.append(
                CapturedNoteEvent(pitch=msg.note, velocity=msg.velocity, timestamp_ms=elapsed * 1000.0)
            )
    return events
