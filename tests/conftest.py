import pytest
from mido import Message, MetaMessage, MidiFile, MidiTrack

from keygrade.models import (
    CapturedNoteEvent,
    Exercise,
    ExerciseMetadata,
    ExerciseSettings,
    ExpectedNote,
    ScoringConfig,
)


@pytest.fixture
def three_note_exercise():
    """C-D-E on beats 0, 1, 2 at 120 BPM (500 ms per beat)."""
    return Exercise(
        id="lesson-01-ex-01",
        metadata=ExerciseMetadata(title="First Steps"),
        settings=ExerciseSettings(tempo_bpm=120),
        notes=(
            ExpectedNote(pitch=60, start_beat=0, duration_beats=1),
            ExpectedNote(pitch=62, start_beat=1, duration_beats=1),
            ExpectedNote(pitch=64, start_beat=2, duration_beats=1),
        ),
        scoring=ScoringConfig(
            timing_tolerance_ms=25,
            timing_grace_period_ms=75,
            passing_score=70,
            star_thresholds=(70, 85, 95),
        ),
    )


@pytest.fixture
def on_time_events():
    return [
        CapturedNoteEvent(pitch=60, velocity=127, timestamp_ms=0),
        CapturedNoteEvent(pitch=62, velocity=127, timestamp_ms=500),
        CapturedNoteEvent(pitch=64, velocity=127, timestamp_ms=1000),
    ]


def _write_midi(path, notes, tempo=500000, ticks_per_beat=480):
    """notes: list of (start_beat, duration_beats, pitch, velocity)."""
    mid = MidiFile(ticks_per_beat=ticks_per_beat)
    track = MidiTrack()
    mid.tracks.append(track)
    track.append(MetaMessage("set_tempo", tempo=tempo, time=0))

    timeline = []
    for start, dur, pitch, vel in notes:
        timeline.append((int(start * ticks_per_beat), 1, Message("note_on", note=pitch, velocity=vel)))
        timeline.append((int((start + dur) * ticks_per_beat), 0, Message("note_off", note=pitch, velocity=0)))
    timeline.sort(key=lambda item: (item[0], item[1]))

    last = 0
    for tick, _order, msg in timeline:
        track.append(msg.copy(time=tick - last))
        last = tick
    mid.save(str(path))
    return path


@pytest.fixture
def write_midi(tmp_path):
    def _factory(name, notes, **kwargs):
        return _write_midi(tmp_path / name, notes, **kwargs)
    return _factory
