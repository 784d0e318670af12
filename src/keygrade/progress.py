"""Attempt history with SQLite persistence."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from keygrade.config import DEFAULT_DB_PATH
from keygrade.models import ScoreResult


class ProgressTracker:
    def __init__(self, db_path: Path = DEFAULT_DB_PATH) -> None:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(db_path))
        self._init_db()

    def _init_db(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS attempts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                exercise_id TEXT NOT NULL,
                overall REAL,
                stars INTEGER,
                accuracy REAL,
                timing REAL,
                completeness REAL,
                precision REAL,
                perfect INTEGER,
                good INTEGER,
                ok INTEGER,
                missed INTEGER,
                extra INTEGER,
                xp_earned INTEGER,
                passed INTEGER,
                played_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        self.conn.commit()

    def save_attempt(self, exercise_id: str, result: ScoreResult) -> None:
        b, c = result.breakdown, result.counts
        self.conn.execute(
            """INSERT INTO attempts
               (exercise_id, overall, stars, accuracy, timing, completeness, precision,
                perfect, good, ok, missed, extra, xp_earned, passed)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                exercise_id,
                result.overall,
                result.stars,
                b.accuracy,
                b.timing,
                b.completeness,
                b.precision,
                c.perfect,
                c.good,
                c.ok,
                c.missed,
                c.extra,
                result.xp_earned,
                int(result.is_passed),
            ),
        )
        self.conn.commit()

    def get_high_score(self, exercise_id: str) -> float:
        """Best overall score for an exercise, 0.0 if it has never been attempted."""
        row = self.conn.execute(
            "SELECT MAX(overall) FROM attempts WHERE exercise_id = ?", (exercise_id,)
        ).fetchone()
        return float(row[0]) if row and row[0] is not None else 0.0

    def get_history(self, exercise_id: str | None = None, limit: int = 50) -> list[dict]:
        if exercise_id:
            cur = self.conn.execute(
                "SELECT * FROM attempts WHERE exercise_id = ? ORDER BY id DESC LIMIT ?",
                (exercise_id, limit),
            )
        else:
            cur = self.conn.execute(
                "SELECT * FROM attempts ORDER BY id DESC LIMIT ?", (limit,)
            )
        cols = [d[0] for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    def close(self) -> None:
        self.conn.close()
