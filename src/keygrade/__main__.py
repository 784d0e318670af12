"""Entry point for `python -m keygrade` or the `keygrade` console script."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from keygrade.config import DEFAULT_DB_PATH
from keygrade.engine import score_attempt
from keygrade.exercise_loader import ExerciseLoadError, exercise_files, load_exercise, load_performance
from keygrade.models import Exercise, ScoreResult
from keygrade.validator import validate_exercise, validate_exercise_set

logger = logging.getLogger("keygrade")


def _collect_exercises(paths: list[str]) -> tuple[list[Exercise], dict[Path, str]]:
    """Load every exercise named on the command line; load failures are kept per file."""
    exercises: list[Exercise] = []
    failures: dict[Path, str] = {}
    for raw in paths:
        path = Path(raw)
        files = exercise_files(path) if path.is_dir() else [path]
        for file in files:
            try:
                exercises.append(load_exercise(file))
            except ExerciseLoadError as exc:
                failures[file] = str(exc)
    return exercises, failures


def _cmd_validate(args: argparse.Namespace) -> int:
    exercises, load_failures = _collect_exercises(args.paths)
    for file, error in load_failures.items():
        print(f"FAIL  {file}")
        print(f"        error: {error}")

    results = validate_exercise_set(exercises)
    failed = len(load_failures)
    for exercise_id, result in results.items():
        if result.valid:
            print(f"OK    {exercise_id}")
        else:
            failed += 1
            print(f"FAIL  {exercise_id}")
            for error in result.errors:
                print(f"        error: {error}")
        for warning in result.warnings:
            print(f"        warning: {warning}")
    total = len(results) + len(load_failures)
    print(f"{total - failed}/{total} exercises valid")
    return 1 if failed else 0


def _print_result(title: str, result: ScoreResult) -> None:
    b, c = result.breakdown, result.counts
    print(f"{title}: {result.overall:.2f} ({'*' * result.stars}{'.' * (3 - result.stars)})")
    print(
        f"  accuracy {b.accuracy:.1f}  timing {b.timing:.1f}  "
        f"completeness {b.completeness:.1f}  precision {b.precision:.1f}"
    )
    print(f"  perfect {c.perfect}  good {c.good}  ok {c.ok}  missed {c.missed}  extra {c.extra}")
    print(f"  {'passed' if result.is_passed else 'not passed'}, +{result.xp_earned} XP"
          + (", new high score!" if result.is_new_high_score else ""))


def _cmd_score(args: argparse.Namespace) -> int:
    exercise = load_exercise(args.exercise)
    validation = validate_exercise(exercise)
    if not validation.valid:
        for error in validation.errors:
            logger.error("%s: %s", exercise.id, error)
        return 1

    events = load_performance(args.performance)

    if args.db is None:
        result = score_attempt(exercise, events, args.high_score or 0.0)
        _print_result(exercise.title or exercise.id, result)
        return 0

    from keygrade.progress import ProgressTracker

    tracker = ProgressTracker(Path(args.db))
    try:
        previous = args.high_score
        if previous is None:
            previous = tracker.get_high_score(exercise.id)
        result = score_attempt(exercise, events, previous)
        _print_result(exercise.title or exercise.id, result)
        tracker.save_attempt(exercise.id, result)
    finally:
        tracker.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="keygrade — piano performance scoring")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Check exercise files or directories")
    p_validate.add_argument("paths", nargs="+")
    p_validate.set_defaults(func=_cmd_validate)

    p_score = sub.add_parser("score", help="Score a recorded performance against an exercise")
    p_score.add_argument("exercise", help="Exercise file (.json, .mid, .musicxml)")
    p_score.add_argument("performance", help="Recorded performance (.json or .mid)")
    p_score.add_argument("--high-score", type=float, default=None,
                         help="Previous best score (defaults to the history database)")
    p_score.add_argument("--db", nargs="?", const=str(DEFAULT_DB_PATH), default=None,
                         help="Record the attempt in a progress database")
    p_score.set_defaults(func=_cmd_score)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except ExerciseLoadError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
