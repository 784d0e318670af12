"""keygrade — score piano exercise attempts."""

from keygrade.engine import score_attempt
from keygrade.validator import validate_exercise

__all__ = ["score_attempt", "validate_exercise"]
