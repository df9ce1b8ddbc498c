"""
Scorer for check results.

Turns an ordered sequence of check results into an integer score and a
pass/fail verdict. Pure: identical inputs always give identical outputs.
"""

from typing import NamedTuple, Sequence

from solution_grader.config import PASS_THRESHOLD
from solution_grader.errors import GraderError
from solution_grader.models import CheckResult, rounded_percentage


class EmptyResultSet(GraderError):
    """Raised when asked to score zero check results."""

    user_message = "Could not evaluate your submission, try again."

    def __init__(self) -> None:
        super().__init__("Cannot score an empty set of check results")


class ScoreOutcome(NamedTuple):
    """Score and verdict for a set of check results."""

    score: int
    passed: bool


def score(results: Sequence[CheckResult]) -> ScoreOutcome:
    """
    Score a sequence of check results.

    The score is the percentage of passing checks, rounded half-up;
    the submission passes when the score reaches ``PASS_THRESHOLD``.

    Args:
        results: Check results from one execution.

    Returns:
        ScoreOutcome with the integer score (0-100) and verdict.

    Raises:
        EmptyResultSet: If ``results`` is empty.
    """
    if not results:
        raise EmptyResultSet()

    passed_count = sum(1 for r in results if r.passed)
    value = rounded_percentage(passed_count, len(results))
    return ScoreOutcome(score=value, passed=value >= PASS_THRESHOLD)
