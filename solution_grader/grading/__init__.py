"""
Grading Engine Module.

Scores check results, synthesizes feedback, selects from submission
history and orchestrates complete grading calls.
"""

from solution_grader.grading.engine import GradingEngine, GradingStage, Unauthenticated
from solution_grader.grading.feedback import feedback, feedback_tier
from solution_grader.grading.history import HistorySelector
from solution_grader.grading.scorer import EmptyResultSet, ScoreOutcome, score

__all__ = [
    "EmptyResultSet",
    "GradingEngine",
    "GradingStage",
    "HistorySelector",
    "ScoreOutcome",
    "Unauthenticated",
    "feedback",
    "feedback_tier",
    "score",
]
