"""
Solution Grader - grading engine for student code submissions.

This package runs a battery of checks over a student's solution to a
generated task, turns the check outcomes into a score and feedback,
and keeps an append-only history of every graded attempt.
"""

__version__ = "1.0.0"
__author__ = "Solution Grader Team"
