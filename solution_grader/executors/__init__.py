"""
Test Executor Module.

Runs the check battery for a submission. Executors are selected by
language tag; the grading engine only sees ordered CheckResults.
"""

from solution_grader.executors.base import (
    ExecutionFailed,
    ExecutionTimeout,
    TestExecutor,
    UnsupportedLanguage,
    normalize_language,
)
from solution_grader.executors.factory import create_executor, get_supported_languages
from solution_grader.executors.static import StaticCheckExecutor

__all__ = [
    "ExecutionFailed",
    "ExecutionTimeout",
    "StaticCheckExecutor",
    "TestExecutor",
    "UnsupportedLanguage",
    "create_executor",
    "get_supported_languages",
    "normalize_language",
]
