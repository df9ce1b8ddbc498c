"""
Submission Store Module.

Append-only persistence of graded submissions keyed by
(user, document, task):
- In-memory (process-local)
- JSON lines file
"""

from solution_grader.storage.base import StorageUnavailable, SubmissionStore
from solution_grader.storage.factory import create_store
from solution_grader.storage.jsonl import JsonlSubmissionStore
from solution_grader.storage.memory import InMemorySubmissionStore

__all__ = [
    "InMemorySubmissionStore",
    "JsonlSubmissionStore",
    "StorageUnavailable",
    "SubmissionStore",
    "create_store",
]
