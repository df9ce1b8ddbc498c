"""In-process submission store."""

import logging
import threading

from solution_grader.models import Submission
from solution_grader.storage.base import (
    SubmissionIdGenerator,
    SubmissionStore,
    matches_key,
    stamp_submission,
)

logger = logging.getLogger(__name__)


class InMemorySubmissionStore(SubmissionStore):
    """
    Keeps submissions in a list guarded by a lock.

    Contents are lost when the process exits.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._submissions: list[Submission] = []
        self._ids = SubmissionIdGenerator()

    def append(self, submission: Submission) -> str:
        with self._lock:
            stored = stamp_submission(submission, self._ids)
            self._submissions.append(stored)
        logger.debug("Stored submission %s in memory", stored.submission_id)
        return stored.submission_id

    def query_all(self, user_id: str, document_id: str, task_id: str) -> list[Submission]:
        with self._lock:
            snapshot = list(self._submissions)
        return [s for s in snapshot if matches_key(s, user_id, document_id, task_id)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._submissions)
