"""
Submission history queries.

Read-only views over the submission store: the most recent attempts
for a key, and the best attempt so far.
"""

import logging

from solution_grader.models import Submission
from solution_grader.storage.base import SubmissionStore

logger = logging.getLogger(__name__)


class HistorySelector:
    """
    Selects submissions from a store's history.

    The best submission is the highest-scoring one; on equal scores the
    earliest attempt wins.
    """

    def __init__(self, store: SubmissionStore, recent_limit: int = 10):
        """
        Initialize the selector.

        Args:
            store: Store to read from.
            recent_limit: Default size bound for recent submissions.
        """
        self._store = store
        self._recent_limit = recent_limit

    def recent_submissions(
        self, user_id: str, document_id: str, task_id: str, limit: int | None = None
    ) -> list[Submission]:
        """Return the most recent submissions for a key, newest first."""
        return self._store.query_recent(
            user_id, document_id, task_id, self._recent_limit if limit is None else limit
        )

    def best_submission(self, user_id: str, document_id: str, task_id: str) -> Submission | None:
        """
        Return the highest-scoring submission for a key.

        Args:
            user_id: Owner of the submissions.
            document_id: Document the task belongs to.
            task_id: Task within the document.

        Returns:
            The best submission, or None when there are no attempts yet.
        """
        submissions = self._store.query_all(user_id, document_id, task_id)
        if not submissions:
            return None

        # Oldest first, so that "first encountered" means earliest submitted
        submissions = sorted(submissions, key=lambda s: s.submission_id or "")

        best = submissions[0]
        for current in submissions[1:]:
            if current.score > best.score:
                best = current

        logger.debug(
            "Best of %d submission(s) for %s/%s/%s: %s (score %d)",
            len(submissions),
            user_id,
            document_id,
            task_id,
            best.submission_id,
            best.score,
        )
        return best
