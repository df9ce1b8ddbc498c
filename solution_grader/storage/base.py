"""
Base classes for the submission store.

The store is an append-only log of graded submissions keyed by
(user, document, task). Submissions are never updated or deleted.
"""

import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from solution_grader.errors import GraderError
from solution_grader.models import Submission


class StorageUnavailable(GraderError):
    """
    Raised when the persistence layer cannot be reached.

    The only failure callers are expected to retry: grading is cheap
    to redo, so the whole call is simply repeated.
    """

    user_message = "Your submission could not be saved, please resubmit."
    retryable = True


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SubmissionIdGenerator:
    """
    Generates submission ids ordered by submission time.

    Ids are zero-padded nanosecond timestamps, bumped past the previous
    id when the clock has not advanced (or has stepped back), so they
    sort lexically in the order they were issued. The submission time
    is derived from the same stamp, so both orders always agree.
    """

    WIDTH = 20

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def observe(self, submission_id: str) -> None:
        """Make sure future ids sort after an existing one."""
        with self._lock:
            self._last = max(self._last, int(submission_id))

    def next_stamp(self) -> tuple[str, datetime]:
        """Return a new submission id and the submission time it encodes."""
        with self._lock:
            self._last = max(time.time_ns(), self._last + 1)
            stamp = self._last
        return f"{stamp:0{self.WIDTH}d}", _EPOCH + timedelta(microseconds=stamp // 1000)


def stamp_submission(submission: Submission, generator: SubmissionIdGenerator) -> Submission:
    """Copy of a submission carrying a freshly issued id and submission time."""
    submission_id, submitted_at = generator.next_stamp()
    return submission.model_copy(
        update={"submission_id": submission_id, "submitted_at": submitted_at}
    )


class SubmissionStore(ABC):
    """
    Abstract append-only submission store.

    Implementations must be safe under concurrent appends and must never
    return a submission belonging to another user.
    """

    @abstractmethod
    def append(self, submission: Submission) -> str:
        """
        Persist a graded submission.

        Args:
            submission: The submission to store; its id and submission
                time are assigned here, in one step, so both orders agree.

        Returns:
            The new submission id.

        Raises:
            StorageUnavailable: If the persistence layer is unavailable.
        """
        ...

    @abstractmethod
    def query_all(self, user_id: str, document_id: str, task_id: str) -> list[Submission]:
        """
        Return every submission for a key, in no particular order.

        Raises:
            StorageUnavailable: If the persistence layer is unavailable.
        """
        ...

    def query_recent(
        self, user_id: str, document_id: str, task_id: str, limit: int
    ) -> list[Submission]:
        """
        Return the most recent submissions for a key, newest first.

        Args:
            user_id: Owner of the submissions.
            document_id: Document the task belongs to.
            task_id: Task within the document.
            limit: Maximum number of submissions to return.

        Returns:
            At most ``limit`` submissions ordered newest first.

        Raises:
            StorageUnavailable: If the persistence layer is unavailable.
        """
        if limit < 1:
            return []
        submissions = self.query_all(user_id, document_id, task_id)
        return newest_first(submissions)[:limit]


def newest_first(submissions: list[Submission]) -> list[Submission]:
    """Sort submissions by id, which follows submission time, newest first."""
    return sorted(submissions, key=lambda s: s.submission_id or "", reverse=True)


def matches_key(submission: Submission, user_id: str, document_id: str, task_id: str) -> bool:
    """Whether a submission belongs to the (user, document, task) key."""
    return (
        submission.user_id == user_id
        and submission.document_id == document_id
        and submission.task_id == task_id
    )
