"""
Grading engine - the core orchestrator.

Runs one grading call end to end: authorize the caller, resolve the
task, execute the checks, score them, persist the attempt and build the
response. Every stage is terminal within the call; nothing is retried.
"""

import logging
import threading
from collections import defaultdict
from contextlib import nullcontext
from enum import Enum
from typing import Callable, ContextManager

from solution_grader.config import Settings, get_settings
from solution_grader.documents.base import DocumentRepository
from solution_grader.errors import GraderError
from solution_grader.executors.base import ExecutionFailed, TestExecutor
from solution_grader.executors.factory import create_executor
from solution_grader.grading.feedback import feedback, feedback_tier
from solution_grader.grading.history import HistorySelector
from solution_grader.grading.scorer import score
from solution_grader.models import GradingResult, Submission
from solution_grader.storage.base import SubmissionStore

logger = logging.getLogger(__name__)

ExecutorFactory = Callable[[str, Settings], TestExecutor]


class Unauthenticated(GraderError):
    """Raised when a grading call carries no caller identity."""

    user_message = "You must be signed in to submit a solution."


class GradingStage(str, Enum):
    """Stages of a grading call, in order."""

    RECEIVED = "received"
    AUTHORIZING = "authorizing"
    RESOLVING = "resolving"
    EXECUTING = "executing"
    SCORING = "scoring"
    PERSISTING = "persisting"
    RESPONDED = "responded"


class GradingEngine:
    """
    Entry point of the grading core.

    Validates the request, runs the executor for the submission's
    language, scores the checks, appends the attempt to the store and
    returns the grading result with feedback.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        store: SubmissionStore,
        settings: Settings | None = None,
        executor_factory: ExecutorFactory = create_executor,
    ):
        """
        Initialize the grading engine.

        Args:
            documents: Resolves documents and their tasks.
            store: Where graded submissions are appended.
            settings: Configuration settings. Uses global settings if not provided.
            executor_factory: Builds the executor for a language tag.
        """
        self._settings = settings or get_settings()
        self._documents = documents
        self._store = store
        self._executor_factory = executor_factory
        self._history = HistorySelector(store, self._settings.recent_limit)

        self._key_locks: defaultdict[tuple[str, str, str], threading.Lock] = defaultdict(
            threading.Lock
        )
        self._key_locks_guard = threading.Lock()

    def submit_solution(
        self,
        user_id: str | None,
        document_id: str,
        task_id: str,
        code: str,
        language: str,
    ) -> GradingResult:
        """
        Grade a solution and record the attempt.

        Args:
            user_id: Authenticated caller, or None when there is none.
            document_id: Document the task belongs to.
            task_id: Task within the document.
            code: Submitted source code.
            language: Declared language tag.

        Returns:
            GradingResult built from the stored submission.

        Raises:
            Unauthenticated: If there is no caller identity.
            DocumentNotFound: If the document does not exist.
            TaskNotFound: If the task does not exist.
            ExecutionFailed: If the submission could not be evaluated.
            StorageUnavailable: If the graded attempt could not be stored.
        """
        stage = GradingStage.RECEIVED
        logger.info("Grading request for document %s task %s (%s)", document_id, task_id, language)

        try:
            stage = GradingStage.AUTHORIZING
            if not user_id:
                raise Unauthenticated("Not authenticated")

            with self._serialize(user_id, document_id, task_id):
                stage = GradingStage.RESOLVING
                task = self._documents.get_task(document_id, task_id)

                stage = GradingStage.EXECUTING
                executor = self._executor_factory(language, self._settings)
                check_results = executor.execute(code, language, task)
                if not check_results:
                    raise ExecutionFailed("Executor returned no check results")

                stage = GradingStage.SCORING
                outcome = score(check_results)
                logger.info(
                    "Scored %d/%d checks: %d (%s)",
                    sum(1 for r in check_results if r.passed),
                    len(check_results),
                    outcome.score,
                    "passed" if outcome.passed else "failed",
                )

                stage = GradingStage.PERSISTING
                submission = Submission(
                    user_id=user_id,
                    document_id=document_id,
                    task_id=task_id,
                    code=code,
                    language=language,
                    score=outcome.score,
                    passed=outcome.passed,
                    check_results=check_results,
                )
                submission_id = self._store.append(submission)
                stored = submission.model_copy(update={"submission_id": submission_id})
                logger.info("Stored submission %s", submission_id)

        except GraderError as e:
            # User-actionable failures are warnings; evaluation and storage faults are errors
            level = logging.ERROR if isinstance(e, ExecutionFailed) or e.retryable else logging.WARNING
            logger.log(level, "Grading failed while %s: %s", stage.value, e)
            raise

        logger.debug("Grading call %s", GradingStage.RESPONDED.value)
        return GradingResult.from_submission(
            stored, feedback(stored.score), feedback_tier(stored.score)
        )

    def get_recent_submissions(
        self, user_id: str | None, document_id: str, task_id: str
    ) -> list[Submission]:
        """
        Return the caller's most recent submissions for a task, newest first.

        Anonymous callers have no history and get an empty list.
        """
        if not user_id:
            return []
        return self._history.recent_submissions(user_id, document_id, task_id)

    def get_best_submission(
        self, user_id: str | None, document_id: str, task_id: str
    ) -> Submission | None:
        """
        Return the caller's best submission for a task.

        Returns None when there are no attempts yet or the caller is anonymous.
        """
        if not user_id:
            return None
        return self._history.best_submission(user_id, document_id, task_id)

    def _serialize(self, user_id: str, document_id: str, task_id: str) -> ContextManager[object]:
        """Per-key lock when serialization is enabled, otherwise a no-op."""
        if not self._settings.serialize_per_key:
            return nullcontext()
        with self._key_locks_guard:
            return self._key_locks[(user_id, document_id, task_id)]
