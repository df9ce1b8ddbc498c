"""
Base classes for test executors.

Defines the interface every executor must satisfy: given code, a
language tag and a task, produce an ordered, non-empty sequence of
check results within a bounded amount of time.
"""

import logging
import multiprocessing
from abc import ABC, abstractmethod
from multiprocessing.connection import Connection
from typing import ClassVar

from solution_grader.config import Settings
from solution_grader.errors import GraderError
from solution_grader.models import CheckResult, Task

logger = logging.getLogger(__name__)

# Forked children inherit the executor without pickling it
_MP_CONTEXT = multiprocessing.get_context(
    "fork" if "fork" in multiprocessing.get_all_start_methods() else None
)

# Accepted spellings of language tags, mapped to their canonical form.
LANGUAGE_ALIASES: dict[str, str] = {
    "py": "python",
    "python3": "python",
    "js": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "c++": "cpp",
    "cxx": "cpp",
    "c#": "csharp",
    "cs": "csharp",
    "golang": "go",
    "rs": "rust",
    "kt": "kotlin",
}


def normalize_language(language: str) -> str:
    """Lower-case a language tag and resolve aliases."""
    tag = language.strip().lower()
    return LANGUAGE_ALIASES.get(tag, tag)


class ExecutionFailed(GraderError):
    """
    Raised when a submission could not be evaluated.

    Sandbox details are kept on the exception for logs and never shown
    to the end user.
    """

    user_message = "Could not evaluate your submission, try again."


class ExecutionTimeout(ExecutionFailed):
    """Raised when the check battery exceeds its time bound."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Execution exceeded the {timeout_seconds:g}s time limit")


class UnsupportedLanguage(ExecutionFailed):
    """Raised when no executor handles the declared language."""

    def __init__(self, language: str, supported: tuple[str, ...]):
        self.language = language
        self.supported = supported
        super().__init__(f"Unsupported language '{language}'. Supported languages: {supported}")


class TestExecutor(ABC):
    """
    Abstract base class for test executors.

    Subclasses declare the languages they handle via
    ``SUPPORTED_LANGUAGES`` and implement ``_run_checks``. ``execute``
    enforces the time bound and turns unexpected faults into
    ``ExecutionFailed``.
    """

    __test__ = False  # not a pytest test class

    SUPPORTED_LANGUAGES: ClassVar[tuple[str, ...]] = ()

    def __init__(self, timeout_seconds: float = 10.0):
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "TestExecutor":
        """Build an executor configured from application settings."""
        return cls(timeout_seconds=settings.execution_timeout_seconds)

    @classmethod
    def supports(cls, language: str) -> bool:
        """
        Check if this executor handles the given language.

        Args:
            language: Language tag as declared by the student.

        Returns:
            True if the executor can evaluate code in that language.
        """
        return normalize_language(language) in cls.SUPPORTED_LANGUAGES

    def execute(self, code: str, language: str, task: Task) -> tuple[CheckResult, ...]:
        """
        Run every check against a submission.

        The checks run in a child process, which is killed when the time
        bound expires.

        Args:
            code: Submitted source code.
            language: Declared language tag.
            task: The task being attempted.

        Returns:
            Check results in execution order.

        Raises:
            ExecutionTimeout: If the checks do not finish in time.
            ExecutionFailed: If the checks could not be run.
        """
        canonical = normalize_language(language)
        if canonical not in self.SUPPORTED_LANGUAGES:
            raise UnsupportedLanguage(language, self.SUPPORTED_LANGUAGES)

        receiver, sender = _MP_CONTEXT.Pipe(duplex=False)
        process = _MP_CONTEXT.Process(
            target=_run_in_child,
            args=(self, code, canonical, task, sender),
            name="grader-exec",
            daemon=True,
        )
        try:
            try:
                process.start()
            except OSError as e:
                raise ExecutionFailed(f"Could not start executor process: {e}", cause=e) from e
            sender.close()

            if not receiver.poll(self._timeout_seconds):
                logger.error(
                    "Check battery for task %s timed out after %ss",
                    task.task_id,
                    self._timeout_seconds,
                )
                raise ExecutionTimeout(self._timeout_seconds)

            try:
                ok, payload = receiver.recv()
            except EOFError as e:
                # The child died without reporting back
                process.join()
                raise ExecutionFailed(
                    f"Executor process exited with code {process.exitcode}", cause=e
                ) from e
        finally:
            if process.is_alive():
                process.terminate()
            if process.pid is not None:
                process.join()
            sender.close()
            receiver.close()

        if not ok:
            if isinstance(payload, ExecutionFailed):
                raise payload
            logger.error("Executor %s crashed: %r", type(self).__name__, payload)
            raise ExecutionFailed(f"Executor error: {payload}", cause=payload) from payload

        for result in payload:
            logger.debug("Check %r: %s", result.name, "passed" if result.passed else "failed")
        return tuple(payload)

    @abstractmethod
    def _run_checks(self, code: str, language: str, task: Task) -> list[CheckResult]:
        """
        Run the check battery.

        Every check must run even when an earlier one fails.

        Args:
            code: Submitted source code.
            language: Canonical language tag.
            task: The task being attempted.

        Returns:
            Check results in execution order.
        """
        ...


def _run_in_child(
    executor: TestExecutor, code: str, language: str, task: Task, conn: Connection
) -> None:
    """Child process entry point: send back (True, results) or (False, error)."""
    try:
        conn.send((True, executor._run_checks(code, language, task)))
    except Exception as e:
        try:
            conn.send((False, e))
        except Exception:
            # The error itself could not be pickled
            conn.send((False, ExecutionFailed(f"{type(e).__name__}: {e}")))
    finally:
        conn.close()
