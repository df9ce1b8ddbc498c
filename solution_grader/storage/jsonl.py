"""
File-backed submission store.

Appends one JSON document per line to ``submissions.jsonl``. The file
is only ever appended to, matching the store's append-only contract.
"""

import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from solution_grader.models import Submission
from solution_grader.storage.base import (
    StorageUnavailable,
    SubmissionIdGenerator,
    SubmissionStore,
    matches_key,
    stamp_submission,
)

logger = logging.getLogger(__name__)


class JsonlSubmissionStore(SubmissionStore):
    """
    Append-only JSON lines store.

    Reads parse the whole file; I/O failures and corrupt records are
    reported as ``StorageUnavailable``. A final record cut short by an
    interrupted write is skipped on read and dropped on the next append.
    """

    FILE_NAME = "submissions.jsonl"

    def __init__(self, directory: Path):
        """
        Initialize the store.

        Args:
            directory: Directory holding the submissions file.
        """
        self._path = directory / self.FILE_NAME
        self._lock = threading.Lock()
        self._ids = SubmissionIdGenerator()

        for submission in self._read_all():
            if submission.submission_id:
                self._ids.observe(submission.submission_id)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, submission: Submission) -> str:
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._repair_tail()
                stored = stamp_submission(submission, self._ids)
                line = stored.model_dump_json(exclude={"passed_checks", "total_checks"})
                with self._path.open("a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError as e:
                logger.error("Could not append to %s: %s", self._path, e)
                raise StorageUnavailable(f"Could not write {self._path}: {e}", cause=e) from e

        logger.debug("Appended submission %s to %s", stored.submission_id, self._path)
        return stored.submission_id

    def query_all(self, user_id: str, document_id: str, task_id: str) -> list[Submission]:
        return [s for s in self._read_all() if matches_key(s, user_id, document_id, task_id)]

    def _repair_tail(self) -> None:
        """Terminate or drop a final line left without its newline."""
        if not self._path.exists():
            return
        data = self._path.read_bytes()
        if not data or data.endswith(b"\n"):
            return

        cut = data.rfind(b"\n") + 1
        try:
            Submission.model_validate_json(data[cut:])
        except ValidationError:
            logger.warning(
                "Dropping incomplete record at the end of %s (%d bytes)",
                self._path,
                len(data) - cut,
            )
            with self._path.open("r+b") as f:
                f.truncate(cut)
        else:
            with self._path.open("ab") as f:
                f.write(b"\n")

    def _read_all(self) -> list[Submission]:
        with self._lock:
            if not self._path.exists():
                return []
            try:
                data = self._path.read_bytes()
            except OSError as e:
                logger.error("Could not read %s: %s", self._path, e)
                raise StorageUnavailable(f"Could not read {self._path}: {e}", cause=e) from e

        # A write cut short can also split a multi-byte character
        text = data.decode("utf-8", errors="replace")
        torn_tail = bool(text) and not text.endswith("\n")
        lines = text.split("\n")
        if not torn_tail:
            lines.pop()

        submissions: list[Submission] = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                submissions.append(Submission.model_validate_json(line))
            except ValidationError as e:
                if torn_tail and line_number == len(lines):
                    logger.warning(
                        "Skipping incomplete record on line %d of %s", line_number, self._path
                    )
                    continue
                raise StorageUnavailable(
                    f"Corrupt record on line {line_number} of {self._path}", cause=e
                ) from e
        return submissions
