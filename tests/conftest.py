"""
Pytest configuration and fixtures.

Provides common test fixtures for all test modules.
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

from solution_grader.config import PASS_THRESHOLD, Settings, StoreBackend
from solution_grader.documents import InMemoryDocumentRepository
from solution_grader.grading import GradingEngine
from solution_grader.models import (
    CheckResult,
    ContainsAssertion,
    DefinesAssertion,
    Document,
    ExcludesAssertion,
    Submission,
    Task,
    rounded_percentage,
)
from solution_grader.storage import InMemorySubmissionStore


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with an in-memory store."""
    return Settings(
        store_backend=StoreBackend.MEMORY,
        data_directory=temp_dir / "data",
        recent_limit=10,
        execution_timeout_seconds=5.0,
        min_code_length=50,
        placeholder_markers=("TODO", "..."),
        task_cache_ttl_seconds=0.0,
        serialize_per_key=False,
        log_level="DEBUG",
    )


# ==============================================================================
# Document Fixtures
# ==============================================================================


@pytest.fixture
def add_task() -> Task:
    """Task asking for an add function."""
    return Task(
        task_id="0",
        instructions="Implement add(a, b)\nReturn the sum of two numbers.",
        assertions=(DefinesAssertion(name="Defines add", symbol="add"),),
    )


@pytest.fixture
def multiply_task() -> Task:
    """Task asking for a multiply function."""
    return Task(
        task_id="1",
        instructions="Implement multiply(a, b)\nReturn the product of two numbers.",
        assertions=(DefinesAssertion(name="Defines multiply", symbol="multiply"),),
    )


@pytest.fixture
def api_task() -> Task:
    """Task with several behavioural assertions."""
    return Task(
        task_id="2",
        instructions="Build a retrying HTTP fetcher\nUse exponential backoff.",
        assertions=(
            DefinesAssertion(name="Defines fetch", symbol="fetch"),
            ContainsAssertion(name="Uses backoff", snippet="backoff"),
            ExcludesAssertion(name="No bare except", snippet="except:"),
        ),
    )


@pytest.fixture
def sample_document(add_task: Task, multiply_task: Task, api_task: Task) -> Document:
    """Document with three generated tasks."""
    return Document(
        document_id="doc-1",
        user_id="owner-1",
        title="Introduction to Programming",
        tasks=(add_task, multiply_task, api_task),
    )


@pytest.fixture
def document_repository(sample_document: Document) -> InMemoryDocumentRepository:
    """In-memory repository holding the sample document."""
    return InMemoryDocumentRepository([sample_document])


@pytest.fixture
def catalog_data() -> dict[str, Any]:
    """Raw JSON document catalog."""
    return {
        "documents": [
            {
                "document_id": "doc-1",
                "user_id": "owner-1",
                "title": "Introduction to Programming",
                "tasks": [
                    "Write a program that prints the first ten square numbers.",
                    {
                        "instructions": "Implement multiply(a, b)",
                        "assertions": [
                            {"kind": "defines", "name": "Defines multiply", "symbol": "multiply"}
                        ],
                    },
                ],
            }
        ]
    }


@pytest.fixture
def catalog_file(temp_dir: Path, catalog_data: dict[str, Any]) -> Path:
    """Write the catalog to disk."""
    path = temp_dir / "documents.json"
    path.write_text(json.dumps(catalog_data), encoding="utf-8")
    return path


# ==============================================================================
# Code Fixtures
# ==============================================================================


@pytest.fixture
def add_code() -> str:
    """A complete, valid Python solution for the add task."""
    return '''def add(a, b):
    """Return the sum of a and b."""
    return a + b


if __name__ == "__main__":
    print(add(2, 3))
'''


@pytest.fixture
def code_of_length_80() -> str:
    """Valid, complete Python code exactly 80 characters long."""
    head = "def add(a, b):\n    return a + b\n"
    code = head + "#" + "x" * (80 - len(head) - 2) + "\n"
    assert len(code) == 80
    return code


# ==============================================================================
# Store / Engine Fixtures
# ==============================================================================


@pytest.fixture
def memory_store() -> InMemorySubmissionStore:
    """Empty in-memory submission store."""
    return InMemorySubmissionStore()


@pytest.fixture
def engine(
    document_repository: InMemoryDocumentRepository,
    memory_store: InMemorySubmissionStore,
    test_settings: Settings,
) -> GradingEngine:
    """Grading engine using the real static executor."""
    return GradingEngine(document_repository, memory_store, test_settings)


@pytest.fixture
def make_checks() -> Callable[[int, int], tuple[CheckResult, ...]]:
    """Build `total` check results of which the first `passed` pass."""

    def _make(passed: int, total: int) -> tuple[CheckResult, ...]:
        return tuple(
            CheckResult(name=f"Check {i + 1}", passed=i < passed, message="")
            for i in range(total)
        )

    return _make


@pytest.fixture
def make_submission(
    make_checks: Callable[[int, int], tuple[CheckResult, ...]],
) -> Callable[..., Submission]:
    """Build a consistent Submission from passed/total check counts."""

    def _make(
        passed: int,
        total: int,
        /,
        user_id: str = "user-1",
        document_id: str = "doc-1",
        task_id: str = "0",
        **overrides: Any,
    ) -> Submission:
        score = rounded_percentage(passed, total)
        fields: dict[str, Any] = dict(
            user_id=user_id,
            document_id=document_id,
            task_id=task_id,
            code="print('hello world')",
            language="python",
            score=score,
            passed=score >= PASS_THRESHOLD,
            check_results=make_checks(passed, total),
        )
        fields.update(overrides)
        return Submission(**fields)

    return _make
