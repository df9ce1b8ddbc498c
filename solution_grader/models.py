"""
Pydantic models for the Solution Grader.

These models define the schemas for:
- Documents and the generated tasks they carry
- Task-defined assertions checked against a submission
- Check results, graded submissions and grading responses

Submissions are immutable once created and validate their own
score/verdict invariants.
"""

import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from solution_grader.config import PASS_THRESHOLD


def rounded_percentage(passed_count: int, total_count: int) -> int:
    """
    Percentage of passed checks, rounded half-up to an integer.

    Args:
        passed_count: Number of passing checks.
        total_count: Number of checks run (must be positive).

    Returns:
        Integer in 0..100.
    """
    ratio = Decimal(100 * passed_count) / Decimal(total_count)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeedbackTier(str, Enum):
    """Coarse feedback band derived from a score."""

    CELEBRATORY = "celebratory"  # 90 and above
    POSITIVE = "positive"  # 70-89
    CONSTRUCTIVE = "constructive"  # 50-69
    ENCOURAGING = "encouraging"  # below 50


# ==============================================================================
# Check Models
# ==============================================================================


class CheckResult(BaseModel):
    """One named pass/fail outcome from executing a submission."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Name of the check (e.g., 'Syntax Validation')",
    )

    passed: bool = Field(
        ...,
        description="Whether the check passed",
    )

    message: str = Field(
        default="",
        description="Explanation of the outcome",
    )


# ==============================================================================
# Task Models
# ==============================================================================


class ContainsAssertion(BaseModel):
    """Passes when the code contains a snippet."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["contains"] = "contains"
    name: str = Field(..., min_length=1)
    snippet: str = Field(..., min_length=1)


class ExcludesAssertion(BaseModel):
    """Passes when the code does not contain a snippet."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["excludes"] = "excludes"
    name: str = Field(..., min_length=1)
    snippet: str = Field(..., min_length=1)


class PatternAssertion(BaseModel):
    """Passes when a regular expression matches somewhere in the code."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["matches"] = "matches"
    name: str = Field(..., min_length=1)
    pattern: str = Field(..., min_length=1)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regular expression '{v}': {e}") from e
        return v


class DefinesAssertion(BaseModel):
    """Passes when the code defines a function or class with the given name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["defines"] = "defines"
    name: str = Field(..., min_length=1)
    symbol: str = Field(..., pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")


TaskAssertion = Annotated[
    Union[ContainsAssertion, ExcludesAssertion, PatternAssertion, DefinesAssertion],
    Field(discriminator="kind"),
]


class Task(BaseModel):
    """
    A generated exercise a submission is graded against.

    Read-only to the grading engine.
    """

    model_config = ConfigDict(frozen=True)

    task_id: str = Field(
        ...,
        description="Position of the task within its document's task list",
    )

    instructions: str = Field(
        ...,
        min_length=1,
        description="What the student is asked to build",
    )

    assertions: tuple[TaskAssertion, ...] = Field(
        default=(),
        description="Task-specific checks run against every submission",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def title(self) -> str:
        """First non-empty line of the instructions."""
        for line in self.instructions.splitlines():
            if line.strip():
                return line.strip()
        return self.instructions.strip()


class Document(BaseModel):
    """An uploaded document and the tasks generated from it."""

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1, description="Owner of the document")
    title: str = Field(default="")
    tasks: tuple[Task, ...] = Field(default=())

    @model_validator(mode="after")
    def validate_task_ids(self) -> "Document":
        """Task ids must be their positions in the list."""
        for index, task in enumerate(self.tasks):
            if task.task_id != str(index):
                raise ValueError(
                    f"Task at position {index} has id '{task.task_id}', expected '{index}'"
                )
        return self


# ==============================================================================
# Submission Models
# ==============================================================================


class Submission(BaseModel):
    """
    One graded attempt at a task.

    ``submission_id`` is assigned by the store on append. The score and
    verdict must agree with the check results.
    """

    model_config = ConfigDict(frozen=True)

    submission_id: str | None = Field(
        default=None,
        description="Store-assigned id, ordered by submission time",
    )

    user_id: str = Field(..., min_length=1)
    document_id: str = Field(..., min_length=1)
    task_id: str = Field(..., min_length=1)

    code: str = Field(..., description="Submitted source code")
    language: str = Field(..., min_length=1, description="Declared language tag")

    score: int = Field(..., ge=0, le=100)
    passed: bool

    check_results: tuple[CheckResult, ...] = Field(..., min_length=1)

    submitted_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def validate_score_invariants(self) -> "Submission":
        """Ensure score and verdict are derived from the check results."""
        expected = rounded_percentage(self.passed_checks, self.total_checks)
        if self.score != expected:
            raise ValueError(
                f"Score ({self.score}) does not match check results "
                f"({self.passed_checks}/{self.total_checks} -> {expected})"
            )
        if self.passed != (self.score >= PASS_THRESHOLD):
            raise ValueError(
                f"passed={self.passed} is inconsistent with score {self.score} "
                f"and threshold {PASS_THRESHOLD}"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed_checks(self) -> int:
        """Number of passing checks."""
        return sum(1 for r in self.check_results if r.passed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_checks(self) -> int:
        """Number of checks run."""
        return len(self.check_results)


class GradingResult(BaseModel):
    """
    Response of a grading call.

    Derived from the freshly stored submission; never persisted itself.
    """

    model_config = ConfigDict(frozen=True)

    submission_id: str
    score: int = Field(..., ge=0, le=100)
    passed: bool
    check_results: tuple[CheckResult, ...] = Field(..., min_length=1)
    feedback: str = Field(..., min_length=1)
    feedback_tier: FeedbackTier

    @classmethod
    def from_submission(
        cls, submission: Submission, feedback: str, feedback_tier: FeedbackTier
    ) -> "GradingResult":
        """Build the response for a stored submission."""
        if submission.submission_id is None:
            raise ValueError("Submission has not been stored yet")
        return cls(
            submission_id=submission.submission_id,
            score=submission.score,
            passed=submission.passed,
            check_results=submission.check_results,
            feedback=feedback,
            feedback_tier=feedback_tier,
        )
