"""
Static check executor.

Evaluates a submission without running it: non-triviality, completeness,
structural syntax, and the task's own assertions. Every check is a
deterministic function of the code and the task.
"""

import ast
import re
from typing import ClassVar

from solution_grader.config import Settings
from solution_grader.executors.base import TestExecutor
from solution_grader.executors.syntax import get_syntax_checker, syntax_languages
from solution_grader.models import (
    CheckResult,
    ContainsAssertion,
    DefinesAssertion,
    ExcludesAssertion,
    PatternAssertion,
    Task,
    TaskAssertion,
)

NON_TRIVIALITY_CHECK = "Basic Functionality Test"
COMPLETENESS_CHECK = "Code Quality Check"
SYNTAX_CHECK = "Syntax Validation"


class StaticCheckExecutor(TestExecutor):
    """
    Runs the reference check battery.

    Checks, in order:
    1. Non-triviality: trimmed code must be longer than ``min_code_length``
    2. Completeness: no placeholder marker (e.g. ``TODO``) may appear
    3. Syntax: the code must parse for its declared language
    4. One check per task assertion
    """

    SUPPORTED_LANGUAGES: ClassVar[tuple[str, ...]] = syntax_languages()

    # Declaration keywords recognised for non-Python ``defines`` assertions
    DECLARATION_KEYWORDS: ClassVar[tuple[str, ...]] = (
        "function",
        "def",
        "fn",
        "func",
        "fun",
        "class",
        "struct",
        "interface",
        "enum",
        "trait",
        "type",
    )

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        min_code_length: int = 50,
        placeholder_markers: tuple[str, ...] = ("TODO", "..."),
    ):
        super().__init__(timeout_seconds)
        self._min_code_length = min_code_length
        self._placeholder_markers = placeholder_markers

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticCheckExecutor":
        return cls(
            timeout_seconds=settings.execution_timeout_seconds,
            min_code_length=settings.min_code_length,
            placeholder_markers=settings.placeholder_markers,
        )

    def _run_checks(self, code: str, language: str, task: Task) -> list[CheckResult]:
        results = [
            self._check_non_trivial(code),
            self._check_complete(code),
            self._check_syntax(code, language),
        ]
        results.extend(self._check_assertion(code, language, a) for a in task.assertions)
        return results

    def _check_non_trivial(self, code: str) -> CheckResult:
        length = len(code.strip())
        if length > self._min_code_length:
            return CheckResult(name=NON_TRIVIALITY_CHECK, passed=True, message="Passed")
        return CheckResult(
            name=NON_TRIVIALITY_CHECK,
            passed=False,
            message=f"Code too short ({length} characters, more than "
            f"{self._min_code_length} required)",
        )

    def _check_complete(self, code: str) -> CheckResult:
        found = [marker for marker in self._placeholder_markers if marker in code]
        if not found:
            return CheckResult(name=COMPLETENESS_CHECK, passed=True, message="Code is complete")
        return CheckResult(
            name=COMPLETENESS_CHECK,
            passed=False,
            message="Code should be complete, found placeholder(s): "
            + ", ".join(repr(m) for m in found),
        )

    def _check_syntax(self, code: str, language: str) -> CheckResult:
        checker = get_syntax_checker(language)
        if checker is None:
            return CheckResult(
                name=SYNTAX_CHECK,
                passed=False,
                message=f"No syntax checker available for '{language}'",
            )
        report = checker.check(code)
        return CheckResult(name=SYNTAX_CHECK, passed=report.valid, message=report.message)

    def _check_assertion(self, code: str, language: str, assertion: TaskAssertion) -> CheckResult:
        if isinstance(assertion, ContainsAssertion):
            passed = assertion.snippet in code
            message = (
                f"Found required code: {assertion.snippet!r}"
                if passed
                else f"Expected the solution to contain {assertion.snippet!r}"
            )
        elif isinstance(assertion, ExcludesAssertion):
            passed = assertion.snippet not in code
            message = (
                f"Does not use {assertion.snippet!r}"
                if passed
                else f"The solution must not contain {assertion.snippet!r}"
            )
        elif isinstance(assertion, PatternAssertion):
            passed = re.search(assertion.pattern, code, re.MULTILINE) is not None
            message = (
                "Matched the expected pattern"
                if passed
                else f"No match for pattern {assertion.pattern!r}"
            )
        elif isinstance(assertion, DefinesAssertion):
            passed = self._defines(code, language, assertion.symbol)
            message = (
                f"Defines '{assertion.symbol}'"
                if passed
                else f"Expected a definition of '{assertion.symbol}'"
            )
        else:
            raise TypeError(f"Unknown assertion type: {type(assertion).__name__}")

        return CheckResult(name=assertion.name, passed=passed, message=message)

    def _defines(self, code: str, language: str, symbol: str) -> bool:
        if language == "python":
            try:
                tree = ast.parse(code)
            except (SyntaxError, ValueError):
                return False
            return any(
                isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef))
                and node.name == symbol
                for node in ast.walk(tree)
            )

        name = re.escape(symbol)
        keywords = "|".join(self.DECLARATION_KEYWORDS)
        patterns = (
            rf"\b(?:{keywords})\s+{name}\b",
            rf"\b(?:const|let|var|val)\s+{name}\s*[:=]",
            rf"\b{name}\s*\([^;{{}}]*\)\s*(?:[^;{{}}]*)\{{",
        )
        return any(re.search(p, code) for p in patterns)
