"""
Unit tests for the test executors.

Tests the syntax checkers, the static check battery, executor selection
by language, and the time bound and fault wrapping of the base class.
"""

import os
import time
from typing import ClassVar

import pytest

from solution_grader.config import Settings
from solution_grader.executors import (
    ExecutionFailed,
    ExecutionTimeout,
    StaticCheckExecutor,
    TestExecutor,
    UnsupportedLanguage,
    create_executor,
    get_supported_languages,
    normalize_language,
)
from solution_grader.executors.static import (
    COMPLETENESS_CHECK,
    NON_TRIVIALITY_CHECK,
    SYNTAX_CHECK,
)
from solution_grader.executors.syntax import (
    BracketSyntaxChecker,
    JsonSyntaxChecker,
    PythonSyntaxChecker,
    get_syntax_checker,
)
from solution_grader.models import (
    CheckResult,
    ContainsAssertion,
    DefinesAssertion,
    ExcludesAssertion,
    PatternAssertion,
    Task,
)


class TestSyntaxCheckers:
    """Tests for per-language syntax checkers."""

    def test_python_valid(self, add_code: str) -> None:
        """Test valid Python parses."""
        assert PythonSyntaxChecker().check(add_code).valid

    def test_python_invalid(self) -> None:
        """Test a Python syntax error is reported with its line."""
        report = PythonSyntaxChecker().check("def broken(:\n    pass\n")

        assert not report.valid
        assert "line 1" in report.message

    def test_json(self) -> None:
        """Test JSON documents are parsed."""
        checker = JsonSyntaxChecker()

        assert checker.check('{"a": [1, 2, 3]}').valid
        assert not checker.check('{"a": [1, 2, 3}').valid

    def test_brackets_balanced(self) -> None:
        """Test balanced C-family code passes."""
        code = """
function greet(name) {
    // a comment with an unmatched ( bracket
    const message = "Hello, {" + name + "}";
    /* block comment ] */
    return [message].join('');
}
"""
        assert BracketSyntaxChecker().check(code).valid

    def test_brackets_unclosed(self) -> None:
        """Test an unclosed brace is reported with the line it opened on."""
        code = "int main() {\n    return 0;\n"
        report = BracketSyntaxChecker().check(code)

        assert not report.valid
        assert "Unclosed '{' opened on line 1" in report.message

    def test_brackets_mismatched(self) -> None:
        """Test a mismatched closing bracket is reported."""
        report = BracketSyntaxChecker().check("int x = (1 + 2];")

        assert not report.valid
        assert "Unmatched ']'" in report.message

    def test_unterminated_string(self) -> None:
        """Test an unterminated string literal is reported."""
        report = BracketSyntaxChecker().check('let s = "oops;\n')

        assert not report.valid
        assert "Unterminated string" in report.message

    def test_rust_lifetimes(self) -> None:
        """Test Rust lifetimes are not mistaken for char literals."""
        code = "fn first<'a>(s: &'a str) -> &'a str {\n    &s[..1]\n}\n"
        assert get_syntax_checker("rust").check(code).valid

    def test_unknown_language(self) -> None:
        """Test languages without a checker return None."""
        assert get_syntax_checker("cobol") is None


class TestStaticCheckExecutor:
    """Tests for StaticCheckExecutor."""

    def test_all_checks_pass(self, add_task: Task, add_code: str) -> None:
        """Test a complete solution passes every check."""
        results = StaticCheckExecutor().execute(add_code, "python", add_task)

        assert [r.name for r in results] == [
            NON_TRIVIALITY_CHECK,
            COMPLETENESS_CHECK,
            SYNTAX_CHECK,
            "Defines add",
        ]
        assert all(r.passed for r in results)

    def test_runs_every_check_after_failures(self, add_task: Task) -> None:
        """Test a failing check does not stop the remaining checks."""
        results = StaticCheckExecutor().execute("x = (", "python", add_task)

        assert len(results) == 4
        assert not any(r.passed for r in results[::2])

    def test_short_code_fails_non_triviality(self, add_task: Task) -> None:
        """Test short code fails the non-triviality check."""
        results = StaticCheckExecutor().execute("def add(a, b): return a + b", "python", add_task)
        check = results[0]

        assert check.name == NON_TRIVIALITY_CHECK
        assert not check.passed
        assert "too short" in check.message

    def test_whitespace_does_not_count(self, add_task: Task) -> None:
        """Test padding with whitespace does not make code non-trivial."""
        code = "x = 1" + " " * 100 + "\n" * 20
        results = StaticCheckExecutor().execute(code, "python", add_task)

        assert not results[0].passed

    @pytest.mark.parametrize("marker", ["TODO", "..."])
    def test_placeholder_fails_completeness(
        self, add_task: Task, add_code: str, marker: str
    ) -> None:
        """Test placeholder markers fail the completeness check."""
        code = add_code + f"\n# {marker} handle floats\n"
        results = StaticCheckExecutor().execute(code, "python", add_task)

        assert results[1].name == COMPLETENESS_CHECK
        assert not results[1].passed
        assert repr(marker) in results[1].message

    def test_custom_markers(self, add_task: Task, add_code: str) -> None:
        """Test the placeholder markers are configurable."""
        executor = StaticCheckExecutor(placeholder_markers=("FIXME",))

        assert executor.execute(add_code + "# TODO\n", "python", add_task)[1].passed
        assert not executor.execute(add_code + "# FIXME\n", "python", add_task)[1].passed

    def test_task_assertions(self) -> None:
        """Test each assertion kind produces its own check."""
        task = Task(
            task_id="0",
            instructions="Fetch with backoff",
            assertions=(
                DefinesAssertion(name="Defines fetch", symbol="fetch"),
                ContainsAssertion(name="Uses backoff", snippet="backoff"),
                ExcludesAssertion(name="No bare except", snippet="except:"),
                PatternAssertion(name="Has retries", pattern=r"^\s*for attempt in range\("),
                DefinesAssertion(name="Defines Client", symbol="Client"),
            ),
        )
        code = """import time


def fetch(url, retries=3):
    backoff = 0.5
    for attempt in range(retries):
        try:
            return _get(url)
        except OSError:
            time.sleep(backoff * 2 ** attempt)
    raise RuntimeError(url)
"""
        results = {r.name: r for r in StaticCheckExecutor().execute(code, "python", task)}

        assert results["Defines fetch"].passed
        assert results["Uses backoff"].passed
        assert results["No bare except"].passed
        assert results["Has retries"].passed
        assert not results["Defines Client"].passed
        assert "Client" in results["Defines Client"].message

    def test_defines_in_brace_language(self) -> None:
        """Test definitions are found in non-Python code."""
        task = Task(
            task_id="0",
            instructions="Implement add",
            assertions=(
                DefinesAssertion(name="Defines add", symbol="add"),
                DefinesAssertion(name="Defines Stack", symbol="Stack"),
            ),
        )
        code = """
public class Calculator {
    public static int add(int a, int b) {
        return a + b;
    }
}
"""
        results = StaticCheckExecutor().execute(code, "java", task)

        assert results[2].passed
        assert results[3].passed
        assert not results[4].passed

    def test_deterministic(self, api_task: Task, add_code: str) -> None:
        """Test repeated execution of the same code gives the same results."""
        executor = StaticCheckExecutor()

        assert executor.execute(add_code, "python", api_task) == executor.execute(
            add_code, "python", api_task
        )

    def test_language_aliases(self, add_task: Task, add_code: str) -> None:
        """Test aliases resolve to the canonical language."""
        results = StaticCheckExecutor().execute(add_code, "Py", add_task)

        assert results[2].passed
        assert normalize_language(" C++ ") == "cpp"

    def test_unsupported_language(self, add_task: Task) -> None:
        """Test an unknown language is an execution failure."""
        with pytest.raises(UnsupportedLanguage) as exc_info:
            StaticCheckExecutor().execute("IDENTIFICATION DIVISION.", "cobol", add_task)

        assert isinstance(exc_info.value, ExecutionFailed)


class _SleepingExecutor(TestExecutor):
    SUPPORTED_LANGUAGES: ClassVar[tuple[str, ...]] = ("python",)

    def _run_checks(self, code: str, language: str, task: Task) -> list[CheckResult]:
        time.sleep(30)
        return [CheckResult(name="late", passed=True)]


class _CrashingExecutor(TestExecutor):
    SUPPORTED_LANGUAGES: ClassVar[tuple[str, ...]] = ("python",)

    def _run_checks(self, code: str, language: str, task: Task) -> list[CheckResult]:
        raise RuntimeError("sandbox exploded")


class _VanishingExecutor(TestExecutor):
    SUPPORTED_LANGUAGES: ClassVar[tuple[str, ...]] = ("python",)

    def _run_checks(self, code: str, language: str, task: Task) -> list[CheckResult]:
        os._exit(3)


class _SelfTimingExecutor(TestExecutor):
    SUPPORTED_LANGUAGES: ClassVar[tuple[str, ...]] = ("python",)

    def _run_checks(self, code: str, language: str, task: Task) -> list[CheckResult]:
        raise ExecutionTimeout(3.0)


class TestExecutorBase:
    """Tests for the TestExecutor base class."""

    def test_timeout(self, add_task: Task) -> None:
        """Test a check battery that runs too long raises ExecutionTimeout."""
        executor = _SleepingExecutor(timeout_seconds=0.2)

        started = time.monotonic()
        with pytest.raises(ExecutionTimeout) as exc_info:
            executor.execute("x = 1", "python", add_task)

        assert time.monotonic() - started < 5
        assert exc_info.value.timeout_seconds == 0.2
        assert isinstance(exc_info.value, ExecutionFailed)

    def test_timeout_stops_backtracking_pattern(self) -> None:
        """Test a catastrophically backtracking pattern is cut off at the time bound."""
        task = Task(
            task_id="0",
            instructions="Match a run of a's",
            assertions=(PatternAssertion(name="Only a's", pattern=r"^(a+)+$"),),
        )
        executor = StaticCheckExecutor(timeout_seconds=0.5, min_code_length=0)

        started = time.monotonic()
        with pytest.raises(ExecutionTimeout):
            executor.execute("a" * 32 + "b", "python", task)

        assert time.monotonic() - started < 5

    def test_crash_is_wrapped(self, add_task: Task) -> None:
        """Test unexpected executor errors surface as ExecutionFailed."""
        with pytest.raises(ExecutionFailed) as exc_info:
            _CrashingExecutor().execute("x = 1", "python", add_task)

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert "sandbox exploded" in str(exc_info.value)
        assert exc_info.value.user_message == "Could not evaluate your submission, try again."

    def test_process_exit_is_execution_failure(self, add_task: Task) -> None:
        """Test a check battery that dies without reporting is an execution failure."""
        with pytest.raises(ExecutionFailed, match="exited with code 3"):
            _VanishingExecutor().execute("x = 1", "python", add_task)

    def test_execution_failure_keeps_its_kind(self, add_task: Task) -> None:
        """Test grading errors raised by the checks reach the caller unchanged."""
        with pytest.raises(ExecutionTimeout) as exc_info:
            _SelfTimingExecutor(timeout_seconds=5.0).execute("x = 1", "python", add_task)

        assert exc_info.value.timeout_seconds == 3.0


class TestExecutorFactory:
    """Tests for executor selection."""

    def test_supported_languages(self) -> None:
        """Test the registry reports the known languages."""
        languages = get_supported_languages()

        assert "python" in languages
        assert "javascript" in languages
        assert "json" in languages
        assert list(languages) == sorted(languages)

    def test_create_from_settings(self, test_settings: Settings, add_task: Task) -> None:
        """Test the executor is configured from settings."""
        settings = test_settings.model_copy(update={"min_code_length": 5})
        executor = create_executor("python", settings)

        assert isinstance(executor, StaticCheckExecutor)
        assert executor.execute("x = 1 + 2", "python", add_task)[0].passed

    def test_unknown_language(self, test_settings: Settings) -> None:
        """Test an unknown language raises UnsupportedLanguage."""
        with pytest.raises(UnsupportedLanguage, match="brainfuck"):
            create_executor("brainfuck", test_settings)
