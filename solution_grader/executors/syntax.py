"""
Structural syntax checks per language.

Python and JSON are parsed with their real parsers. Brace-delimited
languages get a bracket-balance scan that skips string literals and
comments.
"""

import ast
import json
from abc import ABC, abstractmethod
from typing import ClassVar, NamedTuple


class SyntaxReport(NamedTuple):
    """Outcome of a syntax check."""

    valid: bool
    message: str


class SyntaxChecker(ABC):
    """Checks that code is structurally well-formed for a language."""

    LANGUAGES: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def check(self, code: str) -> SyntaxReport:
        """
        Check the structure of the code.

        Args:
            code: Source code to check.

        Returns:
            SyntaxReport describing the first problem found, if any.
        """
        ...


class PythonSyntaxChecker(SyntaxChecker):
    """Parses Python source with the ``ast`` module."""

    LANGUAGES: ClassVar[tuple[str, ...]] = ("python",)

    def check(self, code: str) -> SyntaxReport:
        try:
            ast.parse(code)
        except SyntaxError as e:
            return SyntaxReport(False, f"Syntax error on line {e.lineno}: {e.msg}")
        except ValueError as e:
            # e.g. source containing null bytes
            return SyntaxReport(False, f"Source could not be parsed: {e}")
        return SyntaxReport(True, "No syntax errors detected")


class JsonSyntaxChecker(SyntaxChecker):
    """Parses JSON documents."""

    LANGUAGES: ClassVar[tuple[str, ...]] = ("json",)

    def check(self, code: str) -> SyntaxReport:
        try:
            json.loads(code)
        except json.JSONDecodeError as e:
            return SyntaxReport(False, f"Invalid JSON on line {e.lineno}: {e.msg}")
        return SyntaxReport(True, "No syntax errors detected")


class BracketSyntaxChecker(SyntaxChecker):
    """
    Bracket-balance scan for C-family languages.

    Tracks (), [] and {} while skipping quoted literals, ``//`` line
    comments and ``/* */`` block comments. Reports the first unmatched
    or unclosed bracket with its line number.
    """

    LANGUAGES: ClassVar[tuple[str, ...]] = (
        "javascript",
        "typescript",
        "java",
        "c",
        "cpp",
        "csharp",
        "go",
        "rust",
        "kotlin",
        "swift",
        "php",
    )

    PAIRS: ClassVar[dict[str, str]] = {")": "(", "]": "[", "}": "{"}

    def __init__(self, quote_chars: str = "\"'`"):
        self._quote_chars = quote_chars

    def check(self, code: str) -> SyntaxReport:
        stack: list[tuple[str, int]] = []
        line = 1
        i = 0
        length = len(code)

        while i < length:
            char = code[i]
            nxt = code[i + 1] if i + 1 < length else ""

            if char == "\n":
                line += 1
            elif char == "/" and nxt == "/":
                end = code.find("\n", i)
                i = length if end == -1 else end
                continue
            elif char == "/" and nxt == "*":
                end = code.find("*/", i + 2)
                if end == -1:
                    return SyntaxReport(False, f"Unterminated block comment starting on line {line}")
                line += code.count("\n", i, end)
                i = end + 2
                continue
            elif char in self._quote_chars:
                end = self._find_closing_quote(code, i)
                if end == -1:
                    return SyntaxReport(False, f"Unterminated string literal on line {line}")
                line += code.count("\n", i, end)
                i = end + 1
                continue
            elif char in "([{":
                stack.append((char, line))
            elif char in self.PAIRS:
                if not stack or stack[-1][0] != self.PAIRS[char]:
                    return SyntaxReport(False, f"Unmatched '{char}' on line {line}")
                stack.pop()
            i += 1

        if stack:
            opener, opened_on = stack[-1]
            return SyntaxReport(False, f"Unclosed '{opener}' opened on line {opened_on}")
        return SyntaxReport(True, "No syntax errors detected")

    def _find_closing_quote(self, code: str, start: int) -> int:
        quote = code[start]
        i = start + 1
        while i < len(code):
            char = code[i]
            if char == "\\":
                i += 2
                continue
            if char == quote:
                return i
            if char == "\n" and quote != "`":
                return -1
            i += 1
        return -1


# Rust uses ' for lifetimes, so only double quotes delimit its literals.
_RUST_CHECKER = BracketSyntaxChecker(quote_chars='"')
_BRACKET_CHECKER = BracketSyntaxChecker()

_CHECKERS: dict[str, SyntaxChecker] = {
    "python": PythonSyntaxChecker(),
    "json": JsonSyntaxChecker(),
    **{language: _BRACKET_CHECKER for language in BracketSyntaxChecker.LANGUAGES},
    "rust": _RUST_CHECKER,
}


def get_syntax_checker(language: str) -> SyntaxChecker | None:
    """Return the syntax checker for a canonical language tag, if any."""
    return _CHECKERS.get(language)


def syntax_languages() -> tuple[str, ...]:
    """All languages with a syntax checker."""
    return tuple(sorted(_CHECKERS))
