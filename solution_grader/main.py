"""
Solution Grader CLI Application.

Provides a command-line interface for grading code submissions against
generated tasks and for browsing a student's submission history.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from solution_grader.config import Settings, get_settings
from solution_grader.documents import (
    CachedDocumentRepository,
    CatalogError,
    DocumentRepository,
    JsonCatalogRepository,
)
from solution_grader.errors import GraderError
from solution_grader.executors import get_supported_languages
from solution_grader.grading import GradingEngine, HistorySelector
from solution_grader.logging_setup import setup_logging
from solution_grader.models import GradingResult, Submission
from solution_grader.storage import create_store

# Create Typer app
app = typer.Typer(
    name="solution-grader",
    help="Grade code submissions against generated tasks",
    add_completion=False,
)

console = Console()

# File extension -> language tag, used when --language is omitted
EXTENSION_LANGUAGES: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".kt": "kotlin",
    ".swift": "swift",
    ".php": "php",
    ".json": "json",
}

UserOption = Annotated[
    Optional[str],
    typer.Option("--user", "-u", envvar="GRADER_USER_ID", help="Authenticated user id"),
]


def _build_documents(settings: Settings) -> DocumentRepository:
    documents: DocumentRepository = JsonCatalogRepository(settings.catalog_path)
    if settings.task_cache_ttl_seconds > 0:
        documents = CachedDocumentRepository(documents, settings.task_cache_ttl_seconds)
    return documents


def _build_history(settings: Settings) -> HistorySelector:
    return HistorySelector(create_store(settings), settings.recent_limit)


def _build_engine(settings: Settings) -> GradingEngine:
    return GradingEngine(
        documents=_build_documents(settings),
        store=create_store(settings),
        settings=settings,
    )


def _load_settings() -> Settings:
    settings = get_settings()
    setup_logging(settings.log_level)
    return settings


@app.command()
def submit(
    document_id: Annotated[str, typer.Argument(help="Document the task belongs to")],
    task_id: Annotated[str, typer.Argument(help="Task id within the document")],
    code_file: Annotated[Path, typer.Argument(help="Path to the solution source file")],
    user: UserOption = None,
    language: Annotated[
        Optional[str],
        typer.Option("--language", "-l", help="Language tag (inferred from the file extension)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show every check"),
    ] = False,
) -> None:
    """
    Grade a solution file and record the attempt.

    Exits with status 0 once the submission is graded, whether or not it
    passed, and 1 when it could not be graded.
    """
    if not code_file.is_file():
        console.print(f"[red]Error:[/red] Solution file not found: {code_file}")
        raise typer.Exit(1)

    tag = language or EXTENSION_LANGUAGES.get(code_file.suffix.lower())
    if not tag:
        console.print(
            f"[red]Error:[/red] Cannot infer the language of '{code_file.name}', "
            "pass --language"
        )
        raise typer.Exit(1)

    try:
        code = code_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/red] Could not read {code_file}: {e}")
        raise typer.Exit(1)

    try:
        engine = _build_engine(_load_settings())
        with console.status("Running checks..."):
            result = engine.submit_solution(user, document_id, task_id, code, tag)
    except CatalogError as e:
        console.print(f"[red]Catalog Error:[/red] {e}")
        raise typer.Exit(1)
    except GraderError as e:
        console.print(f"[red]Error:[/red] {e.user_message}")
        raise typer.Exit(1)

    _display_result(result, verbose)


@app.command()
def history(
    document_id: Annotated[str, typer.Argument(help="Document the task belongs to")],
    task_id: Annotated[str, typer.Argument(help="Task id within the document")],
    user: UserOption = None,
) -> None:
    """Show the most recent submissions for a task, newest first."""
    try:
        selector = _build_history(_load_settings())
        submissions = selector.recent_submissions(user, document_id, task_id) if user else []
    except GraderError as e:
        console.print(f"[red]Error:[/red] {e.user_message}")
        raise typer.Exit(1)

    if not submissions:
        console.print("No attempts yet")
        return

    table = Table(title=f"Recent submissions for task {task_id}")
    table.add_column("Submission", style="cyan")
    table.add_column("Submitted")
    table.add_column("Language")
    table.add_column("Score", justify="right")
    table.add_column("Status")

    for s in submissions:
        table.add_row(
            s.submission_id or "",
            s.submitted_at.strftime("%Y-%m-%d %H:%M:%S"),
            s.language,
            str(s.score),
            "✅" if s.passed else "❌",
        )

    console.print(table)


@app.command()
def best(
    document_id: Annotated[str, typer.Argument(help="Document the task belongs to")],
    task_id: Annotated[str, typer.Argument(help="Task id within the document")],
    user: UserOption = None,
) -> None:
    """Show the best submission for a task."""
    try:
        selector = _build_history(_load_settings())
        submission = selector.best_submission(user, document_id, task_id) if user else None
    except GraderError as e:
        console.print(f"[red]Error:[/red] {e.user_message}")
        raise typer.Exit(1)

    if submission is None:
        console.print("No attempts yet")
        return

    _display_submission(submission)


@app.command()
def tasks(
    document_id: Annotated[str, typer.Argument(help="Document to list tasks for")],
) -> None:
    """List the tasks generated for a document."""
    try:
        documents = _build_documents(_load_settings())
        document = documents.get_document(document_id)
    except CatalogError as e:
        console.print(f"[red]Catalog Error:[/red] {e}")
        raise typer.Exit(1)
    except GraderError as e:
        console.print(f"[red]Error:[/red] {e.user_message}")
        raise typer.Exit(1)

    table = Table(title=document.title or document.document_id)
    table.add_column("Task", style="cyan", justify="right")
    table.add_column("Title")
    table.add_column("Checks", justify="right")

    for task in document.tasks:
        table.add_row(task.task_id, task.title[:80], str(len(task.assertions)))

    console.print(table)


@app.command()
def languages() -> None:
    """List the supported language tags."""
    for tag in get_supported_languages():
        console.print(tag)


def _score_color(score: int) -> str:
    return "green" if score >= 70 else "yellow" if score >= 50 else "red"


def _display_result(result: GradingResult, verbose: bool = False) -> None:
    """Display a grading result."""
    color = _score_color(result.score)
    status = "PASSED" if result.passed else "NOT PASSED"
    passed_count = sum(1 for r in result.check_results if r.passed)
    console.print(
        Panel(
            f"[{color}][bold]{result.score} / 100[/bold] - {status}[/{color}]\n"
            f"{passed_count} of {len(result.check_results)} checks passed",
            title="Score",
        )
    )

    if verbose:
        table = Table(title="Checks")
        table.add_column("Check", style="cyan")
        table.add_column("Status")
        table.add_column("Message")

        for check in result.check_results:
            table.add_row(check.name, "✅" if check.passed else "❌", check.message)

        console.print(table)

    console.print(Panel(result.feedback, title="Feedback"))
    console.print(f"[dim]Submission {result.submission_id}[/dim]")


def _display_submission(submission: Submission) -> None:
    """Display a stored submission."""
    color = _score_color(submission.score)
    console.print(
        Panel(
            f"[{color}][bold]{submission.score} / 100[/bold][/{color}] "
            f"({submission.language}, {submission.submitted_at:%Y-%m-%d %H:%M:%S})",
            title=f"Best submission {submission.submission_id}",
        )
    )

    table = Table(title="Checks")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Message")
    for check in submission.check_results:
        table.add_row(check.name, "✅" if check.passed else "❌", check.message)
    console.print(table)


if __name__ == "__main__":
    app()
