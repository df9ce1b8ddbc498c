"""
Executor factory module.

Selects the executor for a submission's language tag. The grading
engine only depends on the ``TestExecutor`` interface, so additional
executors can be registered here without touching it.
"""

import logging

from solution_grader.config import Settings, get_settings
from solution_grader.executors.base import TestExecutor, UnsupportedLanguage
from solution_grader.executors.static import StaticCheckExecutor

logger = logging.getLogger(__name__)

# Registry of all available executors, most specific first
_EXECUTORS: tuple[type[TestExecutor], ...] = (StaticCheckExecutor,)


def get_supported_languages() -> tuple[str, ...]:
    """
    Get all supported language tags across all executors.

    Returns:
        Tuple of canonical language tags (e.g., ('c', 'cpp', ...)).
    """
    languages: list[str] = []
    for executor_cls in _EXECUTORS:
        languages.extend(executor_cls.SUPPORTED_LANGUAGES)
    return tuple(sorted(set(languages)))


def create_executor(language: str, settings: Settings | None = None) -> TestExecutor:
    """
    Create the executor for a given language.

    Args:
        language: Language tag declared with the submission.
        settings: Configuration settings. Uses global settings if not provided.

    Returns:
        An instance of the appropriate TestExecutor subclass.

    Raises:
        UnsupportedLanguage: If no executor handles the language.
    """
    settings = settings or get_settings()

    for executor_cls in _EXECUTORS:
        if executor_cls.supports(language):
            logger.debug("Selected %s for language %r", executor_cls.__name__, language)
            return executor_cls.from_settings(settings)

    raise UnsupportedLanguage(language, get_supported_languages())
