"""Store factory module."""

from solution_grader.config import Settings, StoreBackend, get_settings
from solution_grader.storage.base import SubmissionStore
from solution_grader.storage.jsonl import JsonlSubmissionStore
from solution_grader.storage.memory import InMemorySubmissionStore


def create_store(settings: Settings | None = None) -> SubmissionStore:
    """
    Create the submission store selected in the settings.

    Args:
        settings: Configuration settings. Uses global settings if not provided.

    Returns:
        A SubmissionStore implementation.
    """
    settings = settings or get_settings()

    if settings.store_backend is StoreBackend.JSONL:
        return JsonlSubmissionStore(settings.data_directory)
    return InMemorySubmissionStore()
