"""
Document Resolution Module.

Read-only access to documents and the tasks generated from them:
- In-memory repository
- JSON catalog file
- TTL cache wrapper
"""

from solution_grader.documents.base import DocumentNotFound, DocumentRepository, TaskNotFound
from solution_grader.documents.cache import CachedDocumentRepository
from solution_grader.documents.catalog import CatalogError, JsonCatalogRepository
from solution_grader.documents.memory import InMemoryDocumentRepository

__all__ = [
    "CachedDocumentRepository",
    "CatalogError",
    "DocumentNotFound",
    "DocumentRepository",
    "InMemoryDocumentRepository",
    "JsonCatalogRepository",
    "TaskNotFound",
]
