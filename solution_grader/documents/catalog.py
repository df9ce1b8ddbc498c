"""
JSON document catalog.

Loads documents and their generated tasks from a JSON file of the form::

    {
      "documents": [
        {
          "document_id": "doc-1",
          "user_id": "user-1",
          "title": "Data Structures",
          "tasks": [
            "Implement a stack with push and pop.",
            {
              "instructions": "Write a function add(a, b).",
              "assertions": [
                {"kind": "defines", "name": "Defines add", "symbol": "add"}
              ]
            }
          ]
        }
      ]
    }

A task is either a plain instruction string, the form generated tasks
are stored in, or an object with instructions and assertions.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from solution_grader.documents.memory import InMemoryDocumentRepository
from solution_grader.models import Document

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the document catalog cannot be loaded."""

    def __init__(self, message: str, path: Path, cause: Exception | None = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Invalid document catalog '{path}': {message}")


class JsonCatalogRepository(InMemoryDocumentRepository):
    """Document repository backed by a JSON catalog file."""

    def __init__(self, path: Path):
        """
        Load the catalog.

        Args:
            path: Path to the JSON catalog.

        Raises:
            CatalogError: If the file is missing or malformed.
        """
        self._path = path
        super().__init__(self._load(path))
        logger.info("Loaded %d document(s) from %s", len(self._documents), path)

    @property
    def path(self) -> Path:
        return self._path

    @classmethod
    def _load(cls, path: Path) -> list[Document]:
        if not path.is_file():
            raise CatalogError("File does not exist", path)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogError(f"Could not read file: {e}", path, cause=e) from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON: {e}", path, cause=e) from e

        if not isinstance(data, dict) or not isinstance(data.get("documents"), list):
            raise CatalogError("Expected an object with a 'documents' list", path)

        documents: list[Document] = []
        seen: set[str] = set()
        for i, raw in enumerate(data["documents"]):
            document = cls._parse_document(raw, i, path)
            if document.document_id in seen:
                raise CatalogError(f"Duplicate document id '{document.document_id}'", path)
            seen.add(document.document_id)
            documents.append(document)
        return documents

    @staticmethod
    def _parse_document(raw: Any, position: int, path: Path) -> Document:
        if not isinstance(raw, dict):
            raise CatalogError(f"documents[{position}] must be an object", path)

        tasks: list[dict[str, Any]] = []
        for index, task in enumerate(raw.get("tasks") or []):
            if isinstance(task, str):
                tasks.append({"task_id": str(index), "instructions": task})
            elif isinstance(task, dict):
                tasks.append({**task, "task_id": str(index)})
            else:
                raise CatalogError(
                    f"documents[{position}].tasks[{index}] must be a string or an object", path
                )

        try:
            return Document.model_validate({**raw, "tasks": tasks})
        except ValidationError as e:
            raise CatalogError(f"documents[{position}] is invalid: {e}", path, cause=e) from e
