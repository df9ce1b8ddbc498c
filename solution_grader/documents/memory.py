"""In-process document repository."""

from typing import Iterable

from solution_grader.documents.base import DocumentNotFound, DocumentRepository
from solution_grader.models import Document


class InMemoryDocumentRepository(DocumentRepository):
    """Serves documents from a dict keyed by document id."""

    def __init__(self, documents: Iterable[Document] = ()):
        self._documents: dict[str, Document] = {d.document_id: d for d in documents}

    def add(self, document: Document) -> None:
        """Add or replace a document."""
        self._documents[document.document_id] = document

    def get_document(self, document_id: str) -> Document:
        try:
            return self._documents[document_id]
        except KeyError:
            raise DocumentNotFound(document_id) from None

    def list_documents(self) -> list[Document]:
        return list(self._documents.values())
