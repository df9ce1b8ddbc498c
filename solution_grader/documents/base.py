"""
Document and task resolution.

Documents and their generated task lists are owned by an external
pipeline; the grading engine only reads them through this interface.
"""

from abc import ABC, abstractmethod

from solution_grader.errors import GraderError
from solution_grader.models import Document, Task


class DocumentNotFound(GraderError):
    """Raised when a document id does not resolve."""

    user_message = "Document not found."

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class TaskNotFound(GraderError):
    """Raised when a task id does not resolve within its document."""

    user_message = "Task not found."

    def __init__(self, document_id: str, task_id: str):
        self.document_id = document_id
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id} (document {document_id})")


class DocumentRepository(ABC):
    """Read-only access to documents and their tasks."""

    @abstractmethod
    def get_document(self, document_id: str) -> Document:
        """
        Fetch a document by id.

        Raises:
            DocumentNotFound: If no document has that id.
        """
        ...

    def get_task(self, document_id: str, task_id: str) -> Task:
        """
        Resolve a task within a document.

        Task ids are positions in the document's task list, written as
        decimal strings.

        Args:
            document_id: Document the task belongs to.
            task_id: Position of the task in the document's list.

        Returns:
            The resolved Task.

        Raises:
            DocumentNotFound: If the document does not exist.
            TaskNotFound: If the task id is not a valid position.
        """
        document = self.get_document(document_id)

        index_text = task_id.strip()
        if not (index_text.isascii() and index_text.isdigit()):
            raise TaskNotFound(document_id, task_id)

        index = int(index_text)
        if index >= len(document.tasks):
            raise TaskNotFound(document_id, task_id)
        return document.tasks[index]
