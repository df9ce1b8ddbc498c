"""
Cached document repository.

Wraps another repository with an explicit keyed cache: entries expire
after a fixed TTL and can be invalidated by id. Lookups that fail are
never cached.
"""

import threading
import time
from typing import Callable

from solution_grader.documents.base import DocumentRepository
from solution_grader.models import Document


class CachedDocumentRepository(DocumentRepository):
    """TTL cache in front of a DocumentRepository."""

    def __init__(
        self,
        inner: DocumentRepository,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            inner: Repository that owns the documents.
            ttl_seconds: Lifetime of a cached entry, must be positive.
            clock: Monotonic time source, in seconds.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._inner = inner
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, Document]] = {}

    def get_document(self, document_id: str) -> Document:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(document_id)
            if entry is not None and entry[0] > now:
                return entry[1]

        document = self._inner.get_document(document_id)
        with self._lock:
            self._entries[document_id] = (now + self._ttl, document)
        return document

    def invalidate(self, document_id: str | None = None) -> None:
        """Drop one cached document, or all of them when no id is given."""
        with self._lock:
            if document_id is None:
                self._entries.clear()
            else:
                self._entries.pop(document_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
