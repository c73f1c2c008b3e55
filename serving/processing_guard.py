"""
Single in-flight guard for document mutations.

At most one mutation runs per document. A second request while one is in
flight is rejected rather than queued.
"""
import threading
from contextlib import contextmanager
from typing import Generator, Set

from core.exceptions import DocumentBusyError


class ProcessingGuard:
    """Tracks which documents have a mutation in flight."""

    def __init__(self):
        self._busy: Set[str] = set()
        self._lock = threading.Lock()

    def is_busy(self, document_id: str) -> bool:
        with self._lock:
            return document_id in self._busy

    @contextmanager
    def hold(self, document_id: str) -> Generator[None, None, None]:
        """
        Mark a document busy for the duration of the block.

        Raises:
            DocumentBusyError: If the document is already busy
        """
        with self._lock:
            if document_id in self._busy:
                raise DocumentBusyError(document_id)
            self._busy.add(document_id)
        try:
            yield
        finally:
            with self._lock:
                self._busy.discard(document_id)


# Shared by all requests of this process
processing_guard = ProcessingGuard()
