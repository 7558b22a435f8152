"""Process-lifetime document id counter."""

from __future__ import annotations

import threading
from typing import Iterable

from ..core.exceptions import AllocatorExhaustedError
from ..core.types import MAX_DOCUMENT_ID, DocumentId


class IdAllocator:
    """Hands out monotonically increasing document ids.

    ``next_id()`` only reports the candidate; the caller advances the
    counter once the id has actually been claimed on disk, so a failed add
    does not use up an id in memory.
    """

    def __init__(self, next_id: int = 1):
        self._next_id = max(1, next_id)
        self._lock = threading.Lock()

    @classmethod
    def from_ids(cls, ids: Iterable[int]) -> "IdAllocator":
        """Seed the counter to one past the largest existing id."""
        highest = max(ids, default=0)
        return cls(highest + 1)

    @property
    def current(self) -> int:
        """The counter value, without range checking."""
        with self._lock:
            return self._next_id

    def next_id(self) -> DocumentId:
        """Return the next candidate id without advancing the counter.

        Raises:
            AllocatorExhaustedError: If the id space is used up.
        """
        with self._lock:
            if self._next_id > MAX_DOCUMENT_ID:
                raise AllocatorExhaustedError(
                    f"Document id {self._next_id} exceeds maximum {MAX_DOCUMENT_ID}"
                )
            return DocumentId(self._next_id)

    def advance(self, past: int) -> None:
        """Ensure the next candidate is greater than ``past``."""
        with self._lock:
            if past >= self._next_id:
                self._next_id = past + 1
