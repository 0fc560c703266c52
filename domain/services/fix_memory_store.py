from abc import ABC, abstractmethod
from typing import List

from domain.diagnostics.models import FixMemoryEntry


class FixMemoryStore(ABC):
    """Abstract persistence interface for one workspace's fix memory."""

    @abstractmethod
    def load(self) -> List[FixMemoryEntry]:
        """Return every stored entry, oldest first. A missing store is empty."""
        raise NotImplementedError

    @abstractmethod
    def save(self, entries: List[FixMemoryEntry]) -> None:
        """Replace the stored entries. Raises FixMemoryStoreError on failure."""
        raise NotImplementedError
