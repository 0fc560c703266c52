"""Bounded, per-workspace memory of verified fixes."""

import os
import threading
import uuid
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from domain.exceptions import FixMemoryStoreError
from infrastructure.logging import get_logger
from .models import Analysis, ErrorCategory, FixMemoryEntry, utc_now_iso
from .signatures import generate_error_signature

if TYPE_CHECKING:
    from domain.services.fix_memory_store import FixMemoryStore

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_MAX_CATEGORY_MATCHES = 5


class FixMemory:
    """
    Signature-indexed store of fixes for a single workspace.

    Every load/mutate/save cycle runs under one re-entrant lock, so
    concurrent ``record`` calls in the same process cannot drop each
    other's writes.
    """

    def __init__(
        self,
        store: "FixMemoryStore",
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_category_matches: int = DEFAULT_MAX_CATEGORY_MATCHES,
    ):
        self.store = store
        self.max_entries = max_entries
        self.max_category_matches = max_category_matches
        self.lock = threading.RLock()
        self.logger = logger.getChild("FixMemory")

    def entries(self) -> List[FixMemoryEntry]:
        with self.lock:
            return self.store.load()

    def find_similar(self, signature: str, category: ErrorCategory) -> List[FixMemoryEntry]:
        """
        Return exact signature matches, verified or not.

        With no exact match, fall back to the most recent verified entries of
        the same category. An unreadable store yields no matches.
        """
        try:
            entries = self.entries()
        except FixMemoryStoreError as e:
            self.logger.warning(f"Fix memory unavailable, continuing without it: {e}")
            return []

        exact = [entry for entry in entries if entry.signature == signature]
        if exact:
            return exact

        same_category = [e for e in reversed(entries) if e.category == category and e.verified]
        same_category.sort(key=lambda e: e.timestamp, reverse=True)
        return same_category[:self.max_category_matches]

    def record(self, analysis: Analysis) -> Optional[FixMemoryEntry]:
        """
        Remember the fix applied for ``analysis``.

        Only verified resolutions are kept. An entry with the same signature is
        replaced in place; otherwise the entry is appended and the oldest
        entries are evicted past ``max_entries``. Storage failures propagate.
        """
        resolution = analysis.resolution
        if resolution is None or not resolution.verified:
            self.logger.debug(f"Skipping {analysis.id}: resolution is not verified")
            return None

        entry = FixMemoryEntry(
            id=f"FIX-{uuid.uuid4().hex[:12]}",
            timestamp=utc_now_iso(),
            signature=generate_error_signature(analysis.error),
            category=analysis.category,
            root_cause=analysis.decomposition.root_cause,
            fix_applied=resolution.fix_applied,
            verified=True,
            related_ids=list(analysis.related_fix_ids),
        )

        with self.lock:
            entries = self.store.load()
            for index, existing in enumerate(entries):
                if existing.signature == entry.signature:
                    entry.id = existing.id
                    entries[index] = entry
                    self.logger.info(f"Updated fix {entry.id} for signature {entry.signature}")
                    break
            else:
                entries.append(entry)
                self.logger.info(f"Recorded fix {entry.id} for signature {entry.signature}")

            overflow = len(entries) - self.max_entries
            if overflow > 0:
                entries = entries[overflow:]
                self.logger.info(f"Evicted {overflow} oldest fix memory entries")

            self.store.save(entries)

        return entry


class FixMemoryRegistry:
    """Hands out one ``FixMemory`` per workspace, creating it on first use."""

    def __init__(
        self,
        store_factory: Callable[[str], "FixMemoryStore"],
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_category_matches: int = DEFAULT_MAX_CATEGORY_MATCHES,
    ):
        self.store_factory = store_factory
        self.max_entries = max_entries
        self.max_category_matches = max_category_matches
        self._memories: Dict[str, FixMemory] = {}
        self._guard = threading.Lock()

    def get(self, workspace: str) -> FixMemory:
        key = os.path.abspath(workspace)
        with self._guard:
            memory = self._memories.get(key)
            if memory is None:
                memory = FixMemory(
                    self.store_factory(key),
                    max_entries=self.max_entries,
                    max_category_matches=self.max_category_matches,
                )
                self._memories[key] = memory
            return memory
