import copy
import json
import os
from typing import List

from domain.diagnostics.models import FixMemoryEntry
from domain.exceptions import FixMemoryStoreError
from domain.services.fix_memory_store import FixMemoryStore
from infrastructure.logging import get_logger
from .json_files import read_json, write_json_atomic

logger = get_logger(__name__)


class JsonFileFixMemoryStore(FixMemoryStore):
    """Fix memory kept as a JSON array inside the workspace."""

    def __init__(self, workspace_root: str, memory_path: str) -> None:
        self.path = memory_path if os.path.isabs(memory_path) else os.path.join(workspace_root, memory_path)
        self.logger = logger.getChild("JsonFileFixMemoryStore")

    def load(self) -> List[FixMemoryEntry]:
        try:
            raw = read_json(self.path, default=[])
        except json.JSONDecodeError as e:
            self.logger.warning(f"Ignoring unreadable fix memory {self.path}: {e}")
            return []
        except OSError as e:
            raise FixMemoryStoreError(f"Cannot read fix memory {self.path}: {e}") from e

        if not isinstance(raw, list):
            self.logger.warning(f"Ignoring fix memory {self.path}: expected a JSON array")
            return []

        entries = []
        for item in raw:
            try:
                entries.append(FixMemoryEntry.from_dict(item))
            except (KeyError, TypeError, AttributeError) as e:
                self.logger.warning(f"Skipping malformed fix memory entry: {e}")
        return entries

    def save(self, entries: List[FixMemoryEntry]) -> None:
        try:
            write_json_atomic(self.path, [entry.to_dict() for entry in entries])
        except OSError as e:
            raise FixMemoryStoreError(f"Cannot write fix memory {self.path}: {e}") from e


class InMemoryFixMemoryStore(FixMemoryStore):
    """Process-local fix memory, mainly for tests and dry runs."""

    def __init__(self) -> None:
        self._entries: List[FixMemoryEntry] = []

    def load(self) -> List[FixMemoryEntry]:
        return copy.deepcopy(self._entries)

    def save(self, entries: List[FixMemoryEntry]) -> None:
        self._entries = copy.deepcopy(list(entries))
