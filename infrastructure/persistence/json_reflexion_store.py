import json
from typing import Any, Dict

from domain.exceptions import ReflexionStoreError
from domain.reflexion.models import EpisodicRecord, Reflection
from infrastructure.logging import get_logger
from .in_memory_reflexion_store import InMemoryReflexionStore
from .json_files import read_json, write_json_atomic

logger = get_logger(__name__)


class JsonFileReflexionStore(InMemoryReflexionStore):
    """
    Reflexion storage backed by a single JSON document.

    The whole document is loaded once and rewritten atomically after every
    change, so it is only safe for a single writing process.
    """

    def __init__(self, path: str, relevance_floor: float = 0.3) -> None:
        super().__init__(relevance_floor=relevance_floor)
        self.path = path
        self.logger = logger.getChild("JsonFileReflexionStore")
        self._load()

    def _load(self) -> None:
        try:
            document = read_json(self.path, default={})
        except (OSError, json.JSONDecodeError) as e:
            raise ReflexionStoreError(f"Cannot read reflexion store {self.path}: {e}") from e

        try:
            for item in document.get("episodes", []):
                record = EpisodicRecord.from_dict(item)
                self._episodes[record.id] = record
            for item in document.get("reflections", []):
                reflection = Reflection.from_dict(item)
                self._reflections[reflection.id] = reflection
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ReflexionStoreError(f"Malformed reflexion store {self.path}: {e}") from e

        self.logger.debug(
            f"Loaded {len(self._episodes)} episodes and {len(self._reflections)} reflections from {self.path}"
        )

    def _persist(self) -> None:
        document: Dict[str, Any] = {
            "episodes": [e.to_dict() for e in self._episodes.values()],
            "reflections": [r.to_dict() for r in self._reflections.values()],
        }
        try:
            write_json_atomic(self.path, document)
        except OSError as e:
            raise ReflexionStoreError(f"Cannot write reflexion store {self.path}: {e}") from e
