"""Persistence layer bindings."""

from .fix_memory_store import InMemoryFixMemoryStore, JsonFileFixMemoryStore
from .in_memory_reflexion_store import InMemoryReflexionStore
from .json_reflexion_store import JsonFileReflexionStore

__all__ = [
    "InMemoryFixMemoryStore",
    "JsonFileFixMemoryStore",
    "InMemoryReflexionStore",
    "JsonFileReflexionStore",
]
