"""Domain service interface definitions."""

from .fix_memory_store import FixMemoryStore
from .reflexion_store import ReflexionStore

__all__ = [
    "FixMemoryStore",
    "ReflexionStore",
]
