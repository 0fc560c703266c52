from abc import ABC, abstractmethod
from typing import List, Sequence

from domain.reflexion.models import ActorSummary, EpisodicRecord, MemoryStats, Reflection


class ReflexionStore(ABC):
    """Abstract persistence interface for episodic records and reflections."""

    @abstractmethod
    def create_episodic_record(self, record: EpisodicRecord) -> str:
        """Persist an episodic record and return its identifier."""
        raise NotImplementedError

    @abstractmethod
    def create_reflection(self, reflection: Reflection) -> str:
        """Persist a reflection and return its identifier."""
        raise NotImplementedError

    @abstractmethod
    def find_relevant_reflections(
        self,
        task_type: str,
        keywords: Sequence[str],
        limit: int = 3,
    ) -> List[Reflection]:
        """
        Return reflections matching ``task_type`` or sharing any keyword.

        Results above the relevance floor are ordered by effectiveness, then
        by how often they helped. Each returned record counts as retrieved.
        """
        raise NotImplementedError

    @abstractmethod
    def update_reflection_effectiveness(self, reflection_id: str, helped: bool) -> Reflection:
        """Apply one helped/failed outcome. Raises ReflectionNotFoundError."""
        raise NotImplementedError

    @abstractmethod
    def get_memory_stats(self) -> MemoryStats:
        """Aggregate counts across all actors."""
        raise NotImplementedError

    @abstractmethod
    def get_actor_summary(self, actor: str) -> ActorSummary:
        """Counts and last activity for a single actor."""
        raise NotImplementedError
