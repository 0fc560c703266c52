import copy
import threading
from typing import Dict, List, Sequence

from domain.exceptions import ReflectionNotFoundError, ReflexionStoreError
from domain.reflexion.models import ActorSummary, EpisodicRecord, MemoryStats, Reflection
from domain.services.reflexion_store import ReflexionStore


class InMemoryReflexionStore(ReflexionStore):
    """
    Process-local reflexion storage. Records are deep-copied in and out.

    Changes are staged and only kept once ``_persist`` succeeds, so a failed
    write leaves the store exactly as it was.
    """

    def __init__(self, relevance_floor: float = 0.3) -> None:
        self.relevance_floor = relevance_floor
        self._episodes: Dict[str, EpisodicRecord] = {}
        self._reflections: Dict[str, Reflection] = {}
        self._lock = threading.RLock()

    def create_episodic_record(self, record: EpisodicRecord) -> str:
        with self._lock:
            self._commit(self._episodes, {record.id: copy.deepcopy(record)})
        return record.id

    def create_reflection(self, reflection: Reflection) -> str:
        with self._lock:
            self._commit(self._reflections, {reflection.id: copy.deepcopy(reflection)})
        return reflection.id

    def find_relevant_reflections(
        self,
        task_type: str,
        keywords: Sequence[str],
        limit: int = 3,
    ) -> List[Reflection]:
        wanted = set(keywords)
        with self._lock:
            candidates = [
                r for r in self._reflections.values()
                if (r.task_type == task_type or wanted.intersection(r.keywords))
                and r.effectiveness_score > self.relevance_floor
            ]
            candidates.sort(key=lambda r: (r.effectiveness_score, r.times_helped), reverse=True)
            selected = [copy.deepcopy(r) for r in candidates[:limit]]
            for reflection in selected:
                reflection.times_retrieved += 1
            if selected:
                self._commit(self._reflections, {r.id: copy.deepcopy(r) for r in selected})
            return selected

    def update_reflection_effectiveness(self, reflection_id: str, helped: bool) -> Reflection:
        with self._lock:
            reflection = self._reflections.get(reflection_id)
            if reflection is None:
                raise ReflectionNotFoundError(reflection_id)
            updated = copy.deepcopy(reflection)
            updated.register_outcome(helped)
            self._commit(self._reflections, {reflection_id: updated})
            return copy.deepcopy(updated)

    def get_memory_stats(self) -> MemoryStats:
        with self._lock:
            scores = [r.effectiveness_score for r in self._reflections.values()]
            return MemoryStats(
                episodic_count=len(self._episodes),
                reflection_count=len(scores),
                average_effectiveness=sum(scores) / len(scores) if scores else 0.0,
            )

    def get_actor_summary(self, actor: str) -> ActorSummary:
        with self._lock:
            episodes = [e for e in self._episodes.values() if e.actor == actor]
            reflections = [r for r in self._reflections.values() if r.actor == actor]
            timestamps = [e.timestamp for e in episodes] + [r.timestamp for r in reflections]
            return ActorSummary(
                actor=actor,
                episodic_count=len(episodes),
                failure_count=sum(1 for e in episodes if e.outcome == "failure"),
                reflection_count=len(reflections),
                last_activity=max(timestamps) if timestamps else None,
            )

    def _commit(self, table: Dict, changes: Dict) -> None:
        """Apply ``changes`` to ``table`` and persist; undo them if persisting fails."""
        previous = {key: table.get(key) for key in changes}
        table.update(changes)
        try:
            self._persist()
        except ReflexionStoreError:
            for key, value in previous.items():
                if value is None:
                    del table[key]
                else:
                    table[key] = value
            raise

    def _persist(self) -> None:
        """Hook for durable subclasses; called with the lock held after every write."""
