"""Records produced by the reflexion loop."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from domain.diagnostics.models import utc_now_iso

NEUTRAL_EFFECTIVENESS = 0.5


def new_record_id() -> str:
    return str(uuid.uuid4())


def smoothed_effectiveness(times_helped: int, times_failed: int) -> float:
    """Laplace-smoothed success ratio; 0.5 when nothing has been observed."""
    return (times_helped + 1) / (times_helped + times_failed + 2)


@dataclass
class TaskContext:
    """Who attempted what, and on which attempt."""

    actor: str
    task_type: str
    task_description: str
    session_id: Optional[str] = None
    conversation_id: Optional[str] = None
    attempt_number: int = 1


@dataclass
class TaskOutcome:
    """Result of one task attempt as reported by the caller."""

    success: bool
    partial: bool = False
    error: Any = None
    duration_ms: Optional[int] = None
    output: Optional[str] = None

    @property
    def label(self) -> str:
        if self.success:
            return "success"
        return "partial" if self.partial else "failure"


@dataclass
class EpisodicRecord:
    """One task outcome, successful or not."""

    actor: str
    event_kind: str
    action: str
    outcome: str
    importance: int
    context: Optional[Dict[str, Any]] = None
    lesson: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    session_id: Optional[str] = None
    id: str = field(default_factory=new_record_id)
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "actor": self.actor,
            "eventKind": self.event_kind,
            "action": self.action,
            "context": self.context,
            "outcome": self.outcome,
            "lesson": self.lesson,
            "tags": list(self.tags),
            "importance": self.importance,
            "sessionId": self.session_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EpisodicRecord":
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            actor=data["actor"],
            event_kind=data["eventKind"],
            action=data["action"],
            context=data.get("context"),
            outcome=data["outcome"],
            lesson=data.get("lesson"),
            tags=list(data.get("tags") or []),
            importance=int(data.get("importance", 50)),
            session_id=data.get("sessionId"),
        )


@dataclass
class Reflection:
    """
    A reusable correction distilled from a failed task.

    ``effectiveness_score`` starts neutral and is recomputed from
    ``times_helped``/``times_failed`` on every reported outcome.
    """

    actor: str
    task_type: str
    task_description: str
    outcome: str
    root_cause: str
    specific_error: str
    correction_action: str
    correction_reasoning: str
    correction_confidence: float
    attempt_number: int = 1
    keywords: List[str] = field(default_factory=list)
    times_helped: int = 0
    times_failed: int = 0
    times_retrieved: int = 0
    effectiveness_score: float = NEUTRAL_EFFECTIVENESS
    session_id: Optional[str] = None
    id: str = field(default_factory=new_record_id)
    timestamp: str = field(default_factory=utc_now_iso)

    def register_outcome(self, helped: bool) -> float:
        """Count one helped/failed outcome and return the new score."""
        if helped:
            self.times_helped += 1
        else:
            self.times_failed += 1
        self.effectiveness_score = smoothed_effectiveness(self.times_helped, self.times_failed)
        return self.effectiveness_score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "actor": self.actor,
            "taskType": self.task_type,
            "taskDescription": self.task_description,
            "attemptNumber": self.attempt_number,
            "outcome": self.outcome,
            "rootCause": self.root_cause,
            "specificError": self.specific_error,
            "correctionAction": self.correction_action,
            "correctionReasoning": self.correction_reasoning,
            "correctionConfidence": self.correction_confidence,
            "keywords": list(self.keywords),
            "timesHelped": self.times_helped,
            "timesFailed": self.times_failed,
            "timesRetrieved": self.times_retrieved,
            "effectivenessScore": self.effectiveness_score,
            "sessionId": self.session_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Reflection":
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            actor=data["actor"],
            task_type=data["taskType"],
            task_description=data.get("taskDescription", ""),
            attempt_number=int(data.get("attemptNumber", 1)),
            outcome=data.get("outcome", "failure"),
            root_cause=data.get("rootCause", ""),
            specific_error=data.get("specificError", ""),
            correction_action=data.get("correctionAction", ""),
            correction_reasoning=data.get("correctionReasoning", ""),
            correction_confidence=float(data.get("correctionConfidence", 0.0)),
            keywords=list(data.get("keywords") or []),
            times_helped=int(data.get("timesHelped", 0)),
            times_failed=int(data.get("timesFailed", 0)),
            times_retrieved=int(data.get("timesRetrieved", 0)),
            effectiveness_score=float(data.get("effectivenessScore", NEUTRAL_EFFECTIVENESS)),
            session_id=data.get("sessionId"),
        )


@dataclass(frozen=True)
class PriorReflection:
    """The slice of a past reflection that is surfaced to a retrying actor."""

    id: str
    root_cause: str
    correction_action: str
    effectiveness_score: float

    @classmethod
    def from_reflection(cls, reflection: Reflection) -> "PriorReflection":
        return cls(
            id=reflection.id,
            root_cause=reflection.root_cause,
            correction_action=reflection.correction_action,
            effectiveness_score=reflection.effectiveness_score,
        )

    def render(self) -> str:
        return f"• [{round(self.effectiveness_score * 100)}% effective] {self.correction_action}"


@dataclass
class ReflexionResult:
    """What the loop did with one task outcome."""

    episodic_id: Optional[str] = None
    reflection_id: Optional[str] = None
    reflection: Optional[Reflection] = None
    prior_reflections: List[PriorReflection] = field(default_factory=list)
    should_retry: bool = False
    injected_context: Optional[str] = None
    storage_errors: List[str] = field(default_factory=list)


@dataclass
class MemoryStats:
    episodic_count: int = 0
    reflection_count: int = 0
    average_effectiveness: float = 0.0


@dataclass
class ActorSummary:
    actor: str
    episodic_count: int = 0
    failure_count: int = 0
    reflection_count: int = 0
    last_activity: Optional[str] = None
