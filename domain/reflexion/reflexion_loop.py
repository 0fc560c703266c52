"""
Reflexion loop: turns task outcomes into reusable corrective knowledge.

Every outcome is written to episodic memory. Failures additionally produce a
Reflection, and the most effective prior reflections for similar tasks are
looked up to decide whether a retry is worthwhile and what to tell the actor
before it tries again.
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

from domain.diagnostics.error_categorization import classify_error
from domain.diagnostics.models import Analysis, ErrorObservation
from domain.exceptions import ReflexionStoreError
from infrastructure.logging import get_logger
from .keywords import extract_keywords
from .models import EpisodicRecord, PriorReflection, Reflection, ReflexionResult, TaskContext, TaskOutcome
from .remediation import CORRECTION_ACTIONS, CORRECTION_CONFIDENCE, describe_root_cause

if TYPE_CHECKING:
    from domain.services.reflexion_store import ReflexionStore

logger = get_logger(__name__)

CONTEXT_HEADER = "PRIOR LEARNINGS (from similar failures):"
CONTEXT_FOOTER = "Apply these learnings to avoid repeating past mistakes."
FAILURE_IMPORTANCE = 75
SUCCESS_IMPORTANCE = 50
FALLBACK_CORRECTION = "Manual investigation required"
FALLBACK_CONFIDENCE = 30


def build_reflection_context(reflections: Sequence[PriorReflection]) -> str:
    """Render prior reflections as the text injected into a retry."""
    lines = [CONTEXT_HEADER, ""]
    lines.extend(r.render() for r in reflections)
    lines.extend(["", CONTEXT_FOOTER])
    return "\n".join(lines)


class ReflexionLoop:
    """Records outcomes and surfaces past corrections for similar tasks."""

    def __init__(
        self,
        store: "ReflexionStore",
        max_attempts: int = 3,
        retry_effectiveness_threshold: float = 0.5,
        prior_reflection_limit: int = 3,
        keyword_limit: int = 10,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.retry_effectiveness_threshold = retry_effectiveness_threshold
        self.prior_reflection_limit = prior_reflection_limit
        self.keyword_limit = keyword_limit
        self.logger = logger.getChild("ReflexionLoop")

    def process_outcome(self, context: TaskContext, outcome: TaskOutcome) -> ReflexionResult:
        """
        Learn from one task attempt.

        Store failures are logged and leave a partial result behind rather
        than propagating to the caller.
        """
        result = ReflexionResult()
        try:
            result.episodic_id = self.store.create_episodic_record(self._episodic_record(context, outcome))
            self.logger.debug(f"Recorded episodic memory {result.episodic_id}")

            if outcome.success or outcome.error is None:
                return result

            reflection = self.reflect(context, ErrorObservation.coerce(outcome.error))
            # Looked up before the new reflection is stored so it never counts as prior.
            prior = self._prior_reflections(context, reflection)
            result.prior_reflections = prior
            result.reflection_id = self.store.create_reflection(reflection)
            result.reflection = reflection

            result.should_retry = context.attempt_number < self.max_attempts and any(
                r.effectiveness_score > self.retry_effectiveness_threshold for r in prior
            )
            if result.should_retry:
                result.injected_context = build_reflection_context(prior)

            self.logger.info(
                f"Created reflection {result.reflection_id} for {context.actor}, "
                f"should_retry={result.should_retry}"
            )
        except ReflexionStoreError as e:
            self.logger.error(f"Error processing task outcome: {e}")
            result.storage_errors.append(str(e))
        return result

    def record_outcome(self, reflection_id: str, helped: bool) -> bool:
        """Report whether applying a reflection helped. Returns False on store errors."""
        try:
            reflection = self.store.update_reflection_effectiveness(reflection_id, helped)
        except ReflexionStoreError as e:
            self.logger.error(f"Error updating reflection effectiveness: {e}")
            return False
        self.logger.info(
            f"Updated reflection {reflection_id}: helped={helped}, "
            f"effectiveness={reflection.effectiveness_score:.2f}"
        )
        return True

    def reflect(self, context: TaskContext, error: ErrorObservation) -> Reflection:
        """Synthesize a reflection for a failed task from the category tables."""
        category = classify_error(error)
        root_cause = describe_root_cause(category, error.message)
        return Reflection(
            actor=context.actor,
            task_type=context.task_type,
            task_description=context.task_description,
            attempt_number=context.attempt_number,
            outcome="failure",
            root_cause=root_cause,
            specific_error=error.message,
            correction_action=CORRECTION_ACTIONS[category],
            correction_reasoning=f"Error category: {category.value}. {root_cause}",
            correction_confidence=CORRECTION_CONFIDENCE[category],
            keywords=self._keywords(context, category.value, error.code),
            session_id=context.session_id,
        )

    def create_reflection_from_analysis(self, analysis: Analysis, context: TaskContext) -> str:
        """Persist a reflection built from a full error analysis and return its id."""
        top_fix = analysis.suggested_fixes[0] if analysis.suggested_fixes else None
        reflection = Reflection(
            actor=context.actor,
            task_type=context.task_type,
            task_description=context.task_description,
            attempt_number=context.attempt_number,
            outcome="failure",
            root_cause=analysis.decomposition.root_cause,
            specific_error=analysis.error.message,
            correction_action=(top_fix.code or top_fix.description) if top_fix else FALLBACK_CORRECTION,
            correction_reasoning=analysis.decomposition.why_it_failed,
            correction_confidence=(top_fix.confidence if top_fix else FALLBACK_CONFIDENCE) / 100,
            keywords=self._keywords(context, analysis.category.value, analysis.error.code),
            session_id=context.session_id,
        )
        reflection_id = self.store.create_reflection(reflection)
        self.logger.info(f"Created reflection {reflection_id} from analysis {analysis.id}")
        return reflection_id

    def _keywords(self, context: TaskContext, category: str, code: Optional[str]) -> List[str]:
        keywords = extract_keywords(context.task_type, context.task_description, self.keyword_limit)
        for extra in (category, code):
            if extra and extra.lower() not in keywords:
                keywords.append(extra.lower())
        return keywords

    def _episodic_record(self, context: TaskContext, outcome: TaskOutcome) -> EpisodicRecord:
        lesson = None
        if outcome.error is not None:
            lesson = ErrorObservation.coerce(outcome.error).message
        return EpisodicRecord(
            actor=context.actor,
            event_kind="task" if outcome.success else "error",
            action=context.task_description,
            context={
                "taskType": context.task_type,
                "conversationId": context.conversation_id,
                "durationMs": outcome.duration_ms,
            },
            outcome=outcome.label,
            lesson=lesson,
            tags=extract_keywords(context.task_type, context.task_description, self.keyword_limit),
            importance=SUCCESS_IMPORTANCE if outcome.success else FAILURE_IMPORTANCE,
            session_id=context.session_id,
        )

    def _prior_reflections(self, context: TaskContext, current: Reflection) -> List[PriorReflection]:
        found = self.store.find_relevant_reflections(
            context.task_type, current.keywords, self.prior_reflection_limit
        )
        return [PriorReflection.from_reflection(r) for r in found]
