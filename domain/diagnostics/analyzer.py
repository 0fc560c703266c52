"""Analysis orchestration: classify, look up memory, decompose, hypothesize."""

import time
import uuid
from typing import Any, List, Optional

from domain.exceptions import FixMemoryStoreError
from infrastructure.logging import get_logger
from .decomposition import decompose_error
from .error_categorization import classify_error
from .fix_memory import FixMemoryRegistry
from .hypotheses import generate_hypotheses
from .models import Analysis, ErrorObservation, FixMemoryEntry, Hypothesis, SuggestedFix, utc_now_iso
from .signatures import generate_error_signature

logger = get_logger(__name__)

VERIFIED_FIX_CONFIDENCE = 90
UNVERIFIED_FIX_CONFIDENCE = 70


def new_analysis_id() -> str:
    return f"ERR-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class ErrorAnalyzer:
    """Turns a raw error into an :class:`Analysis`."""

    def __init__(
        self,
        registry: FixMemoryRegistry,
        max_memory_suggestions: int = 3,
        max_hypothesis_suggestions: int = 3,
    ):
        self.registry = registry
        self.max_memory_suggestions = max_memory_suggestions
        self.max_hypothesis_suggestions = max_hypothesis_suggestions
        self.logger = logger.getChild("ErrorAnalyzer")

    def analyze(self, error: Any, workspace: str) -> Analysis:
        """
        Diagnose ``error`` in the context of ``workspace``.

        Never raises on malformed input. When fix memory cannot be read the
        analysis simply carries no related fixes.
        """
        observation = ErrorObservation.coerce(error)
        category = classify_error(observation)
        signature = generate_error_signature(observation)
        similar = self._find_similar(signature, category, workspace)
        hypotheses = generate_hypotheses(observation, category)

        analysis = Analysis(
            id=new_analysis_id(),
            timestamp=utc_now_iso(),
            error=observation,
            category=category,
            decomposition=decompose_error(observation, category),
            hypotheses=hypotheses,
            related_fix_ids=[entry.id for entry in similar],
            suggested_fixes=self._suggest_fixes(similar, hypotheses),
        )
        self.logger.info(
            f"Analysis {analysis.id}: {category.value}, {len(similar)} related fixes"
        )
        return analysis

    def record_fix(self, analysis: Analysis, workspace: str) -> Optional[FixMemoryEntry]:
        """Store the analysis's verified resolution. Storage errors propagate."""
        return self.registry.get(workspace).record(analysis)

    def _find_similar(self, signature, category, workspace) -> List[FixMemoryEntry]:
        try:
            return self.registry.get(workspace).find_similar(signature, category)
        except FixMemoryStoreError as e:
            self.logger.warning(f"No fix memory for {workspace}: {e}")
            return []

    def _suggest_fixes(
        self, similar: List[FixMemoryEntry], hypotheses: List[Hypothesis]
    ) -> List[SuggestedFix]:
        fixes = [
            SuggestedFix(
                description=f"Previously successful fix: {entry.root_cause}",
                code=entry.fix_applied,
                confidence=VERIFIED_FIX_CONFIDENCE if entry.verified else UNVERIFIED_FIX_CONFIDENCE,
            )
            for entry in similar[:self.max_memory_suggestions]
        ]
        fixes.extend(
            SuggestedFix(description=h.description, confidence=h.likelihood)
            for h in hypotheses[:self.max_hypothesis_suggestions]
        )
        return fixes
