"""Controller coordinating diagnostics requests between interfaces and the engine."""
from typing import Any, Callable, Dict, Optional

from domain.diagnostics import Analysis, ErrorAnalyzer, ErrorResponse, FixMemoryEntry, route, with_healing
from domain.exceptions import FixMemoryStoreError
from domain.reflexion import ReflexionLoop, ReflexionResult, TaskContext, TaskOutcome
from infrastructure.config import RetryConfig
from infrastructure.logging import get_logger

logger = get_logger(__name__)


class DebuggingController:
    """Application-level API for error analysis and reflexive learning."""

    def __init__(
        self,
        analyzer: ErrorAnalyzer,
        reflexion_loop: ReflexionLoop,
        workspace_root: str = ".",
        retry_config: Optional[RetryConfig] = None,
    ) -> None:
        self._analyzer = analyzer
        self._reflexion = reflexion_loop
        self._workspace_root = workspace_root
        self._retry = retry_config or RetryConfig()

    @property
    def workspace_root(self) -> str:
        return self._workspace_root

    def analyze(self, error: Any, workspace: Optional[str] = None) -> Analysis:
        """Diagnose an error against the workspace's fix memory."""
        return self._analyzer.analyze(error, workspace or self._workspace_root)

    def route(self, analysis: Analysis) -> ErrorResponse:
        """Pick the personas and build the report for an analysis."""
        return route(analysis)

    def record_fix(
        self,
        analysis: Analysis,
        fix_applied: str,
        verified: bool = True,
        workspace: Optional[str] = None,
    ) -> Optional[FixMemoryEntry]:
        """Resolve an analysis and remember the fix when it is verified."""
        analysis.resolve(fix_applied, verified=verified)
        return self._analyzer.record_fix(analysis, workspace or self._workspace_root)

    def process_outcome(self, context: TaskContext, outcome: TaskOutcome) -> ReflexionResult:
        """Feed a task outcome to the reflexion loop."""
        return self._reflexion.process_outcome(context, outcome)

    def record_outcome(self, reflection_id: str, helped: bool) -> bool:
        """Report whether a reflection helped on retry."""
        return self._reflexion.record_outcome(reflection_id, helped)

    def reflect_on_analysis(self, analysis: Analysis, context: TaskContext) -> str:
        """Store a reflection derived from a full analysis."""
        return self._reflexion.create_reflection_from_analysis(analysis, context)

    def healing(self, on_error: Optional[Callable[[Analysis], None]] = None, workspace: Optional[str] = None):
        """Retry decorator using the configured backoff policy."""
        return with_healing(
            self._analyzer,
            workspace or self._workspace_root,
            max_retries=self._retry.max_retries,
            on_error=on_error,
            base_delay=self._retry.base_delay_seconds,
            backoff_factor=self._retry.backoff_factor,
            max_delay=self._retry.max_delay_seconds,
        )

    def status(self, actor: Optional[str] = None) -> Dict[str, Any]:
        """Aggregate memory counts, optionally with one actor's summary."""
        store = self._reflexion.store
        report: Dict[str, Any] = {
            "memory": store.get_memory_stats(),
            "fix_memory_entries": self._fix_memory_count(),
        }
        if actor:
            report["actor"] = store.get_actor_summary(actor)
        return report

    def _fix_memory_count(self) -> int:
        try:
            return len(self._analyzer.registry.get(self._workspace_root).entries())
        except FixMemoryStoreError as e:
            logger.warning(f"Fix memory unavailable for status: {e}")
            return 0
