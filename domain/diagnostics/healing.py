"""Retry wrapper that diagnoses each failure before trying again."""

import functools
import time
from typing import Callable, Optional

from infrastructure.logging import get_logger
from .analyzer import ErrorAnalyzer
from .models import Analysis

logger = get_logger(__name__)

MAX_SUMMARY_FIXES = 3


def backoff_delay(attempt: int, base: float = 1.0, factor: float = 2.0, cap: float = 30.0) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
    return min(base * factor ** (attempt - 1), cap)


def with_healing(
    analyzer: ErrorAnalyzer,
    workspace: str,
    max_retries: int = 3,
    on_error: Optional[Callable[[Analysis], None]] = None,
    base_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 30.0,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorate a callable so that failures are analysed and retried.

    Attempts run strictly in sequence. After each failure the error is
    analysed and handed to ``on_error``; fixes are never applied here. When
    the last attempt fails, a summary is logged and the original exception is
    re-raised.
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be at least 1, got {max_retries}")

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    analysis = analyzer.analyze(e, workspace)
                    if on_error is not None:
                        on_error(analysis)

                    if attempt >= max_retries:
                        _log_exhausted(func, analysis, max_retries)
                        raise

                    delay = backoff_delay(attempt, base_delay, backoff_factor, max_delay)
                    logger.warning(
                        f"Attempt {attempt}/{max_retries} of {func.__name__} failed "
                        f"({analysis.category.value}), retrying in {delay:.1f}s"
                    )
                    sleep(delay)

        return wrapper

    return decorator


def _log_exhausted(func, analysis: Analysis, max_retries: int) -> None:
    lines = [
        f"{func.__name__} failed after {max_retries} attempts",
        f"Category: {analysis.category.value}",
        f"Root cause: {analysis.decomposition.root_cause}",
        "Suggested fixes:",
    ]
    lines.extend(
        f"  - [{fix.confidence}%] {fix.description}"
        for fix in analysis.suggested_fixes[:MAX_SUMMARY_FIXES]
    )
    logger.error("\n".join(lines))
