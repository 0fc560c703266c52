"""
Error diagnostics: classification, signatures, decomposition, hypotheses,
fix memory and routing.
"""

from .models import (
    Analysis,
    Decomposition,
    ErrorCategory,
    ErrorObservation,
    FixMemoryEntry,
    Hypothesis,
    Resolution,
    SuggestedFix,
)
from .error_categorization import ERROR_PATTERNS, ErrorPattern, classify_error
from .signatures import generate_error_signature, normalize_message
from .decomposition import DECOMPOSITIONS, decompose_error
from .hypotheses import HYPOTHESES, generate_hypotheses
from .fix_memory import FixMemory, FixMemoryRegistry
from .analyzer import ErrorAnalyzer
from .response_router import ErrorResponse, Persona, format_report, route
from .healing import backoff_delay, with_healing

__all__ = [
    "Analysis",
    "Decomposition",
    "ErrorCategory",
    "ErrorObservation",
    "FixMemoryEntry",
    "Hypothesis",
    "Resolution",
    "SuggestedFix",
    "ERROR_PATTERNS",
    "ErrorPattern",
    "classify_error",
    "generate_error_signature",
    "normalize_message",
    "DECOMPOSITIONS",
    "decompose_error",
    "HYPOTHESES",
    "generate_hypotheses",
    "FixMemory",
    "FixMemoryRegistry",
    "ErrorAnalyzer",
    "ErrorResponse",
    "Persona",
    "format_report",
    "route",
    "backoff_delay",
    "with_healing",
]
