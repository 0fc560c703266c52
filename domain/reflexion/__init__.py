"""Reflexion: episodic memory and reusable corrections from failed tasks."""

from .models import (
    ActorSummary,
    EpisodicRecord,
    MemoryStats,
    PriorReflection,
    Reflection,
    ReflexionResult,
    TaskContext,
    TaskOutcome,
    smoothed_effectiveness,
)
from .keywords import extract_keywords
from .remediation import CORRECTION_ACTIONS, CORRECTION_CONFIDENCE, ROOT_CAUSE_TEMPLATES
from .reflexion_loop import ReflexionLoop, build_reflection_context

__all__ = [
    "ActorSummary",
    "EpisodicRecord",
    "MemoryStats",
    "PriorReflection",
    "Reflection",
    "ReflexionResult",
    "TaskContext",
    "TaskOutcome",
    "smoothed_effectiveness",
    "extract_keywords",
    "CORRECTION_ACTIONS",
    "CORRECTION_CONFIDENCE",
    "ROOT_CAUSE_TEMPLATES",
    "ReflexionLoop",
    "build_reflection_context",
]
