"""Routes an analysis to the persona best placed to act on it."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet

from .models import Analysis, ErrorCategory

MAX_REPORTED_HYPOTHESES = 5
MAX_REPORTED_FIXES = 3
MISSION_MESSAGE_LENGTH = 50


class Persona(Enum):
    CODE_REVIEW = "code-review"
    INFRA_INVESTIGATION = "infrastructure-investigation"


CODE_REVIEW_CATEGORIES: FrozenSet[ErrorCategory] = frozenset({
    ErrorCategory.SYNTAX,
    ErrorCategory.RUNTIME,
    ErrorCategory.STATE,
})


@dataclass(frozen=True)
class ErrorResponse:
    primary_persona: Persona
    secondary_persona: Persona
    mission: str
    report: str


def format_report(analysis: Analysis) -> str:
    """Render an analysis as the plain-text brief handed to a persona."""
    error = analysis.error
    decomposition = analysis.decomposition
    lines = [
        f"## Error Analysis: {analysis.id}",
        "",
        f"**Category:** {analysis.category.value}",
    ]
    if error.code:
        lines.append(f"**Error code:** {error.code}")
    lines.extend([
        f"**Message:** {error.message}",
        "",
        "### First-Principles Decomposition",
        f"- **What failed:** {decomposition.what_failed}",
        f"- **Why:** {decomposition.why_it_failed}",
        f"- **Root cause:** {decomposition.root_cause}",
        "",
        "### Assumptions to Verify",
    ])
    lines.extend(f"{i}. {a}" for i, a in enumerate(decomposition.assumptions, 1))

    lines.extend(["", "### Hypotheses (Ranked by Likelihood)"])
    for i, h in enumerate(analysis.hypotheses[:MAX_REPORTED_HYPOTHESES], 1):
        lines.append(f"{i}. [{h.likelihood}%] {h.description}")
        lines.append(f"   Test: {h.test_method}")

    if analysis.related_fix_ids:
        lines.extend(["", f"### Similar Past Errors Found: {len(analysis.related_fix_ids)}"])

    lines.extend(["", "### Suggested Fixes"])
    for i, fix in enumerate(analysis.suggested_fixes[:MAX_REPORTED_FIXES], 1):
        lines.append(f"{i}. [{fix.confidence}% confidence] {fix.description}")
        if fix.code:
            lines.append(f"   Code: {fix.code}")

    lines.extend([
        "",
        "### Next Steps",
        "1. Verify the assumptions above, starting with the most likely hypothesis",
        "2. Apply the highest-confidence fix and re-run the failing task",
        "3. Record the fix once it is verified so it can be reused",
    ])
    return "\n".join(lines)


def route(analysis: Analysis) -> ErrorResponse:
    """Pick primary and secondary personas and build their brief."""
    if analysis.category in CODE_REVIEW_CATEGORIES:
        primary, secondary = Persona.CODE_REVIEW, Persona.INFRA_INVESTIGATION
    else:
        primary, secondary = Persona.INFRA_INVESTIGATION, Persona.CODE_REVIEW

    message = analysis.error.message[:MISSION_MESSAGE_LENGTH]
    return ErrorResponse(
        primary_persona=primary,
        secondary_persona=secondary,
        mission=f"Debug {analysis.category.value} error: {message}...",
        report=format_report(analysis),
    )
