"""Data structures produced and consumed by the error diagnostics engine."""

import errno
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class ErrorCategory(Enum):
    """Closed taxonomy of failure categories."""

    NETWORK = "NETWORK"        # ETIMEDOUT, ECONNRESET, DNS failures
    AUTH = "AUTH"              # 401, 403, token issues
    SYNTAX = "SYNTAX"          # Parse errors, type errors
    RUNTIME = "RUNTIME"        # Null reference, undefined values
    RESOURCE = "RESOURCE"      # File not found, permission denied
    CONFIG = "CONFIG"          # Missing env vars, invalid config
    DEPENDENCY = "DEPENDENCY"  # Module not found, version mismatch
    STATE = "STATE"            # Race conditions, stale data
    UNKNOWN = "UNKNOWN"        # Unclassified


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class ErrorObservation:
    """A raw failure as reported by a calling subsystem."""

    message: str
    code: Optional[str] = None
    stack: Optional[str] = None

    def search_text(self) -> str:
        """Lower-cased code, message and stack joined for pattern matching."""
        return f"{self.code or ''} {self.message} {self.stack or ''}".lower()

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"code": self.code, "message": self.message, "stack": self.stack}

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorObservation":
        """
        Build an observation from a Python exception.

        The code is taken from an explicit ``code`` attribute when present,
        otherwise from the symbolic errno name of an ``OSError`` (``ENOENT``,
        ``EACCES``, ...). The message is prefixed with the exception type so
        that type names such as ``SyntaxError`` take part in classification.
        """
        code = _as_text(getattr(exc, "code", None))
        if code is None and isinstance(exc, OSError) and exc.errno in errno.errorcode:
            code = errno.errorcode[exc.errno]

        type_name = type(exc).__name__
        detail = str(exc)
        message = f"{type_name}: {detail}" if detail else type_name

        stack = None
        if exc.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

        return cls(message=message, code=code, stack=stack)

    @classmethod
    def coerce(cls, value: Any) -> "ErrorObservation":
        """Normalize whatever a caller handed over into an observation."""
        if isinstance(value, ErrorObservation):
            return value
        if isinstance(value, BaseException):
            return cls.from_exception(value)
        if isinstance(value, Mapping):
            return cls(
                message=_as_text(value.get("message")) or "",
                code=_as_text(value.get("code")) or None,
                stack=_as_text(value.get("stack")) or None,
            )
        if value is None:
            return cls(message="")
        return cls(message=str(value))


@dataclass(frozen=True)
class Decomposition:
    """First-principles breakdown of a failure category."""

    what_failed: str
    why_it_failed: str
    assumptions: tuple
    root_cause: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "whatFailed": self.what_failed,
            "whyItFailed": self.why_it_failed,
            "assumptions": list(self.assumptions),
            "rootCause": self.root_cause,
        }


@dataclass(frozen=True)
class Hypothesis:
    """Candidate cause with a likelihood (0-100) and a way to verify it."""

    description: str
    likelihood: int
    test_method: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "likelihood": self.likelihood,
            "testMethod": self.test_method,
        }


@dataclass
class SuggestedFix:
    """A fix proposal with a confidence between 0 and 100."""

    description: str
    confidence: int
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"description": self.description, "confidence": self.confidence}
        if self.code is not None:
            data["code"] = self.code
        return data


@dataclass
class Resolution:
    """What was applied to resolve an analysed error."""

    fix_applied: str
    verified: bool
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {"fixApplied": self.fix_applied, "verified": self.verified, "timestamp": self.timestamp}


@dataclass
class Analysis:
    """Complete diagnosis of a single error occurrence."""

    id: str
    timestamp: str
    error: ErrorObservation
    category: ErrorCategory
    decomposition: Decomposition
    hypotheses: List[Hypothesis] = field(default_factory=list)
    related_fix_ids: List[str] = field(default_factory=list)
    suggested_fixes: List[SuggestedFix] = field(default_factory=list)
    resolution: Optional[Resolution] = None

    @property
    def status(self) -> str:
        """``pending``, ``resolved-verified`` or ``resolved-unverified``."""
        if self.resolution is None:
            return "pending"
        return "resolved-verified" if self.resolution.verified else "resolved-unverified"

    def resolve(self, fix_applied: str, verified: bool = True) -> Resolution:
        """Attach the fix that was applied for this error."""
        self.resolution = Resolution(fix_applied=fix_applied, verified=verified)
        return self.resolution

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "error": self.error.to_dict(),
            "category": self.category.value,
            "decomposition": self.decomposition.to_dict(),
            "hypotheses": [h.to_dict() for h in self.hypotheses],
            "relatedFixIds": list(self.related_fix_ids),
            "suggestedFixes": [f.to_dict() for f in self.suggested_fixes],
        }
        if self.resolution is not None:
            data["resolution"] = self.resolution.to_dict()
        return data


@dataclass
class FixMemoryEntry:
    """A verified correction, indexed by error signature."""

    id: str
    timestamp: str
    signature: str
    category: ErrorCategory
    root_cause: str
    fix_applied: str
    verified: bool = True
    related_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "signature": self.signature,
            "category": self.category.value,
            "rootCause": self.root_cause,
            "fixApplied": self.fix_applied,
            "verified": self.verified,
            "relatedIds": list(self.related_ids),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FixMemoryEntry":
        # Files written by older releases used errorSignature/similarErrors.
        signature = data.get("signature", data.get("errorSignature"))
        related = data.get("relatedIds", data.get("similarErrors")) or []
        try:
            category = ErrorCategory(data.get("category"))
        except ValueError:
            category = ErrorCategory.UNKNOWN
        return cls(
            id=str(data["id"]),
            timestamp=str(data["timestamp"]),
            signature=str(signature),
            category=category,
            root_cause=data.get("rootCause", ""),
            fix_applied=data.get("fixApplied", ""),
            verified=bool(data.get("verified", False)),
            related_ids=[str(r) for r in related],
        )
