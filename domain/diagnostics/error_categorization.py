"""Error categorization by ordered substring matching."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Tuple, TypeVar

from infrastructure.logging import get_logger
from .models import ErrorCategory, ErrorObservation

logger = get_logger(__name__)

T = TypeVar("T")


def category_table(entries: Mapping[ErrorCategory, T], name: str) -> Mapping[ErrorCategory, T]:
    """
    Freeze a per-category lookup table.

    Raises at import time when a category is missing so that a new category
    cannot silently fall through to a default.
    """
    missing = [c.value for c in ErrorCategory if c not in entries]
    if missing:
        raise RuntimeError(f"{name} has no entry for: {', '.join(missing)}")
    return MappingProxyType(dict(entries))


@dataclass(frozen=True)
class ErrorPattern:
    """One row of the classification table."""

    code: str
    description: str
    category: ErrorCategory
    patterns: Tuple[str, ...]


# First match wins. Resource errors come before network errors: EPERM and
# EACCES texts often mention sockets or timeouts as well.
ERROR_PATTERNS: Tuple[ErrorPattern, ...] = (
    # Resource
    ErrorPattern("ENOENT", "File or directory not found", ErrorCategory.RESOURCE,
                 ("enoent", "no such file", "does not exist", "filenotfounderror")),
    ErrorPattern("EPERM", "Permission denied", ErrorCategory.RESOURCE,
                 ("eperm", "eacces", "permission denied", "permissionerror")),

    # Network
    ErrorPattern("ETIMEDOUT", "Connection timed out", ErrorCategory.NETWORK,
                 ("etimedout", "timeout", "timed out", "connection timeout")),
    ErrorPattern("ECONNRESET", "Connection reset by peer", ErrorCategory.NETWORK,
                 ("econnreset", "connection reset", "connectionreseterror", "socket hang up")),
    ErrorPattern("ENOTFOUND", "DNS resolution failed", ErrorCategory.NETWORK,
                 ("enotfound", "getaddrinfo", "dns", "eai_again")),
    ErrorPattern("ECONNREFUSED", "Connection refused", ErrorCategory.NETWORK,
                 ("econnrefused", "connection refused", "connectionrefusederror")),

    # Auth (HTTP status codes)
    ErrorPattern("401", "Unauthorized", ErrorCategory.AUTH,
                 ("401", "unauthorized", "authentication failed", "invalid token")),
    ErrorPattern("403", "Forbidden", ErrorCategory.AUTH,
                 ("403", "forbidden", "access denied")),

    # Syntax / type
    ErrorPattern("SYNTAX_ERROR", "Syntax error in code", ErrorCategory.SYNTAX,
                 ("syntaxerror", "unexpected token", "parse error", "invalid syntax",
                  "indentationerror")),
    ErrorPattern("TYPE_ERROR", "Type mismatch", ErrorCategory.SYNTAX,
                 ("typeerror", "is not a function", "cannot read propert")),

    # Runtime
    ErrorPattern("NULL_REF", "Null or undefined reference", ErrorCategory.RUNTIME,
                 ("null", "undefined", "cannot read", "nonetype")),

    # Config
    ErrorPattern("ENV_MISSING", "Environment variable missing", ErrorCategory.CONFIG,
                 ("environment variable", "env not set", "config missing")),

    # Dependency
    ErrorPattern("MODULE_NOT_FOUND", "Module not found", ErrorCategory.DEPENDENCY,
                 ("module_not_found", "cannot find module", "module not found",
                  "modulenotfounderror", "no module named", "importerror")),

    # State
    ErrorPattern("STATE_CONFLICT", "Inconsistent or stale state", ErrorCategory.STATE,
                 ("race condition", "deadlock", "stale data", "concurrent modification")),
)


def classify_error(error: Any) -> ErrorCategory:
    """
    Classify an error into a category.

    Accepts anything :meth:`ErrorObservation.coerce` understands and never
    raises; unmatched text yields ``ErrorCategory.UNKNOWN``.
    """
    observation = ErrorObservation.coerce(error)
    search_text = observation.search_text()

    for entry in ERROR_PATTERNS:
        for pattern in entry.patterns:
            if pattern in search_text:
                logger.debug(f"Classified as {entry.category.value} via '{pattern}' ({entry.code})")
                return entry.category

    return ErrorCategory.UNKNOWN
