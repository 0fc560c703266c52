"""Ranked root-cause hypotheses per error category."""

from typing import Any, List, Mapping, Tuple

from .error_categorization import category_table
from .models import ErrorCategory, Hypothesis


def _ranked(*rows: Tuple[str, int, str]) -> Tuple[Hypothesis, ...]:
    hypotheses = tuple(Hypothesis(description, likelihood, test_method)
                       for description, likelihood, test_method in rows)
    return tuple(sorted(hypotheses, key=lambda h: h.likelihood, reverse=True))


HYPOTHESES: Mapping[ErrorCategory, Tuple[Hypothesis, ...]] = category_table({
    ErrorCategory.NETWORK: _ranked(
        ("Server is down or unreachable", 40, "ping/curl the endpoint"),
        ("DNS resolution failing", 25, "nslookup/dig the hostname"),
        ("Firewall blocking connection", 20, "check firewall rules, try different port"),
        ("Rate limiting triggered", 10, "check response headers for rate limit info"),
        ("SSL/TLS certificate issue", 5, "verify certificate validity"),
    ),
    ErrorCategory.AUTH: _ranked(
        ("Token expired", 35, "check token expiry, refresh token"),
        ("Invalid credentials", 30, "verify credentials are correct"),
        ("Insufficient permissions", 20, "check required scopes/roles"),
        ("Token format incorrect", 10, "validate token structure"),
        ("Auth service unavailable", 5, "check auth service health"),
    ),
    ErrorCategory.SYNTAX: _ranked(
        ("Missing or extra bracket/parenthesis", 35, "run linter, check bracket matching"),
        ("Invalid import statement", 25, "verify import paths exist"),
        ("Type mismatch", 20, "run the type checker"),
        ("Reserved keyword misuse", 10, "check for reserved word conflicts"),
        ("Encoding issue", 10, "verify file encoding is UTF-8"),
    ),
    ErrorCategory.RUNTIME: _ranked(
        ("Null/undefined value accessed", 40, "add null checks before attribute access"),
        ("Array index out of bounds", 20, "verify array length before access"),
        ("Async operation not awaited", 20, "check for missing await keywords"),
        ("Type coercion issue", 15, "use strict equality, explicit type conversion"),
        ("Circular reference", 5, "check for circular dependencies"),
    ),
    ErrorCategory.RESOURCE: _ranked(
        ("File path incorrect", 35, "verify path exists, check relative vs absolute"),
        ("Permission denied", 30, "check file/directory permissions"),
        ("File locked by another process", 15, "check for file locks, close handles"),
        ("Disk full", 10, "check available disk space"),
        ("Symlink broken", 10, "verify symlink target exists"),
    ),
    ErrorCategory.CONFIG: _ranked(
        ("Environment variable not set", 40, "check .env file, verify env vars loaded"),
        ("Config file missing", 25, "verify config file exists at expected path"),
        ("Invalid config format", 20, "validate JSON/YAML syntax"),
        ("Wrong environment loaded", 10, "check the active environment name, verify correct config"),
        ("Config value type mismatch", 5, "validate config schema"),
    ),
    ErrorCategory.DEPENDENCY: _ranked(
        ("Package not installed", 40, "reinstall project dependencies"),
        ("Version incompatibility", 30, "check declared versions, verify peer dependencies"),
        ("Import path incorrect", 15, "verify module exports, check path"),
        ("Circular dependency", 10, "analyze import graph"),
        ("Native module build failed", 5, "rebuild native modules"),
    ),
    ErrorCategory.STATE: _ranked(
        ("Race condition", 35, "add mutex/locks, verify operation order"),
        ("Stale cache", 25, "clear cache, verify cache invalidation"),
        ("Memory leak", 20, "profile memory, check for retained refs"),
        ("Event listener not cleaned up", 15, "verify listeners are removed"),
        ("Global state mutation", 5, "audit global state access"),
    ),
    ErrorCategory.UNKNOWN: _ranked(
        ("Requires manual investigation", 100, "analyze stack trace, add logging"),
    ),
}, "HYPOTHESES")


def generate_hypotheses(error: Any, category: ErrorCategory) -> List[Hypothesis]:
    """Return the hypotheses for ``category``, most likely first. Never empty."""
    return list(HYPOTHESES.get(category, HYPOTHESES[ErrorCategory.UNKNOWN]))
