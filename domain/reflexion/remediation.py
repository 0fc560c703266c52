"""Per-category root-cause templates, corrections and their confidence."""

from typing import Mapping

from domain.diagnostics.error_categorization import category_table
from domain.diagnostics.models import ErrorCategory

# ``{message}`` is replaced with the failing error's message.
ROOT_CAUSE_TEMPLATES: Mapping[ErrorCategory, str] = category_table({
    ErrorCategory.NETWORK: "Network communication failed: {message}. Check connectivity, DNS, and server availability.",
    ErrorCategory.AUTH: "Authentication/authorization failed: {message}. Verify credentials and permissions.",
    ErrorCategory.SYNTAX: "Code parsing failed: {message}. Check syntax, brackets, and type annotations.",
    ErrorCategory.RUNTIME: "Runtime error: {message}. Check for null/undefined values and type mismatches.",
    ErrorCategory.RESOURCE: "Resource access failed: {message}. Verify file paths and permissions.",
    ErrorCategory.CONFIG: "Configuration error: {message}. Check environment variables and config files.",
    ErrorCategory.DEPENDENCY: "Dependency error: {message}. Reinstall dependencies and check package versions.",
    ErrorCategory.STATE: "State management error: {message}. Check for race conditions and stale data.",
    ErrorCategory.UNKNOWN: "Unknown error: {message}. Requires manual investigation.",
}, "ROOT_CAUSE_TEMPLATES")

CORRECTION_ACTIONS: Mapping[ErrorCategory, str] = category_table({
    ErrorCategory.NETWORK: "Implement retry with exponential backoff. Add timeout handling. Verify endpoint URL.",
    ErrorCategory.AUTH: "Refresh authentication token. Check token expiration. Verify API key permissions.",
    ErrorCategory.SYNTAX: "Review code for syntax errors. Run linter. Check type annotations.",
    ErrorCategory.RUNTIME: "Add null checks. Validate input data. Guard optional attribute access.",
    ErrorCategory.RESOURCE: "Verify file exists before access. Check directory permissions. Use absolute paths.",
    ErrorCategory.CONFIG: "Set required environment variables. Validate config on startup. Add defaults.",
    ErrorCategory.DEPENDENCY: "Reinstall dependencies. Check declared package versions. Rebuild the environment from scratch.",
    ErrorCategory.STATE: "Add mutex/locks for concurrent access. Invalidate caches. Use transactions.",
    ErrorCategory.UNKNOWN: "Log full error details. Add more specific error handling. Investigate stack trace.",
}, "CORRECTION_ACTIONS")

CORRECTION_CONFIDENCE: Mapping[ErrorCategory, float] = category_table({
    ErrorCategory.NETWORK: 0.7,
    ErrorCategory.AUTH: 0.8,
    ErrorCategory.SYNTAX: 0.9,
    ErrorCategory.RUNTIME: 0.6,
    ErrorCategory.RESOURCE: 0.85,
    ErrorCategory.CONFIG: 0.9,
    ErrorCategory.DEPENDENCY: 0.85,
    ErrorCategory.STATE: 0.5,
    ErrorCategory.UNKNOWN: 0.3,
}, "CORRECTION_CONFIDENCE")


def describe_root_cause(category: ErrorCategory, message: str) -> str:
    return ROOT_CAUSE_TEMPLATES[category].format(message=message)
