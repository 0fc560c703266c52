"""First-principles decomposition of error categories."""

from typing import Any, Mapping

from .error_categorization import category_table
from .models import Decomposition, ErrorCategory

DECOMPOSITIONS: Mapping[ErrorCategory, Decomposition] = category_table({
    ErrorCategory.NETWORK: Decomposition(
        what_failed="Network communication between client and server",
        why_it_failed="TCP/IP connection could not be established or was interrupted",
        assumptions=(
            "Server is running and accessible",
            "Network path exists between client and server",
            "No firewall blocking the connection",
            "DNS resolution is working",
            "Server is not rate-limiting",
        ),
        root_cause="One or more network layer assumptions are false",
    ),
    ErrorCategory.AUTH: Decomposition(
        what_failed="Authentication or authorization check",
        why_it_failed="Credentials are invalid, expired, or insufficient",
        assumptions=(
            "Token/credentials are valid",
            "Token has not expired",
            "User has required permissions",
            "Auth service is operational",
        ),
        root_cause="Credential validity or permission scope is incorrect",
    ),
    ErrorCategory.SYNTAX: Decomposition(
        what_failed="Code parsing or type checking",
        why_it_failed="Source code violates language grammar or type rules",
        assumptions=(
            "Code follows language syntax",
            "All brackets/quotes are balanced",
            "Types are compatible",
            "Imports are correct",
        ),
        root_cause="Code structure does not match expected grammar",
    ),
    ErrorCategory.RUNTIME: Decomposition(
        what_failed="Code execution at runtime",
        why_it_failed="Value or state was not what the code expected",
        assumptions=(
            "Variables are initialized before use",
            "Objects have expected properties",
            "Functions return expected types",
            "Async operations complete in order",
        ),
        root_cause="Runtime state diverged from code expectations",
    ),
    ErrorCategory.RESOURCE: Decomposition(
        what_failed="File system or resource access",
        why_it_failed="Resource does not exist or is not accessible",
        assumptions=(
            "File/directory exists at path",
            "Process has read/write permissions",
            "Path is correctly formatted",
            "Disk is not full",
        ),
        root_cause="Resource availability or permission assumption is false",
    ),
    ErrorCategory.CONFIG: Decomposition(
        what_failed="Configuration loading or validation",
        why_it_failed="Required configuration is missing or invalid",
        assumptions=(
            "Environment variables are set",
            "Config files exist and are valid",
            "Values are in expected format",
            "Required fields are present",
        ),
        root_cause="Configuration state does not match requirements",
    ),
    ErrorCategory.DEPENDENCY: Decomposition(
        what_failed="Module resolution or loading",
        why_it_failed="Required dependency is not installed or incompatible",
        assumptions=(
            "Package is installed in the active environment",
            "Package version is compatible",
            "Import path is correct",
            "Package exports the expected module",
        ),
        root_cause="Dependency installation or version is incorrect",
    ),
    ErrorCategory.STATE: Decomposition(
        what_failed="State management or synchronization",
        why_it_failed="State was modified unexpectedly or out of order",
        assumptions=(
            "Operations execute in expected order",
            "No concurrent modifications",
            "State is consistent across components",
            "Cache is not stale",
        ),
        root_cause="State synchronization or ordering assumption is false",
    ),
    ErrorCategory.UNKNOWN: Decomposition(
        what_failed="Unknown operation",
        why_it_failed="Error does not match known patterns",
        assumptions=(
            "Error message is accurate",
            "Stack trace is available",
            "Error is reproducible",
        ),
        root_cause="Requires manual investigation",
    ),
}, "DECOMPOSITIONS")


def decompose_error(error: Any, category: ErrorCategory) -> Decomposition:
    """
    Return the first-principles decomposition for ``category``.

    The error itself is accepted for interface symmetry with the hypothesis
    generator; the result depends on the category alone.
    """
    return DECOMPOSITIONS[category]
