"""Error signatures used to deduplicate recurring failures."""

import re
from typing import Any

from .models import ErrorObservation

SIGNATURE_MAX_LENGTH = 100

_NUMBER_RE = re.compile(r"\d+")
_QUOTED_RE = re.compile(r"['\"][^'\"]+['\"]")
_POSIX_PATH_RE = re.compile(r"/[^\s]+")
_WINDOWS_PATH_RE = re.compile(r"[a-z]:\\[^\s]+")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_message(message: str) -> str:
    """Strip the variable parts (numbers, quoted strings, paths) from a message."""
    normalized = message.lower()
    normalized = _NUMBER_RE.sub("N", normalized)
    normalized = _QUOTED_RE.sub("S", normalized)
    normalized = _WINDOWS_PATH_RE.sub("P", normalized)
    normalized = _POSIX_PATH_RE.sub("P", normalized)
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def generate_error_signature(error: Any) -> str:
    """
    Build the deduplication key for an error.

    Two errors that differ only in embedded numbers, quoted substrings or
    paths share a signature. The key is ``<code or UNKNOWN>:<normalized>``
    truncated to 100 characters.
    """
    observation = ErrorObservation.coerce(error)
    prefix = observation.code or "UNKNOWN"
    return f"{prefix}:{normalize_message(observation.message)}"[:SIGNATURE_MAX_LENGTH]
