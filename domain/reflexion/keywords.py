"""Keyword extraction used to match tasks against past reflections."""

import re
from typing import List

KEYWORD_PATTERNS = (
    re.compile(r"\b(api|endpoint|route|handler)\b"),
    re.compile(r"\b(database|db|query|sql|postgres)\b"),
    re.compile(r"\b(auth|login|token|jwt|session)\b"),
    re.compile(r"\b(file|read|write|path|directory)\b"),
    re.compile(r"\b(component|react|frontend|ui)\b"),
    re.compile(r"\b(test|jest|spec|mock)\b"),
    re.compile(r"\b(deploy|build|compile|bundle)\b"),
    re.compile(r"\b(git|commit|push|branch)\b"),
    re.compile(r"\b(error|exception|catch|throw)\b"),
    re.compile(r"\b(async|await|promise|callback)\b"),
)

_NON_SLUG_RE = re.compile(r"[^a-z0-9]")


def task_type_slug(task_type: str) -> str:
    return _NON_SLUG_RE.sub("-", task_type.lower())


def extract_keywords(task_type: str, task_description: str, limit: int = 10) -> List[str]:
    """
    Pick domain keywords out of a task.

    Matches are collected pattern by pattern in table order, followed by a
    slug of the task type. Duplicates are dropped and at most ``limit``
    keywords are returned.
    """
    text = f"{task_type} {task_description}".lower()
    keywords: List[str] = []
    for pattern in KEYWORD_PATTERNS:
        for match in pattern.findall(text):
            if match not in keywords:
                keywords.append(match)

    slug = task_type_slug(task_type)
    if slug and slug not in keywords:
        keywords.append(slug)
    return keywords[:limit]
