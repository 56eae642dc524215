"""Shared helper utilities for checker implementations."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable


def matches_any(value: str, patterns: Iterable[str]) -> bool:
    """Return True when *value* equals or glob-matches one of *patterns*."""
    for pattern in patterns:
        cleaned = pattern.strip()
        if not cleaned:
            continue
        if value == cleaned or fnmatchcase(value, cleaned):
            return True
        if cleaned.startswith("**/") and fnmatchcase(value, cleaned[3:]):
            return True
    return False


def under_directory(path: str, directories: Iterable[str]) -> bool:
    for directory in directories:
        prefix = directory.strip("/")
        if not prefix or prefix == ".":
            return True
        if path.startswith(f"{prefix}/"):
            return True
    return False


def shorten(value: str, limit: int = 60) -> str:
    collapsed = " ".join(value.split())
    if len(collapsed) > limit:
        return collapsed[: limit - 3].rstrip() + "..."
    return collapsed
