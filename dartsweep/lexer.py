"""Lightweight lexical helpers for Dart source text."""

from __future__ import annotations

import re

_STRINGS_AND_COMMENTS = re.compile(
    r"""
    (?P<string>
        r'''.*?'''
      | r\"\"\".*?\"\"\"
      | '''(?:\\.|.)*?'''
      | \"\"\"(?:\\.|.)*?\"\"\"
      | r'[^'\n]*'
      | r"[^"\n]*"
      | '(?:\\.|[^'\\\n])*'
      | "(?:\\.|[^"\\\n])*"
    )
    | (?P<comment>//[^\n]*|/\*.*?\*/)
    """,
    re.DOTALL | re.VERBOSE,
)


def _blank(text: str) -> str:
    return "".join("\n" if char == "\n" else " " for char in text)


def strip_comments(text: str) -> str:
    """Blank out comments while keeping string literals and line numbers intact."""

    def _replace(match: re.Match[str]) -> str:
        if match.group("comment") is not None:
            return _blank(match.group(0))
        return match.group(0)

    return _STRINGS_AND_COMMENTS.sub(_replace, text)


def line_of(text: str, offset: int) -> int:
    """Return the 1-based line number of *offset* within *text*."""
    return text.count("\n", 0, offset) + 1


__all__ = ["line_of", "strip_comments"]
