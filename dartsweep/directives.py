"""Best-effort extraction of import/export/part directives from Dart source."""

from __future__ import annotations

import re
from typing import List

from .lexer import line_of, strip_comments
from .logging import get_logger
from .models import EXPORT, IMPORT, PART, RawDirective

# A directive starts a line or follows a ';' and runs to the next ';' outside
# quotes, so multi-line conditional imports and several directives per line
# both come out as whole statements.
_STATEMENT = re.compile(
    r"""
    (?:^|(?<=;))[ \t]*
    (?P<keyword>import|export|part)\b
    (?P<body>(?:[^;'"]|'[^'\n]*'|"[^"\n]*")*)
    """,
    re.MULTILINE | re.VERBOSE,
)
_QUOTED_TARGET = re.compile(r"""^\s*(['"])(.*?)\1""")
_CONDITIONAL_TARGET = re.compile(r"""\bif\s*\([^)]*\)\s*(['"])(.*?)\1""")
_PART_OF = re.compile(r"^\s*of\b")
_SDK_SCHEME = "dart:"
_BOM = "\ufeff"

_KINDS = {"import": IMPORT, "export": EXPORT, "part": PART}

logger = get_logger("directives")


def extract_directives(text: str, *, source: str = "<memory>") -> List[RawDirective]:
    """Return the directives found at statement position in *text*.

    Each directive reports the line its keyword is on. Statements that start
    like a directive but carry no quoted target are skipped.
    """
    stripped = strip_comments(text.lstrip(_BOM))
    directives: List[RawDirective] = []
    for statement in _STATEMENT.finditer(stripped):
        keyword = statement.group("keyword")
        body = statement.group("body")
        number = line_of(stripped, statement.start("keyword"))
        if keyword == "part" and _PART_OF.match(body):
            continue

        target = _QUOTED_TARGET.match(body)
        if target is None:
            logger.debug("Skipping malformed %s directive at %s:%d", keyword, source, number)
            continue

        targets = [target.group(2)]
        if keyword != "part":
            targets.extend(alt.group(2) for alt in _CONDITIONAL_TARGET.finditer(body, target.end()))

        for raw in targets:
            cleaned = raw.strip().replace("%20", " ")
            if not cleaned:
                logger.debug("Skipping empty %s target at %s:%d", keyword, source, number)
                continue
            if cleaned.startswith(_SDK_SCHEME):
                continue
            directives.append(RawDirective(kind=_KINDS[keyword], target=cleaned, line=number))
    return directives


__all__ = ["extract_directives"]
