"""Checker for translation keys no reachable file refers to."""

from __future__ import annotations

import json
import posixpath
import re
from typing import Dict, List, Sequence, Tuple

from .base import CheckContext, Checker
from .utils import shorten
from ..logging import get_logger
from ..models import (
    LOCALIZATION,
    CheckResult,
    Diagnostic,
    FileNode,
    LocalizationEntry,
    LocalizationSettings,
    UnusedItem,
)
from ..pubspec import is_generated_localization

_KEY_LINE = re.compile(r'^\s*"((?:[^"\\]|\\.)*)"\s*:', re.MULTILINE)

logger = get_logger("checkers.localization")


def parse_arb(path: str, text: str) -> List[LocalizationEntry]:
    """Return the translatable entries of an ARB document.

    Metadata keys (``@key`` and ``@@locale``) are skipped.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("ARB file must contain a JSON object")

    lines: Dict[str, int] = {}
    for match in _KEY_LINE.finditer(text):
        lines.setdefault(match.group(1), text.count("\n", 0, match.start()) + 1)

    entries: List[LocalizationEntry] = []
    for key, value in data.items():
        if key.startswith("@"):
            continue
        rendered = value if isinstance(value, str) else json.dumps(value, sort_keys=True)
        entries.append(
            LocalizationEntry(key=key, value=rendered, path=path, line=lines.get(key, 0))
        )
    return entries


class UnusedLocalizationChecker(Checker):
    """Reports source-locale keys never accessed from reachable code."""

    name = "localization"
    title = "Unused localization entries"

    def check(self, context: CheckContext) -> CheckResult:
        settings = context.scan.manifest.localization
        if settings is None:
            return CheckResult(
                checker=self.name,
                title=self.title,
                diagnostics=[
                    Diagnostic(
                        path=context.scan.manifest.path,
                        line=None,
                        message="no localization configuration found",
                    )
                ],
            )

        sources, diagnostics = self._source_files(context, settings)
        entries: List[LocalizationEntry] = []
        seen: set[str] = set()
        for node in sources:
            try:
                parsed = parse_arb(node.path, node.read_text())
            except (OSError, UnicodeDecodeError, ValueError) as exc:
                logger.warning("Skipping unreadable localization file %s: %s", node.path, exc)
                diagnostics.append(Diagnostic(path=node.path, line=None, message=f"unreadable: {exc}"))
                continue
            for entry in parsed:
                if entry.key not in seen:
                    seen.add(entry.key)
                    entries.append(entry)

        generated = {
            node.id
            for node in context.reachable_code()
            if is_generated_localization(node.path, settings)
        }
        evidence = context.evidence

        items: List[UnusedItem] = []
        for entry in entries:
            if evidence.has_localization_key(entry.key, exclude=generated):
                continue
            if evidence.has_identifier(entry.key, exclude=generated):
                continue
            items.append(
                UnusedItem(
                    checker=self.name,
                    name=entry.key,
                    path=entry.path,
                    line=entry.line or None,
                    detail=shorten(entry.value),
                )
            )
        return CheckResult(
            checker=self.name,
            title=self.title,
            items=items,
            diagnostics=diagnostics,
        )

    @staticmethod
    def _source_files(
        context: CheckContext, settings: LocalizationSettings
    ) -> Tuple[List[FileNode], List[Diagnostic]]:
        arb_files = [
            node
            for node in context.scan.by_kind(LOCALIZATION)
            if posixpath.dirname(node.path) == settings.arb_dir
        ]
        if not arb_files:
            return [], [
                Diagnostic(
                    path=settings.arb_dir,
                    line=None,
                    message="no localization files found",
                )
            ]

        if settings.template:
            template = posixpath.join(settings.arb_dir, settings.template)
            matches = [node for node in arb_files if node.path == template]
            if matches:
                return matches, []

        by_locale = _match_locale(arb_files, settings.main_locale)
        if by_locale:
            return by_locale, []

        logger.warning(
            "No %s localization file in %s; using every file", settings.main_locale, settings.arb_dir
        )
        return arb_files, [
            Diagnostic(
                path=settings.arb_dir,
                line=None,
                message=f"no source-locale ({settings.main_locale}) file; keys taken from all files",
            )
        ]


def _match_locale(nodes: Sequence[FileNode], locale: str) -> List[FileNode]:
    matched: List[FileNode] = []
    for node in nodes:
        stem, _ = posixpath.splitext(posixpath.basename(node.path))
        if stem == locale or stem.endswith(f"_{locale}"):
            matched.append(node)
    return matched
