"""Project tree scanning and file classification."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import AbstractSet, Iterator, List, Sequence

from .config import SweepConfig
from .logging import get_logger
from .models import ASSET, CODE, LOCALIZATION, MANIFEST, FileNode, ProjectScan
from .pubspec import MANIFEST_FILENAME, expand_assets, load_manifest

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".dart_tool",
    ".pub-cache",
    ".pub",
    ".fvm",
    ".idea",
    ".vscode",
    ".gradle",
    ".symlinks",
    "build",
    "ephemeral",
    "Pods",
    "node_modules",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_CODE_SUFFIX = ".dart"
_LOCALIZATION_SUFFIX = ".arb"

logger = get_logger("scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .dartsweep.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    has_slash = "/" in pattern
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash=has_slash,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Ignoring unreadable %s: %s", path.name, exc)
        return []

    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, exclude_paths: Sequence[str]) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in exclude_paths:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        filtered_dirs = []
        for name in dirnames:
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            filtered_dirs.append(name)
        dirnames[:] = sorted(filtered_dirs)

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield rel_path


def _classify(rel_path: str, asset_paths: AbstractSet[str]) -> str | None:
    if rel_path == MANIFEST_FILENAME:
        return MANIFEST
    if rel_path in asset_paths:
        return ASSET
    if rel_path.endswith(_CODE_SUFFIX):
        return CODE
    if rel_path.endswith(_LOCALIZATION_SUFFIX):
        return LOCALIZATION
    return None


class RepoScanner:
    """Walks the project tree to produce classified file nodes."""

    def scan(self, root: str, config: SweepConfig | None = None) -> ProjectScan:
        """Return the manifest and the ordered file nodes of the project."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        config = config or SweepConfig(root=root_path)
        manifest = load_manifest(root_path, config.localization)
        asset_entries = expand_assets(root_path, manifest.assets)
        asset_paths = set(asset_entries)

        rules = _load_ignore_rules(root_path, config.exclude_paths)
        nodes: List[FileNode] = []
        for rel_path in sorted(_iter_files(root_path, rules)):
            kind = _classify(rel_path, asset_paths)
            if kind is None:
                continue
            nodes.append(FileNode(id=len(nodes), path=rel_path, kind=kind, root=root_path))

        logger.debug(
            "Scanned %d files (%d code, %d assets)",
            len(nodes),
            sum(1 for node in nodes if node.kind == CODE),
            len(asset_entries),
        )
        return ProjectScan(
            root=root_path,
            manifest=manifest,
            nodes=nodes,
            asset_entries=asset_entries,
        )
