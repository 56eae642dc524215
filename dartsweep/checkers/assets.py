"""Checker for declared asset files that no reachable file mentions."""

from __future__ import annotations

import posixpath
from typing import List

from .base import CheckContext, Checker
from .utils import matches_any
from ..models import ASSET, CheckResult, UnusedItem


class UnusedAssetsChecker(Checker):
    """Reports assets whose path or file name never occurs as a whole token."""

    name = "assets"
    title = "Unreferenced assets"

    def check(self, context: CheckContext) -> CheckResult:
        scan = context.scan
        evidence = context.evidence
        ignore = context.config.assets.ignore

        items: List[UnusedItem] = []
        for node in scan.by_kind(ASSET):
            if matches_any(node.path, ignore):
                continue
            if evidence.has_path(node.path) or evidence.has_path(posixpath.basename(node.path)):
                continue
            entry = scan.asset_entries.get(node.path)
            detail = "never referenced by a reachable file"
            if entry is not None and entry.path.rstrip("/") != node.path:
                detail = f"{detail} (declared via {entry.path})"
            items.append(
                UnusedItem(
                    checker=self.name,
                    name=node.path,
                    path=scan.manifest.path,
                    line=entry.line if entry is not None and entry.line else None,
                    detail=detail,
                )
            )
        return CheckResult(checker=self.name, title=self.title, items=items)
