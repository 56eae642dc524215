"""Checker for code files no entry point can reach."""

from __future__ import annotations

from typing import List

from .base import CheckContext, Checker
from .utils import matches_any, under_directory
from ..models import CheckResult, UnusedItem


class UnusedFilesChecker(Checker):
    """Reports source files outside the reachable set."""

    name = "files"
    title = "Unreferenced files"

    def check(self, context: CheckContext) -> CheckResult:
        config = context.config
        items: List[UnusedItem] = []
        for node in context.graph.code_nodes():
            if node.id in context.reachable:
                continue
            if not under_directory(node.path, config.source_dirs):
                continue
            if matches_any(node.path, config.files.ignore):
                continue
            items.append(
                UnusedItem(
                    checker=self.name,
                    name=node.path,
                    path=node.path,
                    detail="not reachable from any entry point",
                )
            )
        return CheckResult(checker=self.name, title=self.title, items=items)
