"""Checker for declared package dependencies nothing reachable uses."""

from __future__ import annotations

from typing import List, Set

from .base import CheckContext, Checker
from .utils import matches_any
from ..models import CheckResult, ExternalPackage, UnusedItem


class UnusedDependenciesChecker(Checker):
    """Reports manifest dependencies with no directive or token reference."""

    name = "dependencies"
    title = "Unused dependencies"

    def check(self, context: CheckContext) -> CheckResult:
        manifest = context.scan.manifest
        ignore = context.config.dependencies.ignore
        imported = self._imported_packages(context)

        items: List[UnusedItem] = []
        for name, line in sorted(manifest.dependencies.items()):
            if matches_any(name, ignore):
                continue
            if name in imported or context.evidence.has_identifier(name):
                continue
            items.append(
                UnusedItem(
                    checker=self.name,
                    name=name,
                    path=manifest.path,
                    line=line or None,
                    detail="not imported or referenced by any reachable file",
                )
            )
        return CheckResult(checker=self.name, title=self.title, items=items)

    @staticmethod
    def _imported_packages(context: CheckContext) -> Set[str]:
        packages: Set[str] = set()
        for node in context.reachable_code():
            for directive in node.directives:
                if isinstance(directive.resolution, ExternalPackage):
                    packages.add(directive.resolution.name)
        return packages
