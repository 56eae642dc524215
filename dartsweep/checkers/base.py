"""Base classes for usage checkers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, List, Tuple

from ..config import SweepConfig
from ..evidence import EvidenceIndex
from ..graph import DependencyGraph
from ..models import CheckResult, FileNode, ProjectScan


@dataclass(frozen=True)
class CheckContext:
    """Immutable inputs shared by every checker in a run."""

    scan: ProjectScan
    graph: DependencyGraph
    entries: Tuple[int, ...]
    reachable: FrozenSet[int]
    evidence: EvidenceIndex
    config: SweepConfig

    def reachable_code(self) -> List[FileNode]:
        return [self.graph.node(node_id) for node_id in sorted(self.reachable)]


class Checker(ABC):
    """Contract for checkers that reduce a declared set against used evidence."""

    name: str = ""
    title: str = ""

    @abstractmethod
    def check(self, context: CheckContext) -> CheckResult:
        """Return the unused items for this checker's resource kind."""
