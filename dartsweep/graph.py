"""Directive graph construction and reachability traversal."""

from __future__ import annotations

import posixpath
from collections import deque
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from .logging import get_logger
from .models import CODE, FileNode, Resolved

logger = get_logger("graph")


class EntryPointError(RuntimeError):
    """Raised when entry files are not configured, missing, or unreadable."""


class DependencyGraph:
    """Directed graph of code files keyed by their integer node ids.

    Only ``Resolved`` directives become edges, so every edge points at a
    scanned code file.
    """

    def __init__(self, nodes: Sequence[FileNode]) -> None:
        self.nodes: List[FileNode] = list(nodes)
        self._ids_by_path: Dict[str, int] = {
            node.path: node.id for node in self.nodes if node.kind == CODE
        }
        self._edges: List[List[int]] = [[] for _ in self.nodes]
        for node in self.nodes:
            if node.kind != CODE:
                continue
            targets = set()
            for directive in node.directives:
                resolution = directive.resolution
                if isinstance(resolution, Resolved) and self._is_code(resolution.node_id):
                    targets.add(resolution.node_id)
            self._edges[node.id] = sorted(targets)

    @classmethod
    def build(cls, nodes: Sequence[FileNode]) -> "DependencyGraph":
        graph = cls(nodes)
        logger.debug(
            "Built graph with %d code files and %d edges",
            len(graph._ids_by_path),
            graph.edge_count,
        )
        return graph

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._edges)

    def _is_code(self, node_id: int) -> bool:
        return 0 <= node_id < len(self.nodes) and self.nodes[node_id].kind == CODE

    def code_nodes(self) -> List[FileNode]:
        return [node for node in self.nodes if node.kind == CODE]

    def node(self, node_id: int) -> FileNode:
        return self.nodes[node_id]

    def node_id(self, path: str) -> Optional[int]:
        return self._ids_by_path.get(path)

    def successors(self, node_id: int) -> List[int]:
        return list(self._edges[node_id])

    def reachable_from(self, entry_ids: Iterable[int]) -> FrozenSet[int]:
        """Breadth-first closure over resolved edges, entries included."""
        visited = bytearray(len(self.nodes))
        queue: deque[int] = deque()
        for entry in entry_ids:
            if not visited[entry]:
                visited[entry] = 1
                queue.append(entry)

        while queue:
            current = queue.popleft()
            for target in self._edges[current]:
                if not visited[target]:
                    visited[target] = 1
                    queue.append(target)

        return frozenset(index for index, flag in enumerate(visited) if flag)


def resolve_entry_points(graph: DependencyGraph, entries: Sequence[str]) -> List[int]:
    """Map configured entry paths to node ids, failing on anything unusable."""
    if not entries:
        raise EntryPointError("No entry points configured")

    ids: List[int] = []
    for entry in entries:
        path = posixpath.normpath(entry.replace("\\", "/")).lstrip("/")
        node_id = graph.node_id(path)
        if node_id is None:
            raise EntryPointError(f"Entry point not found: {entry}")
        try:
            graph.node(node_id).read_text()
        except (OSError, UnicodeDecodeError) as exc:
            raise EntryPointError(f"Entry point is unreadable: {entry}: {exc}") from exc
        if node_id not in ids:
            ids.append(node_id)
    return ids


__all__ = ["DependencyGraph", "EntryPointError", "resolve_entry_points"]
