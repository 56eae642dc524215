"""Pipeline orchestration: scan, extract, resolve, traverse, check."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .checkers import CheckContext, Checker, discover_checkers
from .config import SweepConfig, load_config
from .directives import extract_directives
from .evidence import HeuristicScanner, build_evidence_index
from .graph import DependencyGraph, resolve_entry_points
from .logging import get_logger
from .models import CODE, Diagnostic, Directive, FileNode, ProjectScan, Unresolvable
from .report import Report
from .repo_scanner import RepoScanner
from .resolver import PathResolver


@dataclass(frozen=True)
class FileFacts:
    """Immutable per-file result of extraction and resolution."""

    node_id: int
    directives: Tuple[Directive, ...]
    diagnostics: Tuple[Diagnostic, ...]


class Orchestrator:
    """Coordinates a single analysis run over a project tree."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        checkers: Optional[Iterable[Checker]] = None,
    ) -> None:
        self.scanner = scanner or RepoScanner()
        self._checker_overrides = list(checkers) if checkers is not None else None
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str,
        *,
        entry_points: Sequence[str] | None = None,
        enabled: Sequence[str] | None = None,
        config_path: Path | None = None,
    ) -> Report:
        """Analyze the project at *path* and return the aggregated report."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        self.logger.info("Starting analysis of %s", root)

        if config_path is not None:
            config = load_config(Path(config_path), required=True)
        else:
            config = load_config(root)
        checkers = self._select_checkers(config, enabled)
        self.logger.debug("Selected %d checkers", len(checkers))

        scan = self.scanner.scan(str(root), config)
        code_nodes = scan.by_kind(CODE)
        self.logger.debug("Scanner discovered %d files (%d code)", len(scan.nodes), len(code_nodes))

        with ThreadPoolExecutor(max_workers=config.workers) as executor:
            diagnostics = self._extract_all(scan, code_nodes, executor)

            graph = DependencyGraph.build(scan.nodes)
            entries = [_relative_entry(entry, root) for entry in (entry_points or config.entry_points)]
            entry_ids = resolve_entry_points(graph, entries)
            reachable = graph.reachable_from(entry_ids)
            self.logger.info(
                "%d of %d code files reachable from %d entry point(s)",
                len(reachable),
                len(code_nodes),
                len(entry_ids),
            )

            heuristics = HeuristicScanner(
                locator_names=config.locator.names,
                localization_class=(
                    scan.manifest.localization.class_name if scan.manifest.localization else None
                ),
            )
            evidence = build_evidence_index(
                [graph.node(node_id) for node_id in sorted(reachable)],
                heuristics,
                executor.map,
            )

            context = CheckContext(
                scan=scan,
                graph=graph,
                entries=tuple(entry_ids),
                reachable=reachable,
                evidence=evidence,
                config=config,
            )
            futures = [executor.submit(checker.check, context) for checker in checkers]
            results = [future.result() for future in futures]

        for result in results:
            self.logger.debug("Checker %s reported %d item(s)", result.checker, len(result.items))
        return Report(root=str(root), results=results, diagnostics=diagnostics)

    def _select_checkers(
        self, config: SweepConfig, enabled: Sequence[str] | None
    ) -> List[Checker]:
        if self._checker_overrides is not None:
            if not enabled:
                return list(self._checker_overrides)
            wanted = {name.lower() for name in enabled}
            return [checker for checker in self._checker_overrides if checker.name in wanted]
        names = list(enabled) if enabled else (config.checkers.enabled or None)
        return discover_checkers(names)

    def _extract_all(
        self,
        scan: ProjectScan,
        code_nodes: List[FileNode],
        executor: ThreadPoolExecutor,
    ) -> List[Diagnostic]:
        resolver = PathResolver(
            scan.manifest.name,
            {node.path: node.id for node in code_nodes},
        )

        def _process(node: FileNode) -> FileFacts:
            return _extract_file(node, resolver)

        diagnostics: List[Diagnostic] = []
        # Facts are merged here, on the calling thread, in scan order.
        for facts in executor.map(_process, code_nodes):
            scan.nodes[facts.node_id].directives = facts.directives
            diagnostics.extend(facts.diagnostics)
        return diagnostics


def _extract_file(node: FileNode, resolver: PathResolver) -> FileFacts:
    logger = get_logger("orchestrator")
    try:
        text = node.read_text()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping unreadable file %s: %s", node.path, exc)
        return FileFacts(
            node_id=node.id,
            directives=(),
            diagnostics=(Diagnostic(path=node.path, line=None, message=f"unreadable: {exc}"),),
        )

    directives: List[Directive] = []
    diagnostics: List[Diagnostic] = []
    for raw in extract_directives(text, source=node.path):
        directive = resolver.resolve(node.path, raw)
        if isinstance(directive.resolution, Unresolvable):
            message = (
                f"unresolvable {directive.kind} '{directive.target}': "
                f"{directive.resolution.reason}"
            )
            logger.debug("%s:%d %s", node.path, directive.line, message)
            diagnostics.append(Diagnostic(path=node.path, line=directive.line, message=message))
        directives.append(directive)
    return FileFacts(node_id=node.id, directives=tuple(directives), diagnostics=tuple(diagnostics))


def _relative_entry(entry: str, root: Path) -> str:
    candidate = Path(entry).expanduser()
    if candidate.is_absolute():
        try:
            return candidate.resolve().relative_to(root).as_posix()
        except ValueError:
            return entry
    return entry


__all__ = ["FileFacts", "Orchestrator"]
