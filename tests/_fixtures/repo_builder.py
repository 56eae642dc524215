"""Helper utilities for constructing throwaway Flutter projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from dartsweep.models import ProjectScan
from dartsweep.orchestrator import Orchestrator
from dartsweep.report import Report
from dartsweep.repo_scanner import RepoScanner


class RepoBuilder:
    """Writes files into a temporary project and rescans or analyzes it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()
        self._scanner = RepoScanner()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def pubspec(
        self,
        name: str = "demo",
        *,
        dependencies: Iterable[str] = (),
        assets: Sequence[str] = (),
        extra: str = "",
    ) -> None:
        """Write a minimal pubspec.yaml declaring *dependencies* and *assets*."""
        lines = [f"name: {name}", "environment:", "  sdk: '>=3.0.0 <4.0.0'", "dependencies:"]
        lines.extend(f"  {dependency}: ^1.0.0" for dependency in dependencies)
        lines.append("dev_dependencies:")
        lines.append("  test: ^1.24.0")
        if assets:
            lines.extend(["flutter:", "  assets:"])
            lines.extend(f"    - {asset}" for asset in assets)
        text = "\n".join(lines) + "\n"
        if extra:
            text += textwrap.dedent(extra).lstrip("\n")
        (self.root / "pubspec.yaml").write_text(text, encoding="utf-8")

    def remove(self, relative: str) -> None:
        (self.root / relative).unlink()

    def scan(self) -> ProjectScan:
        """Return a fresh scan of the project contents."""
        return self._scanner.scan(str(self.root))

    def run(self, **kwargs: object) -> Report:
        """Run the full analysis pipeline over the project."""
        return Orchestrator().run(str(self.root), **kwargs)

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["RepoBuilder"]
