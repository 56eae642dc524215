"""Report aggregation and rendering."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict, List

from .models import CheckResult, Diagnostic, UnusedItem


@dataclass
class Report:
    """Checker results of one run, in checker order."""

    root: str
    results: List[CheckResult] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def has_unused(self) -> bool:
        return any(result.items for result in self.results)

    @property
    def unused_count(self) -> int:
        return sum(len(result.items) for result in self.results)

    def all_diagnostics(self) -> List[Diagnostic]:
        collected = list(self.diagnostics)
        for result in self.results:
            collected.extend(result.diagnostics)
        return sorted(collected, key=lambda diag: (diag.path, diag.line or 0, diag.message))

    def to_dict(self, *, verbose: bool = False) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "root": self.root,
            "unused": self.unused_count,
            "checkers": {
                result.checker: [asdict(item) for item in result.items]
                for result in self.results
            },
        }
        if verbose:
            payload["diagnostics"] = [asdict(diag) for diag in self.all_diagnostics()]
        return payload


def render_json(report: Report, *, verbose: bool = False) -> str:
    return json.dumps(report.to_dict(verbose=verbose), indent=2, sort_keys=True)


def render_text(report: Report, *, verbose: bool = False) -> str:
    lines: List[str] = []
    for result in report.results:
        lines.append(f"{result.title} ({len(result.items)})")
        for index, item in enumerate(result.items, start=1):
            lines.append(f"  {index}. {_describe(item)}")
        lines.append("")

    if verbose:
        diagnostics = report.all_diagnostics()
        lines.append(f"Diagnostics ({len(diagnostics)})")
        for diag in diagnostics:
            location = f"{diag.path}:{diag.line}" if diag.line else diag.path
            lines.append(f"  - {location}: {diag.message}")
        lines.append("")

    if report.has_unused:
        lines.append(f"Found {report.unused_count} unused item(s).")
    else:
        lines.append("No unused items found.")
    return "\n".join(lines)


def _describe(item: UnusedItem) -> str:
    if item.name == item.path:
        text = item.path
    else:
        location = f"{item.path}:{item.line}" if item.line else item.path
        text = f"{item.name} ({location})"
    if item.detail:
        text = f"{text} - {item.detail}"
    return text


__all__ = ["Report", "render_json", "render_text"]
