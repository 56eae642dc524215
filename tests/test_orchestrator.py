"""Tests for dartsweep.orchestrator."""

from __future__ import annotations

from pathlib import Path

import pytest

from dartsweep.checkers import Checker
from dartsweep.graph import EntryPointError
from dartsweep.models import CheckResult, UnusedItem
from dartsweep.orchestrator import Orchestrator
from dartsweep.report import render_json, render_text


class RecordingChecker(Checker):
    """Checker double that records the context it was handed."""

    name = "recording"
    title = "Recording"

    def __init__(self) -> None:
        self.contexts = []

    def check(self, context):
        self.contexts.append(context)
        return CheckResult(checker=self.name, title=self.title)


def _write_example(repo_builder) -> None:
    repo_builder.pubspec(name="demo", dependencies=["http"])
    repo_builder.write(
        {
            "lib/main.dart": "import 'a.dart';\n\nvoid main() => greet();\n",
            "lib/a.dart": "void greet() => print('hello');\n",
            "lib/b.dart": "void unused() {}\n",
        }
    )


def test_reports_unused_file_and_dependency(repo_builder) -> None:
    _write_example(repo_builder)

    report = repo_builder.run(enabled=["files", "dependencies"])

    by_checker = {result.checker: result.items for result in report.results}
    assert by_checker["files"] == [
        UnusedItem(
            checker="files",
            name="lib/b.dart",
            path="lib/b.dart",
            detail="not reachable from any entry point",
        )
    ]
    assert [item.name for item in by_checker["dependencies"]] == ["http"]
    assert report.has_unused
    assert report.unused_count == 2


def test_runs_are_byte_identical(repo_builder) -> None:
    _write_example(repo_builder)
    repo_builder.pubspec(name="demo", dependencies=["http"], assets=["assets/"])
    repo_builder.write(
        {
            "assets/one.png": "1",
            "assets/two.png": "2",
            "lib/c.dart": "import 'missing.dart';\n",
        }
    )

    first = repo_builder.run()
    second = repo_builder.run()

    assert render_text(first, verbose=True) == render_text(second, verbose=True)
    assert render_json(first, verbose=True) == render_json(second, verbose=True)


def test_context_carries_directives_and_reachable_set(repo_builder) -> None:
    _write_example(repo_builder)
    recorder = RecordingChecker()

    report = Orchestrator(checkers=[recorder]).run(str(repo_builder.path()))

    (context,) = recorder.contexts
    reachable = {context.graph.node(node_id).path for node_id in context.reachable}
    assert reachable == {"lib/main.dart", "lib/a.dart"}
    main = context.graph.node(context.graph.node_id("lib/main.dart"))
    assert [directive.target for directive in main.directives] == ["a.dart"]
    assert context.evidence.has_identifier("greet")
    assert not report.has_unused


def test_unresolvable_directives_become_diagnostics(repo_builder) -> None:
    repo_builder.pubspec()
    repo_builder.write({"lib/main.dart": "import 'gone.dart';\nimport 'package:demo/also_gone.dart';\n"})

    report = repo_builder.run(enabled=["files"])

    messages = [(diag.path, diag.line) for diag in report.all_diagnostics()]
    assert messages == [("lib/main.dart", 1), ("lib/main.dart", 2)]


def test_absolute_entry_points_are_relativised(repo_builder) -> None:
    _write_example(repo_builder)
    entry = repo_builder.path() / "lib" / "b.dart"

    report = repo_builder.run(enabled=["files"], entry_points=[str(entry)])

    assert [item.name for item in report.results[0].items] == ["lib/a.dart", "lib/main.dart"]


def test_missing_entry_point_is_fatal(repo_builder) -> None:
    repo_builder.pubspec()
    repo_builder.write({"lib/app.dart": ""})

    with pytest.raises(EntryPointError):
        repo_builder.run()


def test_missing_project_root_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator().run(str(tmp_path / "nowhere"))
