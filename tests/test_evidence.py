"""Tests for the heuristic evidence scanner and index."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from dartsweep.evidence import (
    EvidenceIndex,
    FileEvidence,
    HeuristicScanner,
    build_evidence_index,
)
from dartsweep.models import CODE, FileNode


def _node(node_id: int, path: str, content: str) -> FileNode:
    return FileNode(
        id=node_id,
        path=path,
        kind=CODE,
        root=Path("/unused"),
        _content=textwrap.dedent(content).lstrip("\n"),
    )


@pytest.fixture
def scanner() -> HeuristicScanner:
    return HeuristicScanner(locator_names=["locator", "GetIt.I"], localization_class="S")


def test_scan_file_collects_tokens_from_code_not_comments(scanner: HeuristicScanner) -> None:
    node = _node(
        0,
        "lib/main.dart",
        """
        // Uses package shared_preferences someday.
        void main() {
          Image.asset('assets/images/logo.png');
          final title = S.of(context).appTitle;
          final other = S.current!.greeting;
        }
        """,
    )

    evidence = scanner.scan_file(node)

    assert "main" in evidence.identifiers
    assert "shared_preferences" not in evidence.identifiers
    assert {"assets/images/logo.png", "images/logo.png", "logo.png"} <= evidence.paths
    assert evidence.localization_keys == frozenset({"appTitle", "greeting"})


def test_scan_file_finds_registrations_and_resolutions(scanner: HeuristicScanner) -> None:
    node = _node(
        0,
        "lib/di.dart",
        """
        void setup() {
          locator.registerLazySingleton<ApiClient>(() => ApiClient());
          locator.registerSingleton<Logger>(Logger(), instanceName: 'primary');
          GetIt.I.registerFactory<Repo>(() => Repo(locator<ApiClient>()));
          // locator<Ghost>();
        }

        void use() {
          final api = locator.get<ApiClient>();
          final log = locator<Logger>(instanceName: "primary");
          for (var i = 0; i < items.length; i++) {}
          final cache = provide<Cache>();
        }
        """,
    )

    calls = scanner.scan_file(node).locator_calls
    summary = [
        (call.line, call.receiver, call.method, call.type_name, call.tag, call.on_locator)
        for call in calls
    ]

    assert summary == [
        (2, "locator", "registerLazySingleton", "ApiClient", None, True),
        (3, "locator", "registerSingleton", "Logger", "primary", True),
        (4, "GetIt.I", "registerFactory", "Repo", None, True),
        (4, "locator", None, "ApiClient", None, True),
        (9, "locator", "get", "ApiClient", None, True),
        (10, "locator", None, "Logger", "primary", True),
        (12, "", "provide", "Cache", None, False),
    ]
    assert [call.is_registration for call in calls[:3]] == [True, True, True]
    assert all(call.is_resolution for call in calls[3:6])
    assert not calls[6].is_resolution


def test_unreadable_file_yields_empty_evidence(tmp_path: Path, scanner: HeuristicScanner) -> None:
    node = FileNode(id=3, path="lib/gone.dart", kind=CODE, root=tmp_path)

    evidence = scanner.scan_file(node)

    assert evidence == FileEvidence(node_id=3)


def test_index_lookups_honor_exclusions() -> None:
    index = EvidenceIndex()
    index.add(FileEvidence(node_id=1, identifiers=frozenset({"hello"})))
    index.add(FileEvidence(node_id=2, identifiers=frozenset({"hello", "bye"})))

    assert index.has_identifier("hello")
    assert index.has_identifier("hello", exclude={2})
    assert not index.has_identifier("bye", exclude={2})
    assert not index.has_identifier("missing")
    assert index.node_ids == frozenset({1, 2})


def test_build_evidence_index_merges_in_input_order(scanner: HeuristicScanner) -> None:
    nodes = [
        _node(0, "lib/b.dart", "final b = locator<B>();\n"),
        _node(1, "lib/a.dart", "final a = locator<A>();\n"),
    ]

    index = build_evidence_index(nodes, scanner)

    assert [call.path for call in index.locator_calls()] == ["lib/a.dart", "lib/b.dart"]
    assert index.has_identifier("A") and index.has_identifier("B")


def test_string_literal_bodies_keep_spaces(scanner: HeuristicScanner) -> None:
    node = _node(
        0,
        "lib/main.dart",
        """
        void main() {
          Image.asset('assets/my logo.png');
          Image.asset("assets/icons/big%20star.svg");
        }
        """,
    )

    evidence = scanner.scan_file(node)

    assert {"assets/my logo.png", "my logo.png"} <= evidence.paths
    assert {"assets/icons/big star.svg", "icons/big star.svg", "big star.svg"} <= evidence.paths
