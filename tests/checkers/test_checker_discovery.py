"""Tests for checker discovery utilities."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from dartsweep.checkers import (
    BUILTIN_CHECKERS,
    Checker,
    CheckerLoadError,
    discover_checkers,
)
from dartsweep.checkers.files import UnusedFilesChecker
from dartsweep.models import CheckResult


class DummyChecker(Checker):
    """Test checker used for plugin discovery validation."""

    name = "dummy"
    title = "Dummy"

    def check(self, context):  # pragma: no cover - unused
        return CheckResult(checker=self.name, title=self.title)


def _no_plugins(monkeypatch) -> None:
    monkeypatch.setattr(
        "dartsweep.checkers.metadata.entry_points",
        lambda: SimpleNamespace(select=lambda **kwargs: []),
        raising=False,
    )


def test_discover_checkers_returns_builtins_in_order(monkeypatch) -> None:
    _no_plugins(monkeypatch)

    checkers = discover_checkers()

    assert [checker.name for checker in checkers] == list(BUILTIN_CHECKERS)
    assert BUILTIN_CHECKERS == ("files", "dependencies", "assets", "localization", "locator")


def test_discover_checkers_respects_enabled_filter(monkeypatch) -> None:
    _no_plugins(monkeypatch)

    checkers = discover_checkers(["FILES"])

    assert len(checkers) == 1
    assert isinstance(checkers[0], UnusedFilesChecker)


def test_discover_checkers_loads_entry_points(monkeypatch) -> None:
    dummy_entry = SimpleNamespace(
        name="dummy",
        load=lambda: DummyChecker,
    )

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "dartsweep.checkers":
                return self
            return []

    monkeypatch.setattr(
        "dartsweep.checkers.metadata.entry_points",
        lambda: DummyEntryPoints([dummy_entry]),
        raising=False,
    )

    checkers = discover_checkers(["dummy"])
    assert len(checkers) == 1
    assert isinstance(checkers[0], DummyChecker)


def test_discover_checkers_rejects_bad_plugins(monkeypatch) -> None:
    bad_entry = SimpleNamespace(name="bad", load=lambda: object())
    monkeypatch.setattr(
        "dartsweep.checkers.metadata.entry_points",
        lambda: SimpleNamespace(select=lambda **kwargs: [bad_entry]),
        raising=False,
    )

    with pytest.raises(CheckerLoadError, match="bad.*got object"):
        discover_checkers(["bad"])


def test_discover_checkers_raises_for_unknown_name(monkeypatch) -> None:
    _no_plugins(monkeypatch)

    with pytest.raises(ValueError, match="available: files, dependencies"):
        discover_checkers(["does-not-exist"])


def test_discover_checkers_wraps_plugin_import_failures(monkeypatch) -> None:
    def _broken_load():
        raise ImportError("no module named 'extra'")

    broken_entry = SimpleNamespace(name="broken", value="extra:Checker", load=_broken_load)
    monkeypatch.setattr(
        "dartsweep.checkers.metadata.entry_points",
        lambda: SimpleNamespace(select=lambda **kwargs: [broken_entry]),
        raising=False,
    )

    with pytest.raises(CheckerLoadError, match="Could not import checker plugin 'broken'"):
        discover_checkers(["broken"])


def test_discover_checkers_skips_unselected_plugins(monkeypatch) -> None:
    def _never_loaded():
        raise AssertionError("plugin imported although not selected")

    entry = SimpleNamespace(name="lazy", value="lazy:Checker", load=_never_loaded)
    monkeypatch.setattr(
        "dartsweep.checkers.metadata.entry_points",
        lambda: SimpleNamespace(select=lambda **kwargs: [entry]),
        raising=False,
    )

    checkers = discover_checkers(["files"])

    assert [checker.name for checker in checkers] == ["files"]


def test_discover_checkers_ignores_plugin_shadowing_builtin(monkeypatch) -> None:
    entry = SimpleNamespace(name="Files", value="x:Y", load=lambda: DummyChecker)
    monkeypatch.setattr(
        "dartsweep.checkers.metadata.entry_points",
        lambda: SimpleNamespace(select=lambda **kwargs: [entry]),
        raising=False,
    )

    checkers = discover_checkers(["files"])

    assert isinstance(checkers[0], UnusedFilesChecker)
