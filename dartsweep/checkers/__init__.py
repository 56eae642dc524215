"""Usage checkers and their registry.

Built-in checkers always run in the order below. Third-party packages can
add checkers under the ``dartsweep.checkers`` entry-point group; an entry
point may name a ``Checker`` subclass, an instance, or a zero-argument
factory. Plugins are only imported when selected (or when no selection is
given).
"""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, List, Sequence

from ..logging import get_logger
from .assets import UnusedAssetsChecker
from .base import CheckContext, Checker
from .dependencies import UnusedDependenciesChecker
from .files import UnusedFilesChecker
from .localization import UnusedLocalizationChecker
from .locator import UnusedLocatorChecker

PLUGIN_GROUP = "dartsweep.checkers"

_BUILTINS: tuple[type[Checker], ...] = (
    UnusedFilesChecker,
    UnusedDependenciesChecker,
    UnusedAssetsChecker,
    UnusedLocalizationChecker,
    UnusedLocatorChecker,
)

BUILTIN_CHECKERS = tuple(checker.name for checker in _BUILTINS)

logger = get_logger("checkers")


class CheckerLoadError(ValueError):
    """Raised for unknown checker names and plugins that cannot be used."""


def discover_checkers(enabled: Sequence[str] | None = None) -> List[Checker]:
    """Instantiate the selected checkers, built-ins first, then plugins.

    Names are case-insensitive. ``None`` selects everything available.
    """
    registry: Dict[str, Callable[[], object]] = {cls.name: cls for cls in _BUILTINS}
    for entry in metadata.entry_points().select(group=PLUGIN_GROUP):
        key = entry.name.lower()
        if key in registry:
            logger.warning("Ignoring plugin '%s': name taken by another checker", entry.name)
            continue
        registry[key] = _lazy_plugin(entry)

    if enabled is None:
        selected = list(registry)
    else:
        wanted = {name.lower() for name in enabled}
        unknown = wanted.difference(registry)
        if unknown:
            raise CheckerLoadError(
                f"Unknown checkers requested: {', '.join(sorted(unknown))} "
                f"(available: {', '.join(registry)})"
            )
        selected = [name for name in registry if name in wanted]

    return [_instantiate(name, registry[name]) for name in selected]


def _lazy_plugin(entry: metadata.EntryPoint) -> Callable[[], object]:
    def _load() -> object:
        try:
            target = entry.load()
        except Exception as exc:
            raise CheckerLoadError(f"Could not import checker plugin '{entry.name}': {exc}") from exc
        logger.debug("Loaded checker plugin '%s' from %s", entry.name, getattr(entry, "value", "?"))
        if isinstance(target, Checker):
            return target
        return target() if callable(target) else target

    return _load


def _instantiate(name: str, factory: Callable[[], object]) -> Checker:
    checker = factory()
    if not isinstance(checker, Checker):
        raise CheckerLoadError(
            f"Checker '{name}' must be a Checker subclass, instance or factory, "
            f"got {type(checker).__name__}"
        )
    return checker


__all__ = [
    "BUILTIN_CHECKERS",
    "PLUGIN_GROUP",
    "CheckContext",
    "Checker",
    "CheckerLoadError",
    "discover_checkers",
]
