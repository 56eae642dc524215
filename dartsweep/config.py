"""Configuration loading for dartsweep (.dartsweep.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".dartsweep.yml"

DEFAULT_ENTRY_POINTS = ["lib/main.dart"]
DEFAULT_SOURCE_DIRS = ["lib"]
DEFAULT_LOCATOR_NAMES = [
    "locator",
    "getIt",
    "sl",
    "injector",
    "serviceLocator",
    "GetIt.I",
    "GetIt.instance",
]
DEFAULT_WORKERS = 8


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CheckerConfig:
    """Checker enablement."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class IgnoreConfig:
    """Glob patterns or names a checker must never report."""

    ignore: List[str] = field(default_factory=list)


@dataclass
class LocalizationConfig:
    """Overrides for the detected localization settings."""

    class_name: Optional[str] = None
    arb_dir: Optional[str] = None
    template: Optional[str] = None
    output_dir: Optional[str] = None


@dataclass
class LocatorConfig:
    """Receiver names that address the service locator."""

    names: List[str] = field(default_factory=lambda: list(DEFAULT_LOCATOR_NAMES))


@dataclass
class SweepConfig:
    """Represents the settings defined in .dartsweep.yml."""

    root: Path
    entry_points: List[str] = field(default_factory=lambda: list(DEFAULT_ENTRY_POINTS))
    source_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_DIRS))
    exclude_paths: List[str] = field(default_factory=list)
    workers: int = DEFAULT_WORKERS
    checkers: CheckerConfig = field(default_factory=CheckerConfig)
    files: IgnoreConfig = field(default_factory=IgnoreConfig)
    dependencies: IgnoreConfig = field(default_factory=IgnoreConfig)
    assets: IgnoreConfig = field(default_factory=IgnoreConfig)
    localization: LocalizationConfig = field(default_factory=LocalizationConfig)
    locator: LocatorConfig = field(default_factory=LocatorConfig)


def load_config(config_path: Path, *, required: bool = False) -> SweepConfig:
    """Load configuration from disk, falling back to defaults when absent.

    With *required* set (an explicit --config), a missing file is an error.
    """
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        if required:
            raise ConfigError(f"Config file not found: {config_path}")
        return SweepConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = SweepConfig(root=root)

    entry_points = _as_str_list(data.get("entry_points"))
    if entry_points:
        config.entry_points = entry_points
    source_dirs = _as_str_list(data.get("source_dirs"))
    if source_dirs:
        config.source_dirs = [item.strip("/") for item in source_dirs]
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    if "workers" in data:
        workers = _as_int(data.get("workers"))
        if workers is None or workers < 1:
            raise ConfigError("workers must be a positive integer")
        config.workers = workers

    checker_data = _as_dict(data.get("checkers"))
    if checker_data:
        config.checkers.enabled = _as_str_list(checker_data.get("enabled"))

    config.files.ignore = _as_str_list(_as_dict(data.get("files")).get("ignore"))
    config.dependencies.ignore = _as_str_list(_as_dict(data.get("dependencies")).get("ignore"))
    config.assets.ignore = _as_str_list(_as_dict(data.get("assets")).get("ignore"))

    l10n_data = _as_dict(data.get("localization"))
    if l10n_data:
        config.localization = LocalizationConfig(
            class_name=_as_str(l10n_data.get("class_name")),
            arb_dir=_as_str(l10n_data.get("arb_dir")),
            template=_as_str(l10n_data.get("template")),
            output_dir=_as_str(l10n_data.get("output_dir")),
        )

    locator_data = _as_dict(data.get("locator"))
    names = _as_str_list(locator_data.get("names")) if locator_data else []
    if names:
        config.locator.names = names

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
