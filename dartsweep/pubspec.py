"""Project manifest (pubspec.yaml) and localization settings loading."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import LocalizationConfig
from .logging import get_logger
from .models import AssetEntry, LocalizationSettings, ProjectManifest

MANIFEST_FILENAME = "pubspec.yaml"
L10N_FILENAME = "l10n.yaml"

logger = get_logger("pubspec")


class ManifestError(RuntimeError):
    """Raised when the project manifest is missing or cannot be parsed."""


def load_manifest(root: Path, overrides: LocalizationConfig | None = None) -> ProjectManifest:
    """Parse pubspec.yaml under *root* into a ProjectManifest."""
    path = root / MANIFEST_FILENAME
    if not path.is_file():
        raise ManifestError(f"Project manifest not found: {path}")
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Failed to read {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
        node = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Failed to parse {MANIFEST_FILENAME}: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestError(f"{MANIFEST_FILENAME} must contain a mapping at the root")
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ManifestError(f"{MANIFEST_FILENAME} does not declare a package name")

    dependencies = _dependency_lines(data, node)
    assets = _asset_entries(data, node)
    localization = _localization_settings(root, data, overrides or LocalizationConfig())

    return ProjectManifest(
        name=name.strip(),
        path=MANIFEST_FILENAME,
        dependencies=dependencies,
        assets=assets,
        localization=localization,
    )


def expand_assets(root: Path, entries: List[AssetEntry]) -> Dict[str, AssetEntry]:
    """Map every declared asset file to the manifest entry that declares it.

    Directory entries include only the files directly inside the directory,
    matching how Flutter bundles assets.
    """
    declared: Dict[str, AssetEntry] = {}
    for entry in entries:
        rel = _normalise(entry.path)
        if rel is None:
            logger.warning("Ignoring asset entry outside the project: %s", entry.path)
            continue
        target = root / rel
        if entry.is_directory or target.is_dir():
            if not target.is_dir():
                logger.warning("Declared asset directory does not exist: %s", entry.path)
                continue
            for child in sorted(target.iterdir()):
                if child.is_file():
                    declared.setdefault(f"{rel}/{child.name}", entry)
        elif target.is_file():
            declared.setdefault(rel, entry)
        else:
            logger.warning("Declared asset does not exist: %s", entry.path)
    return declared


def is_generated_localization(path: str, settings: LocalizationSettings) -> bool:
    """Return True for files emitted by the localization code generator."""
    if not settings.output_dir:
        return False
    directory = settings.output_dir.rstrip("/")
    if settings.generated_prefix:
        return (
            posixpath.dirname(path) == directory
            and posixpath.basename(path).startswith(settings.generated_prefix)
        )
    return path.startswith(f"{directory}/")


def _normalise(path: str) -> Optional[str]:
    cleaned = posixpath.normpath(path.strip().replace("\\", "/"))
    if cleaned.startswith("../") or cleaned == ".." or cleaned.startswith("/"):
        return None
    return cleaned


def _mapping_child(node: Any, key: str) -> Optional[yaml.Node]:
    if not isinstance(node, yaml.MappingNode):
        return None
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
            return value_node
    return None


def _dependency_lines(data: Dict[str, Any], node: Any) -> Dict[str, int]:
    declared = data.get("dependencies")
    if not isinstance(declared, dict):
        return {}
    lines: Dict[str, int] = {}
    dep_node = _mapping_child(node, "dependencies")
    if isinstance(dep_node, yaml.MappingNode):
        for key_node, _ in dep_node.value:
            if isinstance(key_node, yaml.ScalarNode):
                lines[key_node.value] = key_node.start_mark.line + 1
    return {str(name): lines.get(str(name), 0) for name in declared}


def _asset_entries(data: Dict[str, Any], node: Any) -> List[AssetEntry]:
    flutter = data.get("flutter")
    if not isinstance(flutter, dict):
        return []
    assets = flutter.get("assets")
    if not isinstance(assets, list):
        return []

    item_nodes: List[yaml.Node] = []
    assets_node = _mapping_child(_mapping_child(node, "flutter"), "assets")
    if isinstance(assets_node, yaml.SequenceNode):
        item_nodes = list(assets_node.value)

    entries: List[AssetEntry] = []
    for index, item in enumerate(assets):
        line = item_nodes[index].start_mark.line + 1 if index < len(item_nodes) else 0
        if isinstance(item, str):
            entries.append(AssetEntry(path=item, line=line))
        elif isinstance(item, dict) and isinstance(item.get("path"), str):
            flavors = item.get("flavors") or []
            entries.append(
                AssetEntry(
                    path=item["path"],
                    line=line,
                    flavors=[str(flavor) for flavor in flavors if isinstance(flavor, str)],
                )
            )
        else:
            logger.warning("Skipping malformed asset entry on line %d", line)
    return entries


def _localization_settings(
    root: Path, data: Dict[str, Any], overrides: LocalizationConfig
) -> Optional[LocalizationSettings]:
    settings = _gen_l10n_settings(root) or _flutter_intl_settings(data)
    if settings is None and overrides.arb_dir:
        settings = LocalizationSettings(class_name="S", arb_dir=overrides.arb_dir)
    if settings is None:
        return None

    if overrides.class_name:
        settings.class_name = overrides.class_name
    if overrides.arb_dir:
        settings.arb_dir = overrides.arb_dir
    if overrides.template:
        settings.template = overrides.template
    if overrides.output_dir:
        settings.output_dir = overrides.output_dir
        settings.generated_prefix = None
    settings.arb_dir = settings.arb_dir.strip("/")
    return settings


def _gen_l10n_settings(root: Path) -> Optional[LocalizationSettings]:
    path = root / L10N_FILENAME
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8-sig")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable %s: %s", L10N_FILENAME, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s without a mapping at the root", L10N_FILENAME)
        return None

    arb_dir = str(data.get("arb-dir") or "lib/l10n")
    template = str(data.get("template-arb-file") or "app_en.arb")
    output_file = str(data.get("output-localization-file") or "app_localizations.dart")
    prefix, _ = posixpath.splitext(output_file)
    return LocalizationSettings(
        class_name=str(data.get("output-class") or "AppLocalizations"),
        arb_dir=arb_dir,
        template=template,
        main_locale=_locale_from_template(template),
        output_dir=str(data.get("output-dir") or arb_dir).strip("/"),
        generated_prefix=prefix,
    )


def _flutter_intl_settings(data: Dict[str, Any]) -> Optional[LocalizationSettings]:
    section = data.get("flutter_intl")
    if not isinstance(section, dict):
        return None
    if section.get("enabled") is False:
        return None
    main_locale = str(section.get("main_locale") or "en")
    return LocalizationSettings(
        class_name=str(section.get("class_name") or "S"),
        arb_dir=str(section.get("arb_dir") or "lib/l10n"),
        template=f"intl_{main_locale}.arb",
        main_locale=main_locale,
        output_dir=str(section.get("output_dir") or "lib/generated").strip("/"),
    )


def _locale_from_template(template: str) -> str:
    stem, _ = posixpath.splitext(posixpath.basename(template))
    _, _, locale = stem.partition("_")
    return locale or "en"


__all__ = [
    "ManifestError",
    "expand_assets",
    "is_generated_localization",
    "load_manifest",
]
