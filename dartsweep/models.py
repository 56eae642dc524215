"""Core data models shared across dartsweep components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

CODE = "code"
ASSET = "asset"
LOCALIZATION = "localization"
MANIFEST = "manifest"

IMPORT = "import"
EXPORT = "export"
PART = "part"


@dataclass(frozen=True)
class Resolved:
    """Directive target is a code file inside the project."""

    node_id: int


@dataclass(frozen=True)
class ExternalPackage:
    """Directive target lives in another package; only the name is kept."""

    name: str


@dataclass(frozen=True)
class Unresolvable:
    """Directive target could not be mapped to a project file or package."""

    raw: str
    reason: str


Resolution = Union[Resolved, ExternalPackage, Unresolvable]


@dataclass(frozen=True)
class RawDirective:
    """Directive as found in source text, before resolution."""

    kind: str
    target: str
    line: int


@dataclass(frozen=True)
class Directive:
    """Directive with exactly one resolution state."""

    kind: str
    target: str
    line: int
    resolution: Resolution


@dataclass
class FileNode:
    """A scanned project file addressed by a compact integer id."""

    id: int
    path: str
    kind: str
    root: Path = field(repr=False, compare=False)
    directives: Tuple[Directive, ...] = ()
    _content: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def absolute_path(self) -> Path:
        return self.root / self.path

    def read_text(self) -> str:
        """Load the file content on first use and cache it."""
        if self._content is None:
            self._content = self.absolute_path.read_text(encoding="utf-8-sig")
        return self._content


@dataclass
class AssetEntry:
    """A single entry of the manifest's asset list."""

    path: str
    line: int
    flavors: List[str] = field(default_factory=list)

    @property
    def is_directory(self) -> bool:
        return self.path.endswith("/")


@dataclass
class LocalizationSettings:
    """Where translation resources live and how generated code accesses them."""

    class_name: str
    arb_dir: str
    template: Optional[str] = None
    main_locale: str = "en"
    output_dir: Optional[str] = None
    generated_prefix: Optional[str] = None


@dataclass
class ProjectManifest:
    """Declared package name, dependencies and assets of the project."""

    name: str
    path: str
    dependencies: Dict[str, int] = field(default_factory=dict)
    assets: List[AssetEntry] = field(default_factory=list)
    localization: Optional[LocalizationSettings] = None


@dataclass
class ProjectScan:
    """Result of walking a project tree."""

    root: Path
    manifest: ProjectManifest
    nodes: List[FileNode]
    asset_entries: Dict[str, AssetEntry] = field(default_factory=dict)

    def by_kind(self, kind: str) -> List[FileNode]:
        return [node for node in self.nodes if node.kind == kind]


@dataclass(frozen=True)
class LocalizationEntry:
    """A key/value pair of the source-locale translation file."""

    key: str
    value: str
    path: str
    line: int


@dataclass(frozen=True)
class LocatorRegistration:
    """A service-locator registration keyed by type and optional tag."""

    type_name: str
    tag: Optional[str]
    path: str
    line: int

    @property
    def identity(self) -> Tuple[str, Optional[str]]:
        return (self.type_name, self.tag)


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal finding surfaced in verbose output."""

    path: str
    line: Optional[int]
    message: str


@dataclass(frozen=True)
class UnusedItem:
    """An unused resource together with the place that declares it."""

    checker: str
    name: str
    path: str
    line: Optional[int] = None
    detail: str = ""

    def sort_key(self) -> Tuple[str, int, str]:
        return (self.path, self.line or 0, self.name)


@dataclass
class CheckResult:
    """Unused items reported by one checker."""

    checker: str
    title: str
    items: List[UnusedItem] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.items = sorted(self.items, key=UnusedItem.sort_key)
