"""Maps directive targets to project files or external packages."""

from __future__ import annotations

import posixpath
import re
from typing import Mapping

from .models import Directive, ExternalPackage, RawDirective, Resolution, Resolved, Unresolvable

_PACKAGE_SCHEME = "package:"
_OTHER_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


class PathResolver:
    """Resolves raw directive targets against the scanned code files.

    Resolution is pure: the same target from the same file always yields the
    same state, and every target ends in exactly one state.
    """

    def __init__(self, package_name: str, code_ids: Mapping[str, int]) -> None:
        self.package_name = package_name
        self._code_ids = code_ids

    def resolve(self, source_path: str, directive: RawDirective) -> Directive:
        resolution = self.resolve_target(source_path, directive.target)
        return Directive(
            kind=directive.kind,
            target=directive.target,
            line=directive.line,
            resolution=resolution,
        )

    def resolve_target(self, source_path: str, target: str) -> Resolution:
        if target.startswith(_PACKAGE_SCHEME):
            return self._resolve_package(target)
        if _OTHER_SCHEME.match(target):
            return Unresolvable(raw=target, reason="unsupported URI scheme")
        if target.startswith("/"):
            return Unresolvable(raw=target, reason="absolute path")

        joined = posixpath.join(posixpath.dirname(source_path), target)
        normalised = posixpath.normpath(joined)
        if normalised == ".." or normalised.startswith("../"):
            return Unresolvable(raw=target, reason="outside the project root")
        return self._lookup(normalised, target)

    def _resolve_package(self, target: str) -> Resolution:
        name, sep, rest = target[len(_PACKAGE_SCHEME):].partition("/")
        if not name or not sep or not rest:
            return Unresolvable(raw=target, reason="package URI without a path")
        if name != self.package_name:
            return ExternalPackage(name=name)

        normalised = posixpath.normpath(posixpath.join("lib", rest))
        if not normalised.startswith("lib/"):
            return Unresolvable(raw=target, reason="outside the package lib directory")
        return self._lookup(normalised, target)

    def _lookup(self, path: str, target: str) -> Resolution:
        node_id = self._code_ids.get(path)
        if node_id is None:
            return Unresolvable(raw=target, reason=f"no such file: {path}")
        return Resolved(node_id=node_id)


__all__ = ["PathResolver"]
