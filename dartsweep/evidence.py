"""Textual fallback scan that records whole-token evidence of use."""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import (
    Callable,
    Container,
    FrozenSet,
    Iterable,
    List,
    MutableMapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from .lexer import line_of, strip_comments
from .logging import get_logger
from .models import FileNode

_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_PATH_PATTERN = re.compile(r"[\w.@+\-]+(?:/[\w.@+\-]+)*")
_CHAIN_PATTERN = re.compile(
    r"(?<![\w$.])([A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*)\s*<"
)
_INSTANCE_NAME = re.compile(r"^instanceName\s*:\s*(.+)$", re.DOTALL)
_STRING_LITERAL = re.compile(r"""^r?(['"])(.*)\1$""", re.DOTALL)
_STRING_BODY = re.compile(r"'((?:\\.|[^'\\\n])*)'" r'|"((?:\\.|[^"\\\n])*)"')

_RESOLVE_METHODS = {None, "get", "getAsync", "call"}
_REGISTER_PREFIX = "register"

logger = get_logger("evidence")


@dataclass(frozen=True)
class LocatorCall:
    """A generic invocation ``receiver.method<Type>(args)`` found in source."""

    path: str
    line: int
    receiver: str
    method: Optional[str]
    type_name: str
    tag: Optional[str]
    on_locator: bool

    @property
    def is_registration(self) -> bool:
        return (
            self.on_locator
            and self.method is not None
            and self.method.startswith(_REGISTER_PREFIX)
        )

    @property
    def is_resolution(self) -> bool:
        return self.on_locator and self.method in _RESOLVE_METHODS

    @property
    def identity(self) -> Tuple[str, Optional[str]]:
        return (self.type_name, self.tag)


@dataclass(frozen=True)
class FileEvidence:
    """Facts collected from one reachable file."""

    node_id: int
    identifiers: FrozenSet[str] = frozenset()
    paths: FrozenSet[str] = frozenset()
    localization_keys: FrozenSet[str] = frozenset()
    locator_calls: Tuple[LocatorCall, ...] = ()


class HeuristicScanner:
    """Extracts whole-token evidence from a file's comment-free content."""

    def __init__(
        self,
        *,
        locator_names: Sequence[str] = (),
        localization_class: Optional[str] = None,
    ) -> None:
        self.locator_names = {_normalise_chain(name) for name in locator_names}
        self._accessor: Optional[re.Pattern[str]] = None
        if localization_class:
            self._accessor = re.compile(
                rf"(?<![\w$]){re.escape(localization_class)}\s*\.\s*"
                r"(?:(?:of|maybeOf)\s*\(\s*[\w$.]+\s*\)|current)"
                r"\s*!?\s*\??\s*\.\s*([A-Za-z_][A-Za-z0-9_]*)"
            )

    def scan_file(self, node: FileNode) -> FileEvidence:
        try:
            text = strip_comments(node.read_text())
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Skipping heuristic scan of %s: %s", node.path, exc)
            return FileEvidence(node_id=node.id)

        return FileEvidence(
            node_id=node.id,
            identifiers=frozenset(_IDENTIFIER_PATTERN.findall(text)),
            paths=frozenset(_path_tokens(text)),
            localization_keys=frozenset(self._localization_keys(text)),
            locator_calls=tuple(self._locator_calls(node.path, text)),
        )

    def _localization_keys(self, text: str) -> Set[str]:
        if self._accessor is None:
            return set()
        return {match.group(1) for match in self._accessor.finditer(text)}

    def _locator_calls(self, path: str, text: str) -> List[LocatorCall]:
        calls: List[LocatorCall] = []
        for match in _CHAIN_PATTERN.finditer(text):
            type_args = _read_type_arguments(text, match.end())
            if type_args is None:
                continue
            inner, after = type_args
            open_paren = _skip_whitespace(text, after)
            if open_paren >= len(text) or text[open_paren] != "(":
                continue
            type_name = _first_type_argument(inner)
            if not type_name:
                continue

            chain = _normalise_chain(match.group(1))
            if chain in self.locator_names:
                receiver, method = chain, None
            else:
                receiver, _, method = chain.rpartition(".")
            calls.append(
                LocatorCall(
                    path=path,
                    line=line_of(text, match.start()),
                    receiver=receiver,
                    method=method,
                    type_name=type_name,
                    tag=_instance_name(_read_arguments(text, open_paren)),
                    on_locator=receiver in self.locator_names,
                )
            )
        return calls


class EvidenceIndex:
    """Maps evidence terms to the reachable files that contain them."""

    def __init__(self) -> None:
        self._identifiers: MutableMapping[str, Set[int]] = defaultdict(set)
        self._paths: MutableMapping[str, Set[int]] = defaultdict(set)
        self._localization_keys: MutableMapping[str, Set[int]] = defaultdict(set)
        self._locator_calls: List[LocatorCall] = []
        self._node_ids: Set[int] = set()

    def add(self, evidence: FileEvidence) -> None:
        self._node_ids.add(evidence.node_id)
        for token in evidence.identifiers:
            self._identifiers[token].add(evidence.node_id)
        for token in evidence.paths:
            self._paths[token].add(evidence.node_id)
        for key in evidence.localization_keys:
            self._localization_keys[key].add(evidence.node_id)
        self._locator_calls.extend(evidence.locator_calls)

    @property
    def node_ids(self) -> FrozenSet[int]:
        return frozenset(self._node_ids)

    def has_identifier(self, token: str, exclude: Container[int] = ()) -> bool:
        return _present(self._identifiers.get(token), exclude)

    def has_path(self, token: str, exclude: Container[int] = ()) -> bool:
        return _present(self._paths.get(token), exclude)

    def has_localization_key(self, key: str, exclude: Container[int] = ()) -> bool:
        return _present(self._localization_keys.get(key), exclude)

    def locator_calls(self) -> List[LocatorCall]:
        return sorted(self._locator_calls, key=lambda call: (call.path, call.line, call.type_name))


def build_evidence_index(
    nodes: Sequence[FileNode],
    scanner: HeuristicScanner,
    map_fn: Callable[..., Iterable[FileEvidence]] = map,
) -> EvidenceIndex:
    """Scan *nodes* (normally the reachable code files) into an index.

    ``map_fn`` lets callers fan the per-file work out to an executor; results
    are merged in input order.
    """
    index = EvidenceIndex()
    for evidence in map_fn(scanner.scan_file, nodes):
        index.add(evidence)
    return index


def _present(ids: Optional[Set[int]], exclude: Container[int]) -> bool:
    if not ids:
        return False
    return any(node_id not in exclude for node_id in ids)


def _path_tokens(text: str) -> Set[str]:
    """Return path-like runs and string literal bodies with their ``/`` suffixes.

    Literal bodies keep names with spaces (``'assets/my logo.png'``) whole.
    """
    tokens: Set[str] = set()
    for match in _PATH_PATTERN.finditer(text):
        _add_with_suffixes(tokens, match.group(0).strip("."))
    for match in _STRING_BODY.finditer(text):
        body = match.group(1) if match.group(1) is not None else match.group(2)
        _add_with_suffixes(tokens, body.strip().replace("%20", " "))
    return tokens


def _add_with_suffixes(tokens: Set[str], run: str) -> None:
    if not run:
        return
    tokens.add(run)
    index = run.find("/")
    while index != -1:
        suffix = run[index + 1:]
        if suffix:
            tokens.add(suffix)
        index = run.find("/", index + 1)


def _normalise_chain(chain: str) -> str:
    cleaned = re.sub(r"\s+", "", chain)
    if cleaned.startswith("this."):
        cleaned = cleaned[len("this."):]
    return cleaned


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def _read_type_arguments(text: str, start: int) -> Optional[Tuple[str, int]]:
    """Return the text between ``<`` (just before *start*) and its ``>``."""
    depth = 1
    index = start
    while index < len(text):
        char = text[index]
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth == 0:
                return text[start:index], index + 1
        elif not (char.isalnum() or char in "_$ \t\r\n,.?"):
            return None
        index += 1
    return None


def _first_type_argument(inner: str) -> str:
    depth = 0
    for index, char in enumerate(inner):
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        elif char == "," and depth == 0:
            inner = inner[:index]
            break
    return re.sub(r"\s+", "", inner)


def _read_arguments(text: str, open_paren: int) -> str:
    """Return the text inside the parentheses that open at *open_paren*."""
    depth = 0
    quote: Optional[str] = None
    index = open_paren
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
            if depth == 0:
                return text[open_paren + 1:index]
        index += 1
    return text[open_paren + 1:]


def _split_top_level(arguments: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    current: List[str] = []
    index = 0
    while index < len(arguments):
        char = arguments[index]
        if quote:
            current.append(char)
            if char == "\\" and index + 1 < len(arguments):
                current.append(arguments[index + 1])
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
            current.append(char)
        elif char in "([{":
            depth += 1
            current.append(char)
        elif char in ")]}":
            depth -= 1
            current.append(char)
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def _instance_name(arguments: str) -> Optional[str]:
    for argument in _split_top_level(arguments):
        match = _INSTANCE_NAME.match(argument)
        if not match:
            continue
        value = match.group(1).strip()
        literal = _STRING_LITERAL.match(value)
        if literal:
            return literal.group(2)
        return re.sub(r"\s+", "", value)
    return None


__all__ = [
    "EvidenceIndex",
    "FileEvidence",
    "HeuristicScanner",
    "LocatorCall",
    "build_evidence_index",
]
