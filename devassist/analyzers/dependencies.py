"""Dependency graph construction from import/include statements."""

from __future__ import annotations

import posixpath
import re
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..constants import DEFAULT_TABLES, AnalysisTables, ResolutionProfile
from ..logging import get_logger
from ..models import (
    DependencyGraph,
    FileEvidence,
    FileRecord,
    GraphEdge,
    GraphNode,
    ProjectManifestSignal,
)

_JS_REFERENCE = re.compile(
    r"""import\s+(?:[^'";]+?\s+from\s+)?['"]([^'"\n]+)['"]"""
    r"""|export\s+(?:\*|\{[^}]*\})(?:\s+as\s+\w+)?\s+from\s+['"]([^'"\n]+)['"]"""
    r"""|require\(\s*['"]([^'"\n]+)['"]\s*\)"""
    r"""|import\(\s*['"]([^'"\n]+)['"]\s*\)"""
)
_PY_FROM = re.compile(
    r"^\s*from\s+(\.*)([\w.]*)\s+import\s+(\([^)]*\)|[\w \t,*]+)", re.MULTILINE
)
_PY_IMPORT = re.compile(r"^\s*import\s+([\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+(?:\s+as\s+\w+)?)*)", re.MULTILINE)
_PHP_REFERENCE = re.compile(r"""\b(?:require|include)(?:_once)?\s*\(?\s*['"]([^'"\n]+)['"]""")
_C_INCLUDE = re.compile(r'^\s*#\s*include\s+"([^"\n]+)"', re.MULTILINE)
_RUBY_REFERENCE = re.compile(r"""^\s*require(_relative)?\s*\(?\s*['"]([^'"\n]+)['"]""", re.MULTILINE)

_JS_DEFAULT_EXPORT = re.compile(r"export\s+default\s+(?:async\s+)?(?:function\*?|class)?\s*([A-Za-z_$][\w$]*)")
_JS_NAMED_EXPORT = re.compile(
    r"export\s+(?:async\s+)?(?:function\*?|class|const|let|var|interface|type|enum)\s+([A-Za-z_$][\w$]*)"
)
_JS_EXPORT_LIST = re.compile(r"export\s*\{([^}]+)\}")
_JS_COMMONJS_EXPORT = re.compile(r"\bexports\.([A-Za-z_$][\w$]*)\s*=")
_PY_ALL = re.compile(r"^__all__\s*=\s*[\[(]([^\])]*)[\])]", re.MULTILINE)
_PY_TOP_LEVEL = re.compile(r"^(?:async\s+)?(?:def|class)\s+([A-Za-z]\w*)", re.MULTILINE)
_PHP_DECLARATION = re.compile(
    r"^\s*(?:final\s+|abstract\s+)?(?:class|interface|trait|function)\s+(\w+)", re.MULTILINE
)

_JS_LANGUAGES = {"javascript", "typescript", "vue", "svelte"}

# Directory-name fragments -> node kind, checked in order.
_NODE_KINDS: Tuple[Tuple[str, str], ...] = (
    ("component", "component"),
    ("page", "page"),
    ("api", "api"),
    ("util", "utility"),
    ("helper", "utility"),
    ("service", "service"),
    ("model", "model"),
    ("type", "types"),
)


def _js_references(text: str) -> List[str]:
    refs: List[str] = []
    for match in _JS_REFERENCE.finditer(text):
        refs.append(next(group for group in match.groups() if group))
    return refs


def _python_references(text: str) -> List[str]:
    found: List[Tuple[int, str]] = []
    for match in _PY_FROM.finditer(text):
        dots, module, names = match.groups()
        if not dots:
            found.append((match.start(), module))
            continue
        prefix = "./" if len(dots) == 1 else "../" * (len(dots) - 1)
        if module:
            found.append((match.start(), prefix + module.replace(".", "/")))
            continue
        for name in names.strip("() \t\n").split(","):
            name = name.split(" as ")[0].strip()
            if name and name != "*":
                found.append((match.start(), prefix + name))
    for match in _PY_IMPORT.finditer(text):
        for part in match.group(1).split(","):
            module = part.split(" as ")[0].strip()
            if module:
                found.append((match.start(), module))
    return [ref for _, ref in sorted(found, key=lambda item: item[0])]


def _relative(refs: Iterable[str]) -> List[str]:
    return [ref if ref.startswith((".", "/")) else f"./{ref}" for ref in refs]


def _ruby_references(text: str) -> List[str]:
    refs: List[str] = []
    for match in _RUBY_REFERENCE.finditer(text):
        relative, target = match.groups()
        refs.append(_relative([target])[0] if relative else target)
    return refs


_REFERENCE_EXTRACTORS: Dict[str, Callable[[str], List[str]]] = {
    "python": _python_references,
    "php": lambda text: _PHP_REFERENCE.findall(text),
    "c": lambda text: _relative(_C_INCLUDE.findall(text)),
    "cpp": lambda text: _relative(_C_INCLUDE.findall(text)),
    "ruby": _ruby_references,
}
for _language in _JS_LANGUAGES:
    _REFERENCE_EXTRACTORS[_language] = _js_references


def extract_references(language: str, text: str) -> Tuple[str, ...]:
    """Return module reference literals in source order (duplicates removed)."""
    extractor = _REFERENCE_EXTRACTORS.get(language)
    if extractor is None:
        return ()
    return tuple(dict.fromkeys(extractor(text)))


def extract_exports(language: str, text: str) -> Tuple[str, ...]:
    names: List[str] = []
    if language in _JS_LANGUAGES:
        names.extend(_JS_DEFAULT_EXPORT.findall(text))
        names.extend(_JS_NAMED_EXPORT.findall(text))
        for group in _JS_EXPORT_LIST.findall(text):
            for item in group.split(","):
                name = item.split(" as ")[-1].strip()
                if name:
                    names.append(name)
        names.extend(_JS_COMMONJS_EXPORT.findall(text))
    elif language == "python":
        declared = _PY_ALL.search(text)
        if declared:
            names.extend(re.findall(r"['\"]([^'\"]+)['\"]", declared.group(1)))
        else:
            names.extend(_PY_TOP_LEVEL.findall(text))
    elif language == "php":
        names.extend(_PHP_DECLARATION.findall(text))
    return tuple(dict.fromkeys(names))


class DependencyGraphBuilder:
    """Builds the file-to-file reference graph plus external package nodes.

    Resolution needs the complete file list: a candidate only counts when it
    is one of the walked records. Resolved targets outside the countable
    languages (stylesheets, JSON) become ``asset`` nodes.
    """

    def __init__(self, tables: AnalysisTables = DEFAULT_TABLES) -> None:
        self.tables = tables
        self.logger = get_logger("analyzers.dependencies")

    def build(
        self,
        records: Sequence[FileRecord],
        evidence: Mapping[str, FileEvidence],
        manifests: Optional[Mapping[str, ProjectManifestSignal]] = None,
    ) -> DependencyGraph:
        known = {record.path for record in records}
        externals = self._external_versions(manifests or {})
        lowered_externals = {_normalise_package(name): name for name in externals}

        nodes: Dict[str, GraphNode] = {}
        edges: List[GraphEdge] = []
        for record in records:
            if not self.tables.is_countable(record.language):
                continue
            facts = evidence.get(record.path)
            references = facts.references if facts else ()
            nodes[record.path] = GraphNode(
                kind=_node_kind(record),
                language=record.language,
                exports=facts.exports if facts else (),
                imports=references,
            )
            seen = set()
            for reference in references:
                edge = self._edge_for(record, reference, known, lowered_externals)
                if edge is None or (edge.target, edge.unresolved) in seen:
                    continue
                seen.add((edge.target, edge.unresolved))
                edges.append(edge)

        by_path = {record.path: record for record in records}
        for edge in edges:
            target = by_path.get(edge.target)
            if not edge.unresolved and target is not None and edge.target not in nodes:
                nodes[edge.target] = GraphNode(kind="asset", language=target.language)

        for name, version in externals.items():
            nodes.setdefault(name, GraphNode(kind="external", version=version))

        unresolved = sum(1 for edge in edges if edge.unresolved)
        self.logger.debug(
            "Dependency graph: %d nodes, %d edges (%d unresolved)", len(nodes), len(edges), unresolved
        )
        return DependencyGraph(nodes=nodes, edges=tuple(edges))

    def resolve(self, source: str, reference: str, known: Iterable[str], language: str) -> Optional[str]:
        """Resolve a relative or rooted reference to a known file path."""
        base = _base_path(source, reference)
        if base is None:
            return None
        return self._first_candidate(base, set(known), self._profile(language))

    def _edge_for(
        self,
        record: FileRecord,
        reference: str,
        known: set,
        externals: Mapping[str, str],
    ) -> Optional[GraphEdge]:
        profile = self._profile(record.language)
        if reference.startswith((".", "/")):
            base = _base_path(record.path, reference)
            target = self._first_candidate(base, known, profile) if base is not None else None
            if target is None:
                return GraphEdge(
                    source=record.path,
                    target=base if base is not None else reference,
                    reference=reference,
                    unresolved=True,
                )
            return GraphEdge(source=record.path, target=target, reference=reference)

        if record.language == "python":
            target = self._first_candidate(reference.replace(".", "/"), known, profile)
            if target is not None:
                return GraphEdge(source=record.path, target=target, reference=reference)

        package = _package_name(reference, record.language)
        declared = externals.get(_normalise_package(package))
        if declared is not None:
            return GraphEdge(source=record.path, target=declared, reference=reference)
        return None

    def _first_candidate(
        self, base: str, known: set, profile: Optional[ResolutionProfile]
    ) -> Optional[str]:
        for candidate in _candidates(base, profile):
            if candidate in known:
                return candidate
        return None

    def _profile(self, language: Optional[str]) -> Optional[ResolutionProfile]:
        if language is None:
            return None
        return self.tables.resolution_profiles.get(language)

    def _external_versions(self, manifests: Mapping[str, ProjectManifestSignal]) -> Dict[str, str]:
        versions: Dict[str, str] = {}
        for signal in manifests.values():
            for name, version in signal.all_dependencies().items():
                versions.setdefault(name, version)
        return dict(sorted(versions.items()))


def _candidates(base: str, profile: Optional[ResolutionProfile]) -> List[str]:
    if base in ("", "."):
        stem = ""
        candidates: List[str] = []
    else:
        stem = base
        candidates = [base]
    if profile is None:
        return candidates
    if stem:
        candidates.extend(f"{stem}{ext}" for ext in profile.extensions)
    for index in profile.index_names:
        prefix = f"{stem}/{index}" if stem else index
        candidates.extend(f"{prefix}{ext}" for ext in profile.extensions)
    return candidates


def _base_path(source: str, reference: str) -> Optional[str]:
    if reference.startswith("/"):
        joined = reference.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(source), reference)
    normalised = posixpath.normpath(joined) if joined else "."
    if normalised == ".." or normalised.startswith("../"):
        return None
    return normalised


def _package_name(reference: str, language: str) -> str:
    if language == "python":
        return reference.split(".", 1)[0]
    parts = reference.split("/")
    if reference.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def _normalise_package(name: str) -> str:
    return name.lower().replace("_", "-")


def _node_kind(record: FileRecord) -> str:
    if "test" in record.kind.purpose_tags:
        return "test"
    directory = posixpath.dirname(record.path).lower()
    for fragment, kind in _NODE_KINDS:
        if fragment in directory:
            return kind
    return "module"


__all__ = ["DependencyGraphBuilder", "extract_exports", "extract_references"]
