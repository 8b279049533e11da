"""Core data models shared across devassist components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

Severity = Literal["error", "warning", "info"]
Category = Literal["quality", "security", "performance"]
Complexity = Literal["low", "medium", "high"]
ProjectType = Literal[
    "generic", "node", "next-js", "python", "rust", "go", "java", "php", "ruby"
]


@dataclass(frozen=True)
class FileKind:
    """Semantic classification of a single file."""

    language: str = "unknown"
    framework_hint: Optional[str] = None
    purpose_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileRecord:
    """Metadata for an individual scanned file."""

    path: str
    size: int
    extension: str
    kind: FileKind
    modified: float
    mtime_ns: int = 0

    @property
    def language(self) -> str:
        return self.kind.language


@dataclass(frozen=True)
class DirectoryNode:
    """Recursive directory tree with aggregate counts."""

    name: str
    path: str
    purpose: str
    directories: Tuple["DirectoryNode", ...] = ()
    files: Tuple[FileRecord, ...] = ()
    file_count: int = 0
    size: int = 0
    readable: bool = True

    def iter_files(self):
        """Yield every FileRecord in this subtree, depth-first."""
        yield from self.files
        for child in self.directories:
            yield from child.iter_files()


@dataclass(frozen=True)
class FileEvidence:
    """Content-derived facts for one countable file.

    ``lines`` is ``None`` when the file was too large or unreadable; such a
    file still counts as a file but contributes no lines, references or hits.
    """

    path: str
    lines: Optional[int] = None
    references: Tuple[str, ...] = ()
    exports: Tuple[str, ...] = ()
    findings: Tuple["QualityFinding", ...] = ()

    @property
    def readable(self) -> bool:
        return self.lines is not None


@dataclass(frozen=True)
class ProjectManifestSignal:
    """Evidence read from a single manifest or lock file."""

    name: str
    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    scripts: Mapping[str, str] = field(default_factory=dict)
    flags: Mapping[str, bool] = field(default_factory=dict)

    def all_dependencies(self) -> Dict[str, str]:
        merged = dict(self.dev_dependencies)
        merged.update(self.dependencies)
        return merged


@dataclass(frozen=True)
class ProjectTypeInfo:
    """Primary runtime, frameworks and tooling of the project."""

    type: ProjectType = "generic"
    language: str = "unknown"
    frameworks: Tuple[str, ...] = ()
    build_tool: str = "unknown"
    package_manager: str = "unknown"
    manifests: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencySummary:
    """Declared external dependencies grouped by scope."""

    production: Tuple[str, ...] = ()
    development: Tuple[str, ...] = ()
    security: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DirectorySummary:
    """Top-level directory facts reported by the structure analyzer."""

    purpose: str
    file_count: int
    size: int
    languages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StructureReport:
    directories: Mapping[str, DirectorySummary] = field(default_factory=dict)
    patterns: Tuple[str, ...] = ()
    conventions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GraphNode:
    """A file (or external package) in the dependency graph."""

    kind: str
    language: Optional[str] = None
    exports: Tuple[str, ...] = ()
    imports: Tuple[str, ...] = ()
    version: Optional[str] = None


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    kind: str = "import"
    reference: str = ""
    unresolved: bool = False


@dataclass(frozen=True)
class DependencyGraph:
    """Directed file-to-file reference graph plus external package nodes.

    Edges either point at a key of ``nodes`` or carry ``unresolved=True``.
    Cycles are allowed.
    """

    nodes: Mapping[str, GraphNode] = field(default_factory=dict)
    edges: Tuple[GraphEdge, ...] = ()

    @property
    def unresolved(self) -> Tuple[GraphEdge, ...]:
        return tuple(edge for edge in self.edges if edge.unresolved)

    def external_nodes(self) -> Dict[str, GraphNode]:
        return {key: node for key, node in self.nodes.items() if node.kind == "external"}


@dataclass(frozen=True)
class CodeMetrics:
    total_files: int = 0
    total_lines: int = 0
    file_type_histogram: Mapping[str, int] = field(default_factory=dict)
    complexity: Complexity = "low"


@dataclass(frozen=True)
class QualityFinding:
    """A single heuristic observation; never mutated after creation."""

    rule_id: str
    category: Category
    severity: Severity
    description: str
    file: Optional[str] = None
    line: Optional[int] = None


@dataclass(frozen=True)
class QualityResult:
    score: int = 100
    findings: Tuple[QualityFinding, ...] = ()
    suggestions: Tuple[str, ...] = ()

    @property
    def security_findings(self) -> Tuple[QualityFinding, ...]:
        return tuple(f for f in self.findings if f.category == "security")


@dataclass(frozen=True)
class Recommendations:
    focus_areas: Tuple[str, ...] = ()
    development_phase: str = "early"
    technical_debt: str = "low"
    priority: Tuple[str, ...] = ()
    quality_level: str = "excellent"
    insights: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalysisMetadata:
    name: str
    root: str
    analyzed_at: str
    version: str
    skipped: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalysisResult:
    """Aggregate root handed to renderers; built fresh for every run."""

    metadata: AnalysisMetadata
    project: ProjectTypeInfo
    tree: DirectoryNode
    structure: StructureReport
    dependencies: DependencySummary
    graph: DependencyGraph
    metrics: CodeMetrics
    quality: QualityResult
    security: Tuple[QualityFinding, ...]
    recommendations: Recommendations

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
