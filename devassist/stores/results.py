"""JSON persistence for AnalysisResult snapshots."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..models import (
    AnalysisMetadata,
    AnalysisResult,
    CodeMetrics,
    DependencyGraph,
    DependencySummary,
    DirectoryNode,
    DirectorySummary,
    FileKind,
    FileRecord,
    GraphEdge,
    GraphNode,
    ProjectTypeInfo,
    QualityFinding,
    QualityResult,
    Recommendations,
    StructureReport,
)

ANALYSIS_FILENAME = "analysis.json"


def analysis_path(root: Path, output_dir: str = ".devassist") -> Path:
    return root / output_dir / ANALYSIS_FILENAME


def save_analysis(result: AnalysisResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
    return path


def load_analysis(path: Path) -> Optional[AnalysisResult]:
    """Return the stored snapshot, or None when missing or unreadable."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    try:
        return analysis_from_dict(data)
    except (KeyError, TypeError, ValueError):
        return None


def analysis_from_dict(data: Mapping[str, Any]) -> AnalysisResult:
    metadata = dict(data["metadata"])
    metadata["skipped"] = tuple(metadata.get("skipped", ()))
    project = dict(data["project"])
    project["frameworks"] = tuple(project.get("frameworks", ()))
    project["manifests"] = tuple(project.get("manifests", ()))
    structure = data["structure"]
    dependencies = data["dependencies"]
    graph = data["graph"]
    quality = data["quality"]
    recommendations = data["recommendations"]

    return AnalysisResult(
        metadata=AnalysisMetadata(**metadata),
        project=ProjectTypeInfo(**project),
        tree=_node_from_dict(data["tree"]),
        structure=StructureReport(
            directories={
                name: DirectorySummary(
                    purpose=entry["purpose"],
                    file_count=entry["file_count"],
                    size=entry["size"],
                    languages=tuple(entry.get("languages", ())),
                )
                for name, entry in structure["directories"].items()
            },
            patterns=tuple(structure["patterns"]),
            conventions=tuple(structure["conventions"]),
        ),
        dependencies=DependencySummary(
            production=tuple(dependencies["production"]),
            development=tuple(dependencies["development"]),
            security=tuple(dependencies["security"]),
        ),
        graph=DependencyGraph(
            nodes={
                key: GraphNode(
                    kind=node["kind"],
                    language=node.get("language"),
                    exports=tuple(node.get("exports", ())),
                    imports=tuple(node.get("imports", ())),
                    version=node.get("version"),
                )
                for key, node in graph["nodes"].items()
            },
            edges=tuple(GraphEdge(**edge) for edge in graph["edges"]),
        ),
        metrics=CodeMetrics(**data["metrics"]),
        quality=QualityResult(
            score=quality["score"],
            findings=tuple(QualityFinding(**item) for item in quality["findings"]),
            suggestions=tuple(quality["suggestions"]),
        ),
        security=tuple(QualityFinding(**item) for item in data["security"]),
        recommendations=Recommendations(
            **{key: tuple(value) if isinstance(value, list) else value for key, value in recommendations.items()}
        ),
    )


def _node_from_dict(payload: Dict[str, Any]) -> DirectoryNode:
    return DirectoryNode(
        name=payload["name"],
        path=payload["path"],
        purpose=payload["purpose"],
        directories=tuple(_node_from_dict(child) for child in payload.get("directories", ())),
        files=tuple(_record_from_dict(item) for item in payload.get("files", ())),
        file_count=payload["file_count"],
        size=payload["size"],
        readable=payload.get("readable", True),
    )


def _record_from_dict(payload: Dict[str, Any]) -> FileRecord:
    kind = payload.get("kind") or {}
    return FileRecord(
        path=payload["path"],
        size=payload["size"],
        extension=payload["extension"],
        kind=FileKind(
            language=kind.get("language", "unknown"),
            framework_hint=kind.get("framework_hint"),
            purpose_tags=tuple(kind.get("purpose_tags", ())),
        ),
        modified=payload["modified"],
        mtime_ns=payload.get("mtime_ns", 0),
    )


__all__ = ["ANALYSIS_FILENAME", "analysis_from_dict", "analysis_path", "load_analysis", "save_analysis"]
