"""Analysis stages that turn walked files into structured facts."""

from __future__ import annotations

from .dependencies import DependencyGraphBuilder, extract_exports, extract_references
from .metrics import MetricsEngine, classify_complexity, count_lines
from .project_type import ProjectTypeDetector
from .structure import StructureAnalyzer
from .utils import read_manifests

__all__ = [
    "DependencyGraphBuilder",
    "MetricsEngine",
    "ProjectTypeDetector",
    "StructureAnalyzer",
    "classify_complexity",
    "count_lines",
    "extract_exports",
    "extract_references",
    "read_manifests",
]
