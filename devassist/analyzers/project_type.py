"""Project type detection from root-level manifests."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Set

from ..constants import DEFAULT_TABLES, AnalysisTables
from ..logging import get_logger
from ..models import DependencySummary, ProjectManifestSignal, ProjectTypeInfo

_PYTHON_BUILD_FLAGS = ("poetry", "hatch", "pdm", "flit", "setuptools")
_RUNTIME_BUILD_TOOLS = {
    "rust": "cargo",
    "go": "go",
    "php": "composer",
    "ruby": "bundler",
}


class ProjectTypeDetector:
    """Determines runtime, frameworks, build tool and package manager.

    Runtimes are checked in table order and the first one with a manifest
    present wins. Frameworks are collected across every parsed manifest.
    """

    def __init__(self, tables: AnalysisTables = DEFAULT_TABLES) -> None:
        self.tables = tables
        self.logger = get_logger("analyzers.project_type")

    def detect(
        self,
        root_files: Iterable[str],
        manifests: Mapping[str, ProjectManifestSignal],
    ) -> ProjectTypeInfo:
        present: Set[str] = set(root_files)
        runtime = self._runtime(present)
        if runtime is None:
            self.logger.debug("No manifest found; project is generic")
            return ProjectTypeInfo(build_tool=self._build_tool_from_files(present) or "unknown")

        project_type, language, manifest_names = runtime
        dependencies = _merged_dependencies(manifests.values())
        lowered = {name.lower() for name in dependencies}

        frameworks = self._frameworks(lowered)
        if project_type == "node":
            if "typescript" in lowered or "tsconfig.json" in present:
                language = "typescript"
            if "next" in lowered:
                project_type = "next-js"

        build_tool = self._build_tool_from_files(present) or self._runtime_build_tool(
            project_type, present, manifests
        )
        info = ProjectTypeInfo(
            type=project_type,  # type: ignore[arg-type]
            language=language,
            frameworks=tuple(frameworks),
            build_tool=build_tool,
            package_manager=self._package_manager(project_type, present, manifests),
            manifests=tuple(name for name in manifest_names if name in present),
        )
        self.logger.debug("Detected project type %s (%s)", info.type, ", ".join(info.frameworks))
        return info

    def summarize_dependencies(
        self, manifests: Mapping[str, ProjectManifestSignal]
    ) -> DependencySummary:
        production: Dict[str, None] = {}
        development: Dict[str, None] = {}
        for signal in manifests.values():
            production.update(dict.fromkeys(signal.dependencies))
            development.update(dict.fromkeys(signal.dev_dependencies))
        declared = {name.lower() for name in list(production) + list(development)}
        security = tuple(pkg for pkg in self.tables.security_packages if pkg in declared)
        return DependencySummary(
            production=tuple(sorted(production)),
            development=tuple(sorted(name for name in development if name not in production)),
            security=security,
        )

    def _runtime(self, present: Set[str]):
        for project_type, language, manifest_names in self.tables.runtime_manifests:
            if any(name in present for name in manifest_names):
                return project_type, language, manifest_names
        return None

    def _frameworks(self, dependencies: Set[str]) -> List[str]:
        labels: List[str] = []
        for table in self.tables.frameworks.values():
            for label, names in table:
                if label in labels:
                    continue
                if any(_declares(name, dependencies) for name in names):
                    labels.append(label)
        return labels

    def _build_tool_from_files(self, present: Set[str]) -> Optional[str]:
        for filename, tool in self.tables.build_tool_files:
            if filename in present:
                return tool
        return None

    def _runtime_build_tool(
        self,
        project_type: str,
        present: Set[str],
        manifests: Mapping[str, ProjectManifestSignal],
    ) -> str:
        if project_type in _RUNTIME_BUILD_TOOLS:
            return _RUNTIME_BUILD_TOOLS[project_type]
        if project_type == "java":
            return "maven" if "pom.xml" in present else "gradle"
        if project_type == "python":
            flags = manifests.get("pyproject.toml")
            if flags is not None:
                for flag in _PYTHON_BUILD_FLAGS:
                    if flags.flags.get(flag):
                        return flag
            if "setup.py" in present or "setup.cfg" in present:
                return "setuptools"
            return "pip"
        if project_type in {"node", "next-js"}:
            node = manifests.get("package.json")
            if node is not None and "build" in node.scripts:
                return "npm-scripts"
        return "unknown"

    def _package_manager(
        self,
        project_type: str,
        present: Set[str],
        manifests: Mapping[str, ProjectManifestSignal],
    ) -> str:
        if project_type in {"node", "next-js"}:
            if "yarn.lock" in present:
                return "yarn"
            if "pnpm-lock.yaml" in present:
                return "pnpm"
            if "bun.lockb" in present:
                return "bun"
            return "npm"
        if project_type == "python":
            pyproject = manifests.get("pyproject.toml")
            if "poetry.lock" in present or (pyproject is not None and pyproject.flags.get("poetry")):
                return "poetry"
            if "Pipfile" in present:
                return "pipenv"
            if "uv.lock" in present:
                return "uv"
            return "pip"
        return {
            "rust": "cargo",
            "go": "go-modules",
            "php": "composer",
            "ruby": "bundler",
            "java": "maven" if "pom.xml" in present else "gradle",
        }.get(project_type, "unknown")


def _declares(name: str, dependencies: Set[str]) -> bool:
    if name in dependencies:
        return True
    # Maven/Gradle coordinates are "group:artifact"; match on either half.
    return any(name in dep for dep in dependencies if ":" in dep)


def _merged_dependencies(signals: Iterable[ProjectManifestSignal]) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    for signal in signals:
        merged.update(signal.all_dependencies())
    return merged


__all__ = ["ProjectTypeDetector"]
