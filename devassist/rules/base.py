"""Rule contracts for the quality and security heuristics."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from ..constants import DEFAULT_TABLES, AnalysisTables
from ..content import ContentReader
from ..models import (
    Category,
    CodeMetrics,
    DirectoryNode,
    FileRecord,
    ProjectManifestSignal,
    ProjectTypeInfo,
    QualityFinding,
    Severity,
)

TEST_DIRECTORIES = frozenset({"test", "tests", "__tests__", "spec", "e2e"})


@dataclass(frozen=True)
class RuleMatch:
    """Evidence that a rule triggered, located as precisely as the check allows."""

    detail: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None


ContentCheck = Callable[[str], Optional[RuleMatch]]


@dataclass(frozen=True)
class ProjectContext:
    """Read-only evidence handed to project-level checks."""

    root: Path
    root_files: FrozenSet[str]
    records: Tuple[FileRecord, ...]
    tree: DirectoryNode
    project: ProjectTypeInfo
    manifests: Mapping[str, ProjectManifestSignal]
    metrics: CodeMetrics
    reader: ContentReader
    tables: AnalysisTables = DEFAULT_TABLES
    dependency_names: FrozenSet[str] = field(default_factory=frozenset)

    def has_test_directory(self) -> bool:
        def _walk(node: DirectoryNode) -> bool:
            for child in node.directories:
                if child.name.lower() in TEST_DIRECTORIES or _walk(child):
                    return True
            return False

        return _walk(self.tree)


ProjectCheck = Callable[[ProjectContext], Sequence[RuleMatch]]


@dataclass(frozen=True)
class _RuleInfo:
    id: str
    category: Category
    severity: Severity
    penalty: int
    description: str
    suggestion: str

    def finding(self, match: RuleMatch) -> QualityFinding:
        description = self.description
        if match.detail:
            description = f"{description}: {match.detail}"
        return QualityFinding(
            rule_id=self.id,
            category=self.category,
            severity=self.severity,
            description=description,
            file=match.file,
            line=match.line,
        )


@dataclass(frozen=True)
class ContentRule(_RuleInfo):
    """A pure predicate over a single file's text."""

    check: ContentCheck = field(default=lambda text: None, compare=False)
    languages: FrozenSet[str] = frozenset()
    skip_tests: bool = True

    def applies_to(self, record: FileRecord) -> bool:
        if self.languages and record.language not in self.languages:
            return False
        if self.skip_tests and "test" in record.kind.purpose_tags:
            return False
        return True

    def evaluate(self, record: FileRecord, text: str) -> Optional[QualityFinding]:
        match = self.check(text)
        if match is None:
            return None
        return self.finding(RuleMatch(detail=match.detail, file=record.path, line=match.line))


@dataclass(frozen=True)
class ProjectRule(_RuleInfo):
    """A structural check over the whole project."""

    check: ProjectCheck = field(default=lambda context: (), compare=False)

    def evaluate(self, context: ProjectContext) -> List[QualityFinding]:
        return [self.finding(match) for match in self.check(context)]


Rule = Union[ContentRule, ProjectRule]


__all__ = [
    "ContentCheck",
    "ContentRule",
    "ProjectCheck",
    "ProjectContext",
    "ProjectRule",
    "Rule",
    "RuleMatch",
    "TEST_DIRECTORIES",
]
