"""Structure analysis: directory purposes, architecture patterns, naming conventions."""

from __future__ import annotations

import os
from typing import Dict, List

from ..constants import DEFAULT_TABLES, AnalysisTables
from ..logging import get_logger
from ..models import DirectoryNode, DirectorySummary, StructureReport


class StructureAnalyzer:
    """Summarises the top level of a DirectoryNode tree."""

    def __init__(self, tables: AnalysisTables = DEFAULT_TABLES) -> None:
        self.tables = tables
        self.logger = get_logger("analyzers.structure")

    def analyze(self, tree: DirectoryNode) -> StructureReport:
        directories = {child.name: self._summarize(child) for child in tree.directories}
        patterns = self.detect_patterns(directories)
        conventions = self.detect_conventions(tree)
        self.logger.debug(
            "Structure: %d top-level directories, patterns=%s, conventions=%s",
            len(directories),
            patterns,
            conventions,
        )
        return StructureReport(
            directories=directories,
            patterns=tuple(patterns),
            conventions=tuple(conventions),
        )

    def detect_patterns(self, directory_names) -> List[str]:
        """Return every pattern label whose required directory set is present."""
        present = {name.lower() for name in directory_names}
        labels: List[str] = []
        for label, required in self.tables.architecture_patterns:
            if required <= present and label not in labels:
                labels.append(label)
        return labels

    def detect_conventions(self, tree: DirectoryNode) -> List[str]:
        """Return all naming conventions tied for the highest file count.

        A basename may match several conventions (``index`` is camel, kebab
        and snake case at once); each match is tallied independently.
        """
        counts: Dict[str, int] = {name: 0 for name, _ in self.tables.naming_conventions}
        for record in tree.iter_files():
            basename = os.path.splitext(record.path.rpartition("/")[2])[0]
            for name, pattern in self.tables.naming_conventions:
                if pattern.match(basename):
                    counts[name] += 1

        best = max(counts.values(), default=0)
        if best == 0:
            return []
        return [name for name, _ in self.tables.naming_conventions if counts[name] == best]

    def _summarize(self, node: DirectoryNode) -> DirectorySummary:
        languages = sorted(
            {record.language for record in node.iter_files() if self.tables.is_countable(record.language)}
        )
        return DirectorySummary(
            purpose=node.purpose,
            file_count=node.file_count,
            size=node.size,
            languages=tuple(languages),
        )


__all__ = ["StructureAnalyzer"]
