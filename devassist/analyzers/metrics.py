"""Aggregate code metrics and coarse project complexity."""

from __future__ import annotations

from collections import Counter
from typing import Mapping, Sequence

from ..constants import DEFAULT_TABLES, AnalysisTables
from ..logging import get_logger
from ..models import CodeMetrics, Complexity, FileEvidence, FileRecord

LOW_FILE_LIMIT = 50
LOW_LINE_LIMIT = 5000
HIGH_FILE_LIMIT = 200
HIGH_LINE_LIMIT = 20000

# Histogram bucket for files such as Dockerfile or Makefile.
NO_EXTENSION = "(none)"


def count_lines(text: str) -> int:
    return len(text.splitlines())


def classify_complexity(total_files: int, total_lines: int) -> Complexity:
    """Two-threshold step: low when both are small, high when both are large."""
    if total_files < LOW_FILE_LIMIT and total_lines < LOW_LINE_LIMIT:
        return "low"
    if total_files >= HIGH_FILE_LIMIT and total_lines >= HIGH_LINE_LIMIT:
        return "high"
    return "medium"


class MetricsEngine:
    def __init__(self, tables: AnalysisTables = DEFAULT_TABLES) -> None:
        self.tables = tables
        self.logger = get_logger("analyzers.metrics")

    def measure(
        self,
        records: Sequence[FileRecord],
        evidence: Mapping[str, FileEvidence],
    ) -> CodeMetrics:
        histogram: Counter = Counter()
        total_files = 0
        total_lines = 0
        for record in records:
            histogram[record.extension or NO_EXTENSION] += 1
            if not self.tables.is_countable(record.language):
                continue
            total_files += 1
            facts = evidence.get(record.path)
            if facts is not None and facts.lines is not None:
                total_lines += facts.lines

        complexity = classify_complexity(total_files, total_lines)
        self.logger.debug(
            "Metrics: %d source files, %d lines, complexity %s", total_files, total_lines, complexity
        )
        return CodeMetrics(
            total_files=total_files,
            total_lines=total_lines,
            file_type_histogram=dict(sorted(histogram.items())),
            complexity=complexity,
        )


__all__ = ["MetricsEngine", "NO_EXTENSION", "classify_complexity", "count_lines"]
