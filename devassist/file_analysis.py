"""Single-file analysis: line breakdown, complexity estimate, findings and risk."""

from __future__ import annotations

import os
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .analyzers import extract_references
from .classifier import FileClassifier
from .constants import DEFAULT_MAX_FILE_SIZE, DEFAULT_TABLES, AnalysisTables
from .logging import get_logger
from .models import FileRecord, QualityFinding
from .recommendations import quality_level
from .rules.engine import HeuristicsEngine, clamp_score

# Rule ids whose findings make a file's risk critical rather than high.
CRITICAL_RULES = frozenset({"code-injection", "hardcoded-secret", "sql-injection"})

_COMMENT_PREFIXES: Dict[str, Tuple[str, ...]] = {
    "javascript": ("//", "/*", "*"),
    "typescript": ("//", "/*", "*"),
    "vue": ("//", "/*", "*", "<!--"),
    "svelte": ("//", "/*", "*", "<!--"),
    "php": ("//", "/*", "*", "#"),
    "python": ("#",),
    "ruby": ("#",),
    "c": ("//", "/*", "*"),
    "cpp": ("//", "/*", "*"),
    "java": ("//", "/*", "*"),
    "go": ("//", "/*", "*"),
    "rust": ("//", "/*", "*"),
}

_DECISION_POINTS = re.compile(
    r"\b(?:if|elif|elseif|for|foreach|while|case|catch|except)\b|&&|\|\||(?<!\?)\?(?![?.:])"
)

_FUNCTION_NAMES = re.compile(
    r"\bfunction\s+([A-Za-z_$][\w$]*)"
    r"|\b(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:async\s*)?(?:function\b|\([^)]*\)\s*=>)"
    r"|^\s*(?:async\s+)?def\s+([A-Za-z_]\w*)"
    r"|^\s*fn\s+([A-Za-z_]\w*)"
    r"|^\s*func\s+(?:\([^)]*\)\s*)?([A-Za-z_]\w*)",
    re.MULTILINE,
)
_CLASS_NAMES = re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+|final\s+)?class\s+([A-Za-z_$][\w$]*)", re.MULTILINE)

COMMENT_RATIO_LOW = 0.1
COMMENT_RATIO_FAIR = 0.2
COMPLEXITY_HIGH = 50
COMPLEXITY_ELEVATED = 20


@dataclass(frozen=True)
class LineBreakdown:
    total: int
    code: int
    comment: int
    blank: int

    @property
    def comment_ratio(self) -> float:
        if not self.total:
            return 0.0
        return round(self.comment / self.total, 3)


@dataclass(frozen=True)
class FileAnalysis:
    path: str
    language: str
    size: int
    lines: LineBreakdown
    complexity: int
    functions: Tuple[str, ...]
    classes: Tuple[str, ...]
    references: Tuple[str, ...]
    findings: Tuple[QualityFinding, ...]
    risk_level: str
    score: int
    quality_level: str

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["lines"]["comment_ratio"] = self.lines.comment_ratio
        return payload


def count_line_kinds(text: str, language: str) -> LineBreakdown:
    prefixes = _COMMENT_PREFIXES.get(language, ())
    code = comment = blank = 0
    lines = text.splitlines()
    for line in lines:
        stripped = line.strip()
        if not stripped:
            blank += 1
        elif prefixes and stripped.startswith(prefixes):
            comment += 1
        else:
            code += 1
    return LineBreakdown(total=len(lines), code=code, comment=comment, blank=blank)


def cyclomatic_complexity(text: str) -> int:
    """One plus the number of decision points found by keyword matching."""
    return 1 + len(_DECISION_POINTS.findall(text))


def declared_names(text: str) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    functions: List[str] = []
    for match in _FUNCTION_NAMES.finditer(text):
        functions.append(next(group for group in match.groups() if group))
    classes = _CLASS_NAMES.findall(text)
    return tuple(dict.fromkeys(functions)), tuple(dict.fromkeys(classes))


def risk_level(findings: Tuple[QualityFinding, ...]) -> str:
    security = [finding for finding in findings if finding.category == "security"]
    if any(finding.rule_id in CRITICAL_RULES and finding.severity == "error" for finding in security):
        return "critical"
    if any(finding.severity == "error" for finding in security):
        return "high"
    if security or any(finding.severity == "warning" for finding in findings):
        return "medium"
    return "low"


def file_score(lines: LineBreakdown, complexity: int, engine: HeuristicsEngine, findings) -> int:
    score = 100
    if lines.comment_ratio < COMMENT_RATIO_LOW:
        score -= 25
    elif lines.comment_ratio < COMMENT_RATIO_FAIR:
        score -= 10
    if complexity > COMPLEXITY_HIGH:
        score -= 30
    elif complexity > COMPLEXITY_ELEVATED:
        score -= 15
    penalties = {rule.id: rule.penalty for rule in engine.content_rules}
    triggered = {finding.rule_id for finding in findings}
    score -= sum(penalties.get(rule_id, 0) for rule_id in triggered)
    return clamp_score(score)


def analyze_file(
    root: Path | str,
    rel_path: str,
    engine: Optional[HeuristicsEngine] = None,
    tables: AnalysisTables = DEFAULT_TABLES,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> FileAnalysis:
    """Analyze one file under ``root``.

    Raises FileNotFoundError when the file is missing, IsADirectoryError for a
    directory and ValueError when it is larger than ``max_file_size``.
    Test files are checked by every content rule here, unlike a project run.
    """
    logger = get_logger("file_analysis")
    root_path = Path(root).expanduser().resolve()
    path = (root_path / rel_path).resolve()
    if not path.exists():
        raise FileNotFoundError(f"File not found: {rel_path}")
    if path.is_dir():
        raise IsADirectoryError(f"Path is a directory: {rel_path}")

    stat_result = path.stat()
    if stat_result.st_size > max_file_size:
        raise ValueError(f"File exceeds {max_file_size} bytes: {rel_path}")
    text = path.read_text(encoding="utf-8", errors="ignore")

    try:
        display = path.relative_to(root_path).as_posix()
    except ValueError:
        display = path.as_posix()
    kind = FileClassifier(tables).classify(display, text[:4096])
    record = FileRecord(
        path=display,
        size=stat_result.st_size,
        extension=os.path.splitext(path.name)[1].lower(),
        kind=kind,
        modified=stat_result.st_mtime,
        mtime_ns=stat_result.st_mtime_ns,
    )

    engine = engine or HeuristicsEngine()
    findings: List[QualityFinding] = []
    for rule in engine.content_rules:
        if rule.languages and record.language not in rule.languages:
            continue
        try:
            finding = rule.evaluate(record, text)
        except Exception as exc:
            logger.debug("Rule %s failed on %s: %s", rule.id, display, exc)
            continue
        if finding is not None:
            findings.append(finding)

    lines = count_line_kinds(text, record.language)
    complexity = cyclomatic_complexity(text)
    functions, classes = declared_names(text)
    score = file_score(lines, complexity, engine, findings)
    logger.debug("Analyzed %s: %d lines, complexity %d, score %d", display, lines.total, complexity, score)
    return FileAnalysis(
        path=display,
        language=record.language,
        size=record.size,
        lines=lines,
        complexity=complexity,
        functions=functions,
        classes=classes,
        references=extract_references(record.language, text),
        findings=tuple(findings),
        risk_level=risk_level(tuple(findings)),
        score=score,
        quality_level=quality_level(score),
    )


__all__ = [
    "FileAnalysis",
    "LineBreakdown",
    "analyze_file",
    "count_line_kinds",
    "cyclomatic_complexity",
    "declared_names",
    "risk_level",
]
