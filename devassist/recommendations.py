"""Recommendation synthesis from metrics, quality results and project type."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .constants import SERVER_FRAMEWORKS
from .models import CodeMetrics, ProjectTypeInfo, QualityFinding, QualityResult, Recommendations

EARLY_PHASE_FILE_LIMIT = 20

_FRONTEND_FRAMEWORKS = {"React", "Next.js", "Vue", "Nuxt", "Angular", "Svelte"}
_PYTHON_WEB_FRAMEWORKS = {"Django", "Flask", "FastAPI"}

# (predicate over frameworks, focus labels); appended in this order.
_FRAMEWORK_FOCUS: Tuple[Tuple[frozenset, Tuple[str, ...]], ...] = (
    (frozenset(_FRONTEND_FRAMEWORKS), ("frontend performance", "SEO", "component design")),
    (frozenset(SERVER_FRAMEWORKS), ("API design", "middleware", "security hardening")),
    (frozenset(_PYTHON_WEB_FRAMEWORKS), ("API design", "data validation")),
)


def technical_debt(score: int) -> str:
    if score < 60:
        return "high"
    if score < 80:
        return "medium"
    return "low"


def development_phase(metrics: CodeMetrics) -> str:
    if metrics.total_files < EARLY_PHASE_FILE_LIMIT:
        return "early"
    if metrics.complexity == "high":
        return "mature"
    return "maintenance"


def quality_level(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    return "needs-improvement"


def synthesize(
    metrics: CodeMetrics,
    quality: QualityResult,
    security_findings: Sequence[QualityFinding],
    project: ProjectTypeInfo,
) -> Recommendations:
    """Derive focus areas, priorities and phase labels.

    The wiring order is fixed: framework focus first, then rule-driven focus;
    "security" always leads ``priority`` when any security finding exists.
    """
    triggered = {finding.rule_id for finding in quality.findings}
    frameworks = set(project.frameworks)

    focus: List[str] = []
    for required, labels in _FRAMEWORK_FOCUS:
        if frameworks & required:
            focus.extend(labels)
    if security_findings:
        focus.append("security hardening")
    if "missing-tests" in triggered:
        focus.append("testing")
    if "missing-documentation" in triggered:
        focus.append("documentation")
    if any(finding.category == "performance" for finding in quality.findings):
        focus.append("performance")

    priority: List[str] = []
    if quality.score < 70:
        priority.append("code quality")
    if "missing-tests" in triggered:
        priority.append("test coverage")
    if "missing-documentation" in triggered:
        priority.append("documentation")
    if metrics.complexity == "high":
        priority.append("refactoring")
    if security_findings:
        priority.insert(0, "security")

    return Recommendations(
        focus_areas=_unique(focus),
        development_phase=development_phase(metrics),
        technical_debt=technical_debt(quality.score),
        priority=_unique(priority),
        quality_level=quality_level(quality.score),
        insights=_insights(metrics, quality, project),
    )


def _insights(metrics: CodeMetrics, quality: QualityResult, project: ProjectTypeInfo) -> Tuple[str, ...]:
    insights: List[str] = []
    if quality.score >= 80:
        insights.append("Code quality is good and the project is easy to maintain.")
    elif quality.score >= 60:
        insights.append("Code quality is moderate; targeted cleanup is recommended.")
    else:
        insights.append("Code quality needs improvement before adding features.")
    if metrics.complexity == "high":
        insights.append("The project is large; consider modular refactoring.")
    if project.type == "generic":
        insights.append("No package manifest was found; dependency analysis is limited.")
    return tuple(insights)


def _unique(items: Sequence[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(items))


__all__ = [
    "development_phase",
    "quality_level",
    "synthesize",
    "technical_debt",
]
