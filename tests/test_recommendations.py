"""Tests for devassist.recommendations."""

from __future__ import annotations

import pytest

from devassist.models import CodeMetrics, ProjectTypeInfo, QualityFinding, QualityResult
from devassist.recommendations import development_phase, quality_level, synthesize, technical_debt


def _finding(rule_id: str, category: str = "quality", severity: str = "warning") -> QualityFinding:
    return QualityFinding(rule_id=rule_id, category=category, severity=severity, description=rule_id)


@pytest.mark.parametrize(("score", "expected"), [(0, "high"), (59, "high"), (60, "medium"), (79, "medium"), (80, "low")])
def test_technical_debt_buckets(score: int, expected: str) -> None:
    assert technical_debt(score) == expected


@pytest.mark.parametrize(("score", "expected"), [(100, "excellent"), (80, "excellent"), (60, "good"), (40, "fair"), (39, "needs-improvement")])
def test_quality_level_buckets(score: int, expected: str) -> None:
    assert quality_level(score) == expected


def test_development_phase() -> None:
    assert development_phase(CodeMetrics(total_files=5, complexity="high")) == "early"
    assert development_phase(CodeMetrics(total_files=300, complexity="high")) == "mature"
    assert development_phase(CodeMetrics(total_files=30, complexity="medium")) == "maintenance"


def test_security_findings_lead_priority() -> None:
    sql = _finding("sql-injection", category="security", severity="error")
    quality = QualityResult(score=35, findings=(_finding("missing-tests"), _finding("missing-documentation"), sql))

    recommendations = synthesize(
        CodeMetrics(total_files=250, total_lines=30000, complexity="high"),
        quality,
        (sql,),
        ProjectTypeInfo(type="node", frameworks=("Express",)),
    )

    assert recommendations.priority == ("security", "code quality", "test coverage", "documentation", "refactoring")
    assert recommendations.focus_areas == (
        "API design",
        "middleware",
        "security hardening",
        "testing",
        "documentation",
    )
    assert recommendations.technical_debt == "high"
    assert recommendations.development_phase == "mature"
    assert recommendations.quality_level == "needs-improvement"


def test_clean_project_has_empty_priority() -> None:
    recommendations = synthesize(
        CodeMetrics(total_files=3, total_lines=40),
        QualityResult(score=100),
        (),
        ProjectTypeInfo(type="python", frameworks=("FastAPI",)),
    )

    assert recommendations.priority == ()
    assert recommendations.focus_areas == ("API design", "data validation")
    assert recommendations.development_phase == "early"
    assert recommendations.technical_debt == "low"
    assert recommendations.insights[0].startswith("Code quality is good")


def test_frontend_and_performance_focus() -> None:
    sync_io = _finding("sync-io", category="performance")

    recommendations = synthesize(
        CodeMetrics(total_files=25),
        QualityResult(score=90, findings=(sync_io,)),
        (),
        ProjectTypeInfo(type="next-js", frameworks=("Next.js", "React")),
    )

    assert recommendations.focus_areas == ("frontend performance", "SEO", "component design", "performance")
