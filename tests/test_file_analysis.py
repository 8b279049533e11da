"""Tests for single-file analysis."""

from __future__ import annotations

import pytest

from devassist.file_analysis import analyze_file, count_line_kinds, cyclomatic_complexity, declared_names


def test_line_breakdown_by_language() -> None:
    text = "// header\n\nconst a = 1\n/* block\n * more\n */\nconst b = 2\n"

    lines = count_line_kinds(text, "javascript")

    assert (lines.total, lines.code, lines.comment, lines.blank) == (7, 2, 4, 1)
    assert lines.comment_ratio == pytest.approx(0.571)

    python = count_line_kinds("# note\nx = 1\n", "python")
    assert (python.code, python.comment) == (1, 1)


def test_cyclomatic_complexity_counts_decision_points() -> None:
    text = "if (a && b) { for (;;) {} } else if (c || d) { x = e ? 1 : 2 }\nconst f = g?.h ?? i\n"

    assert cyclomatic_complexity(text) == 1 + 6
    assert cyclomatic_complexity("x = 1\n") == 1


def test_declared_names() -> None:
    text = "class Widget {}\nfunction render() {}\nconst load = async () => {}\n"

    functions, classes = declared_names(text)

    assert functions == ("render", "load")
    assert classes == ("Widget",)


def test_analyze_file_reports_findings_and_risk(repo_builder) -> None:
    repo_builder.write(
        {
            "src/run.py": """
            import subprocess


            def run(command):
                return eval(command)
            """,
        }
    )

    report = analyze_file(repo_builder.path(), "src/run.py")

    assert report.path == "src/run.py"
    assert report.language == "python"
    assert report.functions == ("run",)
    assert report.references == ("subprocess",)
    assert [f.rule_id for f in report.findings] == ["code-injection"]
    assert report.risk_level == "critical"
    assert report.score == 100 - 25 - 30
    assert report.quality_level == "fair"
    assert report.to_dict()["lines"]["comment_ratio"] == 0.0


def test_well_commented_clean_file_scores_full(repo_builder) -> None:
    repo_builder.write(
        {
            "lib/math.js": """
            // Adds two numbers.
            // Returns their sum.
            export function add(a, b) {
              return a + b
            }
            """,
        }
    )

    report = analyze_file(repo_builder.path(), "lib/math.js")

    assert report.findings == ()
    assert report.risk_level == "low"
    assert report.score == 100
    assert report.quality_level == "excellent"


def test_test_files_are_checked_too(repo_builder) -> None:
    repo_builder.write({"tests/test_x.py": "# check\nAPI_KEY = 'abcd1234efgh'\n"})

    report = analyze_file(repo_builder.path(), "tests/test_x.py")

    assert [f.rule_id for f in report.findings] == ["hardcoded-secret"]


def test_bad_paths_raise(repo_builder) -> None:
    repo_builder.write({"pkg/a.py": "x = 1\n"})

    with pytest.raises(FileNotFoundError):
        analyze_file(repo_builder.path(), "pkg/missing.py")
    with pytest.raises(IsADirectoryError):
        analyze_file(repo_builder.path(), "pkg")
    with pytest.raises(ValueError):
        analyze_file(repo_builder.path(), "pkg/a.py", max_file_size=2)
