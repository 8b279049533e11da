"""Tests for the heuristics engine scoring and failure handling."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from devassist.content import ContentReader
from devassist.models import CodeMetrics, DirectoryNode, FileEvidence, FileKind, FileRecord, ProjectTypeInfo
from devassist.rules import ContentRule, ProjectContext, ProjectRule, RuleMatch, builtin_rules
from devassist.rules.engine import HeuristicsEngine


def _context(tmp_path: Path) -> ProjectContext:
    return ProjectContext(
        root=tmp_path,
        root_files=frozenset(),
        records=(),
        tree=DirectoryNode(name="repo", path="", purpose="project root"),
        project=ProjectTypeInfo(),
        manifests={},
        metrics=CodeMetrics(),
        reader=ContentReader(tmp_path),
    )


def _project_rule(rule_id: str, penalty: int, matches: Sequence[RuleMatch]) -> ProjectRule:
    return ProjectRule(
        id=rule_id,
        category="quality",
        severity="error",
        penalty=penalty,
        description=f"{rule_id} triggered",
        suggestion=f"fix {rule_id}",
        check=lambda context: matches,
    )


def _record(path: str, language: str = "python", tags: tuple = ()) -> FileRecord:
    return FileRecord(
        path=path,
        size=1,
        extension=".py",
        kind=FileKind(language=language, purpose_tags=tags),
        modified=0.0,
    )


def test_score_is_clamped_at_zero(tmp_path: Path) -> None:
    rules = [_project_rule(f"rule-{index}", 40, [RuleMatch()]) for index in range(4)]

    result = HeuristicsEngine(rules).evaluate(_context(tmp_path), {})

    assert result.score == 0
    assert len(result.findings) == 4


def test_score_is_clamped_at_hundred_with_negative_penalties(tmp_path: Path) -> None:
    rules = [_project_rule("bonus", -15, [RuleMatch()])]

    result = HeuristicsEngine(rules).evaluate(_context(tmp_path), {})

    assert result.score == 100


def test_penalty_applies_once_per_rule(tmp_path: Path) -> None:
    rules = [_project_rule("multi", 10, [RuleMatch(file="a"), RuleMatch(file="b")])]

    result = HeuristicsEngine(rules).evaluate(_context(tmp_path), {})

    assert result.score == 90
    assert [finding.file for finding in result.findings] == ["a", "b"]
    assert result.suggestions == ("fix multi",)


def test_failing_rule_is_treated_as_not_triggered(tmp_path: Path) -> None:
    def explode(context: ProjectContext):
        raise OSError("disk vanished")

    broken = ProjectRule(
        id="broken",
        category="quality",
        severity="error",
        penalty=50,
        description="never",
        suggestion="never",
        check=explode,
    )
    healthy = _project_rule("healthy", 10, [RuleMatch()])

    result = HeuristicsEngine([broken, healthy]).evaluate(_context(tmp_path), {})

    assert result.score == 90
    assert [finding.rule_id for finding in result.findings] == ["healthy"]


def test_content_findings_come_from_evidence(tmp_path: Path) -> None:
    engine = HeuristicsEngine([rule for rule in builtin_rules() if rule.id == "sql-injection"])
    record = _record("db.py")
    text = 'query = "SELECT * FROM users WHERE id = " + user_id\n'

    findings = engine.scan_content(record, text)
    evidence = {"db.py": FileEvidence(path="db.py", lines=1, findings=findings)}
    result = engine.evaluate(_context(tmp_path), evidence)

    assert len(result.findings) == 1
    finding = result.findings[0]
    assert finding.rule_id == "sql-injection"
    assert finding.category == "security"
    assert finding.severity == "error"
    assert finding.file == "db.py"
    assert finding.line == 1
    assert result.score == 75
    assert result.security_findings == (finding,)


def test_content_rules_skip_tests_and_other_languages() -> None:
    engine = HeuristicsEngine(builtin_rules())
    text = "el.innerHTML = value\n"

    assert engine.scan_content(_record("tests/test_ui.py", tags=("test",)), text) == ()
    assert engine.scan_content(_record("ui.css", language="css"), text) == ()
    assert [f.rule_id for f in engine.scan_content(_record("ui.js", language="javascript"), text)] == [
        "xss-prevention"
    ]


def test_raising_content_check_is_skipped() -> None:
    def explode(text: str):
        raise ValueError("bad regex state")

    rule = ContentRule(
        id="explodes",
        category="quality",
        severity="warning",
        penalty=10,
        description="never",
        suggestion="never",
        check=explode,
    )

    assert HeuristicsEngine([rule]).scan_content(_record("a.py"), "x = 1\n") == ()


def test_signature_tracks_rule_table() -> None:
    full = HeuristicsEngine(builtin_rules())
    reduced = HeuristicsEngine([rule for rule in builtin_rules() if rule.id != "sql-injection"])

    assert full.signature(500) == HeuristicsEngine(builtin_rules()).signature(500)
    assert full.signature(500) != reduced.signature(500)
    assert full.signature(500) != full.signature(300)
