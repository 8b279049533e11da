"""Tests for the analysis pipeline wiring."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from devassist import __version__, run_analysis
from devassist.config import AnalysisOptions
from devassist.stores import CACHE_RELATIVE_PATH


def test_frontend_manifest_only_project(repo_builder) -> None:
    repo_builder.write({"package.json": json.dumps({"dependencies": {"react": "^18.2.0"}})})

    result = run_analysis(repo_builder.path())
    rule_ids = {finding.rule_id for finding in result.quality.findings}

    assert "React" in result.project.frameworks
    assert result.metrics.complexity == "low"
    assert {"missing-documentation", "missing-tests"} <= rule_ids
    assert "oversized-file" not in rule_ids
    assert "high-complexity" not in rule_ids
    assert result.quality.score < 100
    assert result.metadata.version == __version__


def test_single_sql_injection_costs_its_penalty(repo_builder) -> None:
    repo_builder.write(
        {
            "README.md": "# Demo\n",
            ".gitignore": "",
            "db.py": """
            def find(cursor, user_id):
                query = "SELECT * FROM users WHERE id = " + user_id
                return cursor.execute(query)
            """,
            "tests/test_db.py": "def test_ok():\n    assert True\n",
        }
    )

    result = run_analysis(repo_builder.path())

    assert [f.rule_id for f in result.quality.findings] == ["sql-injection"]
    assert result.quality.findings[0].severity == "error"
    assert result.quality.score == 75
    assert result.security == result.quality.findings
    assert result.recommendations.priority[0] == "security"


def test_unresolved_import_still_completes(repo_builder) -> None:
    repo_builder.write({"src/main.js": "import missing from './missing'\nconsole.log(missing)\n"})

    result = run_analysis(repo_builder.path())

    assert [edge.target for edge in result.graph.unresolved] == ["src/missing"]
    assert result.metrics.total_files == 1
    assert result.metrics.total_lines == 2


def test_run_is_idempotent_apart_from_timestamp(repo_builder, orchestrator) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps({"dependencies": {"express": "4.18.0"}}),
            "src/app.js": "const express = require('express')\nconst app = express()\napp.get('/', (req, res) => res.send(req.query.q))\n",
            "src/util.js": "module.exports = {}\n",
        }
    )

    first = orchestrator.run_analysis(repo_builder.path())
    second = orchestrator.run_analysis(repo_builder.path())

    assert first == second
    assert first.metadata.analyzed_at == "2024-01-02T03:04:05Z"


def test_fatal_root_errors_propagate(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        run_analysis(tmp_path / "nope")

    plain = tmp_path / "file.txt"
    plain.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        run_analysis(plain)


def test_empty_root_produces_a_result(tmp_path: Path) -> None:
    result = run_analysis(tmp_path)

    assert result.metrics.total_files == 0
    assert result.project.type == "generic"
    assert result.structure.conventions == ()
    assert 0 <= result.quality.score <= 100


def test_broken_config_falls_back_to_defaults(repo_builder) -> None:
    repo_builder.write({".devassist.yml": "analysis: [oops\n", "app.py": "x = 1\n"})

    result = run_analysis(repo_builder.path())

    assert result.metrics.total_files == 1


def test_config_disables_rules_and_overrides_win(repo_builder) -> None:
    repo_builder.write(
        {
            ".devassist.yml": "rules:\n  disabled: [missing-documentation]\nanalysis:\n  max_depth: 1\n",
            "a.py": "x = 1\n",
            "pkg/b.py": "x = 1\n",
        }
    )

    shallow = run_analysis(repo_builder.path())
    deep = run_analysis(repo_builder.path(), max_depth=3)

    assert "missing-documentation" not in {f.rule_id for f in shallow.quality.findings}
    assert shallow.metrics.total_files == 1
    assert deep.metrics.total_files == 2


def test_cache_reuses_evidence_without_rereading(repo_builder, monkeypatch) -> None:
    repo_builder.write(
        {
            "main.py": "from . import helpers\nimport os\n",
            "helpers.py": "password = 'hunter2hunter2'\n",
        }
    )
    options = AnalysisOptions(cache=True)
    first = run_analysis(repo_builder.path(), options)
    cache_file = repo_builder.path() / ".devassist" / CACHE_RELATIVE_PATH
    assert cache_file.exists()

    def fail_read(self, rel_path):
        raise AssertionError(f"unexpected read of {rel_path}")

    monkeypatch.setattr("devassist.content.ContentReader._load", fail_read)
    second = run_analysis(repo_builder.path(), options)

    assert second.graph == first.graph
    assert second.quality == first.quality
    assert second.metrics == first.metrics


def test_output_directory_is_never_analyzed(repo_builder) -> None:
    repo_builder.write({"app.py": "x = 1\n", ".devassist/cache/leftover.py": "x = 1\n"})

    result = run_analysis(repo_builder.path())

    assert result.metrics.total_files == 1
