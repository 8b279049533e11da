"""Tests for the structural (project-level) rules."""

from __future__ import annotations

import json

from devassist import run_analysis
from devassist.rules.project import parse_version


def _rule_ids(result) -> list[str]:
    return [finding.rule_id for finding in result.quality.findings]


def test_documented_tested_project_has_no_structural_findings(repo_builder) -> None:
    repo_builder.write(
        {
            "README.md": "# Demo\n",
            ".gitignore": ".env\n",
            "requirements.txt": "requests==2.31.0\n",
            "app.py": "print('ok')\n",
            "tests/test_app.py": "def test_ok():\n    assert True\n",
        }
    )

    result = run_analysis(repo_builder.path())

    assert _rule_ids(result) == []
    assert result.quality.score == 100


def test_test_named_file_satisfies_missing_tests(repo_builder) -> None:
    repo_builder.write({"README.md": "# x\n", ".gitignore": "", "src/util.test.js": "test('x', () => {})\n"})

    assert "missing-tests" not in _rule_ids(run_analysis(repo_builder.path()))


def test_root_level_test_file_satisfies_missing_tests(repo_builder) -> None:
    repo_builder.write({"README.md": "# x\n", ".gitignore": "", "index.js": "1;\n", "test.js": "require('./index')\n"})

    assert "missing-tests" not in _rule_ids(run_analysis(repo_builder.path()))


def test_lockfile_expected_per_runtime(repo_builder) -> None:
    repo_builder.write({"package.json": "{}"})

    result = run_analysis(repo_builder.path())

    lockfile = [f for f in result.quality.findings if f.rule_id == "missing-lockfile"]
    assert len(lockfile) == 1
    assert "package-lock.json" in lockfile[0].description


def test_env_file_flagged_unless_ignored(repo_builder) -> None:
    repo_builder.write({".env": "SECRET=1\n", ".env.example": "SECRET=\n", ".gitignore": "node_modules/\n"})

    flagged = run_analysis(repo_builder.path())
    env = [f for f in flagged.quality.findings if f.rule_id == "env-file-committed"]
    assert [f.file for f in env] == [".env"]
    assert env[0].category == "security"

    (repo_builder.path() / ".gitignore").write_text(".env\n", encoding="utf-8")
    assert "env-file-committed" not in _rule_ids(run_analysis(repo_builder.path()))


def test_server_framework_without_security_middleware(repo_builder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps({"dependencies": {"express": "^4.18.0"}}),
            "package-lock.json": "{}",
        }
    )

    result = run_analysis(repo_builder.path())
    middleware = [f for f in result.quality.findings if f.rule_id == "missing-security-middleware"]

    assert len(middleware) == 1
    assert middleware[0].severity == "info"
    assert "Express" in middleware[0].description


def test_vulnerable_dependency_versions(repo_builder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"lodash": "^4.17.15", "axios": "^1.6.0"}, "devDependencies": {"minimist": "1.2.0"}}
            ),
            "package-lock.json": "{}",
        }
    )

    result = run_analysis(repo_builder.path())
    vulnerable = [f for f in result.quality.findings if f.rule_id == "vulnerable-dependency"]

    assert len(vulnerable) == 2
    assert all(f.severity == "error" and f.file == "package.json" for f in vulnerable)
    assert any("lodash" in f.description for f in vulnerable)
    assert any("minimist" in f.description for f in vulnerable)
    assert vulnerable[0] in result.security


def test_parse_version_pads_and_ignores_prefixes() -> None:
    assert parse_version("^4.17") == (4, 17, 0)
    assert parse_version(">=1.2.6") == (1, 2, 6)
    assert parse_version("latest") is None
