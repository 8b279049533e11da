"""Rule table for the heuristics engine and plugin discovery."""

from __future__ import annotations

from importlib import metadata
from typing import Iterable, List, Sequence, Set

from ..constants import DEFAULT_OVERSIZED_FILE_LINES
from . import checks, project
from .base import ContentRule, ProjectContext, ProjectRule, Rule, RuleMatch

_ENTRY_POINT_GROUP = "devassist.rules"

_SOURCE_LANGUAGES = frozenset({"javascript", "typescript", "vue", "svelte", "python", "php"})
_JS_LANGUAGES = frozenset({"javascript", "typescript", "vue", "svelte"})
_SCRIPT_LANGUAGES = frozenset({"javascript", "typescript", "python"})


def builtin_rules(oversized_file_lines: int = DEFAULT_OVERSIZED_FILE_LINES) -> List[Rule]:
    """Return the built-in rules in evaluation order."""
    return [
        ProjectRule(
            id="missing-documentation",
            category="quality",
            severity="warning",
            penalty=10,
            description="No README found at the project root",
            suggestion="Add a README describing setup, usage and architecture.",
            check=project.missing_documentation,
        ),
        ProjectRule(
            id="missing-tests",
            category="quality",
            severity="error",
            penalty=20,
            description="No test directory or test files found",
            suggestion="Add an automated test suite and run it in CI.",
            check=project.missing_tests,
        ),
        ProjectRule(
            id="missing-lockfile",
            category="quality",
            severity="warning",
            penalty=10,
            description="Dependency lockfile is missing",
            suggestion="Commit the package manager lockfile for reproducible installs.",
            check=project.missing_lockfile,
        ),
        ProjectRule(
            id="missing-gitignore",
            category="quality",
            severity="info",
            penalty=0,
            description="No .gitignore at the project root",
            suggestion="Add a .gitignore so build output and secrets stay out of version control.",
            check=project.missing_gitignore,
        ),
        ProjectRule(
            id="high-complexity",
            category="quality",
            severity="warning",
            penalty=15,
            description="Project size puts it in the high complexity bracket",
            suggestion="Split large areas into well-bounded modules or packages.",
            check=project.high_complexity,
        ),
        ProjectRule(
            id="env-file-committed",
            category="security",
            severity="warning",
            penalty=10,
            description="Environment file present and not ignored",
            suggestion="Keep .env files out of version control and ship a .env.example instead.",
            check=project.env_file_committed,
        ),
        ProjectRule(
            id="missing-security-middleware",
            category="security",
            severity="info",
            penalty=0,
            description="Server framework without common security middleware",
            suggestion="Add security middleware such as helmet, cors and rate limiting.",
            check=project.missing_security_middleware,
        ),
        ProjectRule(
            id="vulnerable-dependency",
            category="security",
            severity="error",
            penalty=20,
            description="Dependency version with known vulnerabilities",
            suggestion="Upgrade vulnerable dependencies to a fixed release.",
            check=project.vulnerable_dependency,
        ),
        ContentRule(
            id="oversized-file",
            category="quality",
            severity="warning",
            penalty=10,
            description="File is too large",
            suggestion="Split large files into smaller, focused modules.",
            check=checks.oversized_file(oversized_file_lines),
            skip_tests=False,
        ),
        ContentRule(
            id="input-validation",
            category="security",
            severity="error",
            penalty=25,
            description="Request input used without validation",
            suggestion="Validate and sanitize all request input before use.",
            check=checks.input_validation,
            languages=_SOURCE_LANGUAGES,
        ),
        ContentRule(
            id="sql-injection",
            category="security",
            severity="error",
            penalty=25,
            description="SQL query built by string concatenation",
            suggestion="Use parameterized queries or an ORM instead of string-built SQL.",
            check=checks.sql_injection,
        ),
        ContentRule(
            id="xss-prevention",
            category="security",
            severity="error",
            penalty=20,
            description="Unescaped output written to markup",
            suggestion="Escape or sanitize content before inserting it into HTML.",
            check=checks.xss_prevention,
            languages=_SOURCE_LANGUAGES,
        ),
        ContentRule(
            id="hardcoded-secret",
            category="security",
            severity="error",
            penalty=30,
            description="Credential-like literal in source",
            suggestion="Load secrets from environment variables or a secret manager.",
            check=checks.hardcoded_secret,
        ),
        ContentRule(
            id="code-injection",
            category="security",
            severity="error",
            penalty=30,
            description="Dynamic code or shell execution",
            suggestion="Avoid eval and shell execution; pass arguments as lists.",
            check=checks.code_injection,
        ),
        ContentRule(
            id="sync-io",
            category="performance",
            severity="warning",
            penalty=10,
            description="Synchronous filesystem I/O in request or async code",
            suggestion="Use fs.promises or async I/O in request handlers.",
            check=checks.sync_io,
            languages=_JS_LANGUAGES,
        ),
        ContentRule(
            id="error-handling",
            category="quality",
            severity="warning",
            penalty=10,
            description="Async code without error handling",
            suggestion="Wrap awaited calls in try/catch or attach rejection handlers.",
            check=checks.error_handling,
            languages=_SCRIPT_LANGUAGES,
        ),
        ContentRule(
            id="function-complexity",
            category="quality",
            severity="warning",
            penalty=10,
            description="Functions are too complex",
            suggestion="Break complex functions into smaller units with early returns.",
            check=checks.function_complexity,
            languages=_SCRIPT_LANGUAGES,
        ),
    ]


def discover_rules(
    disabled: Iterable[str] = (),
    oversized_file_lines: int = DEFAULT_OVERSIZED_FILE_LINES,
) -> List[Rule]:
    """Return built-in rules plus ``devassist.rules`` entry points, minus disabled ids."""
    disabled_set: Set[str] = {name.lower() for name in disabled}
    rules: List[Rule] = []
    seen: Set[str] = set()

    def _add(rule: Rule) -> None:
        key = rule.id.lower()
        if key in disabled_set or key in seen:
            return
        rules.append(rule)
        seen.add(key)

    for rule in builtin_rules(oversized_file_lines):
        _add(rule)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load rule entry point '{entry.name}': {exc}") from exc
        for rule in _coerce_rules(loaded, entry.name):
            _add(rule)

    return rules


def _coerce_rules(obj: object, name: str) -> Sequence[Rule]:
    if isinstance(obj, (ContentRule, ProjectRule)):
        return [obj]
    if callable(obj):
        produced = obj()
        if isinstance(produced, (ContentRule, ProjectRule)):
            return [produced]
        if isinstance(produced, (list, tuple)) and all(
            isinstance(item, (ContentRule, ProjectRule)) for item in produced
        ):
            return list(produced)
    raise TypeError(f"Rule entry point '{name}' must provide a ContentRule or ProjectRule")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ContentRule",
    "ProjectContext",
    "ProjectRule",
    "Rule",
    "RuleMatch",
    "builtin_rules",
    "discover_rules",
]
