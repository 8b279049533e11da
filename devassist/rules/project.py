"""Structural checks that look at the project as a whole."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..constants import SERVER_FRAMEWORKS
from ..walker import is_ignored, parse_ignore_lines
from .base import ProjectContext, RuleMatch

_VERSION_NUMBER = re.compile(r"(\d+(?:\.\d+)*)")
_ENV_TEMPLATES = {".env.example", ".env.sample", ".env.template", ".env.dist"}


def missing_documentation(context: ProjectContext) -> Sequence[RuleMatch]:
    if any(name.lower().startswith("readme") for name in context.root_files):
        return ()
    return (RuleMatch(),)


def missing_tests(context: ProjectContext) -> Sequence[RuleMatch]:
    if context.has_test_directory():
        return ()
    if any("test" in record.kind.purpose_tags for record in context.records):
        return ()
    return (RuleMatch(),)


def missing_lockfile(context: ProjectContext) -> Sequence[RuleMatch]:
    runtime = "node" if context.project.type == "next-js" else context.project.type
    lockfiles = context.tables.lockfiles.get(runtime)
    if not lockfiles or any(name in context.root_files for name in lockfiles):
        return ()
    return (RuleMatch(detail=f"expected one of {', '.join(lockfiles)}"),)


def missing_gitignore(context: ProjectContext) -> Sequence[RuleMatch]:
    if ".gitignore" in context.root_files:
        return ()
    return (RuleMatch(),)


def high_complexity(context: ProjectContext) -> Sequence[RuleMatch]:
    if context.metrics.complexity != "high":
        return ()
    return (
        RuleMatch(
            detail=f"{context.metrics.total_files} files, {context.metrics.total_lines} lines"
        ),
    )


def env_file_committed(context: ProjectContext) -> Sequence[RuleMatch]:
    candidates = sorted(
        name
        for name in context.root_files
        if (name == ".env" or name.startswith(".env.")) and name not in _ENV_TEMPLATES
    )
    if not candidates:
        return ()
    gitignore = context.reader.read(".gitignore") if ".gitignore" in context.root_files else None
    rules = parse_ignore_lines(gitignore.splitlines()) if gitignore else []
    return tuple(
        RuleMatch(detail=name, file=name)
        for name in candidates
        if not is_ignored(name, False, rules)
    )


def missing_security_middleware(context: ProjectContext) -> Sequence[RuleMatch]:
    servers = [name for name in context.project.frameworks if name in SERVER_FRAMEWORKS]
    if not servers:
        return ()
    if any(pkg in context.dependency_names for pkg in context.tables.security_packages):
        return ()
    return (RuleMatch(detail=", ".join(servers)),)


def vulnerable_dependency(context: ProjectContext) -> Sequence[RuleMatch]:
    matches: List[RuleMatch] = []
    for manifest_name, signal in sorted(context.manifests.items()):
        for name, declared in sorted(signal.all_dependencies().items()):
            floor = context.tables.vulnerable_below.get(name.lower())
            if floor is None:
                continue
            version = parse_version(declared)
            if version is None or version >= parse_version(floor):
                continue
            matches.append(
                RuleMatch(detail=f"{name} {declared} (fixed in {floor})", file=manifest_name)
            )
    return tuple(matches)


def parse_version(spec: str) -> Optional[Tuple[int, ...]]:
    """Return the first dotted number in a version spec, padded to three parts."""
    match = _VERSION_NUMBER.search(spec)
    if match is None:
        return None
    parts = tuple(int(part) for part in match.group(1).split("."))
    return parts + (0,) * (3 - len(parts)) if len(parts) < 3 else parts


__all__ = [
    "env_file_committed",
    "high_complexity",
    "missing_documentation",
    "missing_gitignore",
    "missing_lockfile",
    "missing_security_middleware",
    "missing_tests",
    "parse_version",
    "vulnerable_dependency",
]
