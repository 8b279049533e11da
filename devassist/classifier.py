"""File classification: path + optional content sample -> FileKind."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import List, Optional, Tuple

from .constants import DEFAULT_TABLES, AnalysisTables
from .models import FileKind

# (hint, languages it applies to, content pattern); first match wins.
_FRAMEWORK_MARKERS: Tuple[Tuple[str, Tuple[str, ...], re.Pattern[str]], ...] = (
    ("next", ("javascript", "typescript"), re.compile(r"from\s+['\"]next/|getServerSideProps|getStaticProps")),
    ("react", ("javascript", "typescript"), re.compile(r"from\s+['\"]react['\"]|useState\(|useEffect\(|React\.")),
    ("vue", ("javascript", "typescript", "vue"), re.compile(r"from\s+['\"]vue['\"]|defineComponent\(|<template>")),
    ("express", ("javascript", "typescript"), re.compile(r"require\(\s*['\"]express['\"]\s*\)|from\s+['\"]express['\"]|express\.Router\(")),
    ("django", ("python",), re.compile(r"from\s+django\b|import\s+django\b")),
    ("flask", ("python",), re.compile(r"from\s+flask\s+import|Flask\(__name__\)")),
    ("fastapi", ("python",), re.compile(r"from\s+fastapi\s+import|FastAPI\(")),
    ("spring", ("java", "kotlin"), re.compile(r"org\.springframework|@SpringBootApplication|@RestController")),
    ("laravel", ("php",), re.compile(r"Illuminate\\")),
    ("wordpress", ("php",), re.compile(r"\badd_action\(|\bwp_enqueue_script\(")),
)

_TEST_NAME = re.compile(
    r"(^test_.*|^(test|tests|spec)\.[^.]+$|.*_test\.[^.]+$|.*\.(test|spec)\.[^.]+$"
    r"|^[A-Z]\w*Tests?\.(java|kt|cs|scala|swift)$)"
)
_TEST_DIRS = {"test", "tests", "__tests__", "spec", "e2e"}

_ROUTING_CONTENT = re.compile(
    r"\b(app|router)\.(get|post|put|patch|delete|use)\(|@(app|router)\.(get|post|put|patch|delete|route)\(|urlpatterns\s*="
)
_DATABASE_CONTENT = re.compile(
    r"\b(SELECT|INSERT|UPDATE|DELETE)\s|mongoose\.|sequelize|\.query\(|cursor\.execute\(|models\.Model\b|prisma\.",
)
_COMPONENT_CONTENT = re.compile(r"\breturn\s*\(?\s*<[A-Za-z]|export\s+default\s+function\s+[A-Z]")

_PATH_TAGS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("routing", ("routes", "router", "routers", "api", "controllers", "pages")),
    ("database", ("db", "database", "migrations", "repositories")),
    ("component", ("components",)),
    ("model", ("models", "entities", "schemas")),
    ("service", ("services",)),
    ("utility", ("utils", "helpers", "lib")),
)

_CONFIG_NAMES = {
    "package.json",
    "tsconfig.json",
    "pyproject.toml",
    "setup.cfg",
    "Cargo.toml",
    "go.mod",
    "composer.json",
    "Dockerfile",
    "Makefile",
}


class FileClassifier:
    """Maps a file path and an optional content sample to a FileKind.

    Classification never raises: unknown extensions produce ``language="unknown"``
    with no purpose tags.
    """

    def __init__(self, tables: AnalysisTables = DEFAULT_TABLES) -> None:
        self.tables = tables

    def language_for(self, path: str) -> str:
        pure = PurePosixPath(path)
        by_name = self.tables.language_by_filename.get(pure.name)
        if by_name:
            return by_name
        return self.tables.language_by_extension.get(pure.suffix.lower(), "unknown")

    def classify(self, path: str, sample: Optional[str] = None) -> FileKind:
        language = self.language_for(path)
        if language == "unknown":
            return FileKind()

        pure = PurePosixPath(path)
        parts = [part.lower() for part in pure.parts[:-1]]
        name = pure.name
        tags: List[str] = []

        if _TEST_NAME.match(name) or any(part in _TEST_DIRS for part in parts):
            tags.append("test")
        for tag, directories in _PATH_TAGS:
            if any(part in directories for part in parts):
                tags.append(tag)
        if name in _CONFIG_NAMES or pure.stem.lower() in {"config", "settings"} or ".config." in name:
            tags.append("config")
        if language in {"markdown", "restructuredtext"}:
            tags.append("docs")
        if language == "css":
            tags.append("style")

        framework_hint: Optional[str] = None
        if sample:
            framework_hint = _framework_hint(language, sample)
            if _ROUTING_CONTENT.search(sample):
                tags.append("routing")
            if _DATABASE_CONTENT.search(sample):
                tags.append("database")
            if language in {"javascript", "typescript"} and _COMPONENT_CONTENT.search(sample):
                tags.append("component")

        return FileKind(
            language=language,
            framework_hint=framework_hint,
            purpose_tags=tuple(dict.fromkeys(tags)),
        )


def _framework_hint(language: str, sample: str) -> Optional[str]:
    for hint, languages, pattern in _FRAMEWORK_MARKERS:
        if language in languages and pattern.search(sample):
            return hint
    return None


__all__ = ["FileClassifier"]
