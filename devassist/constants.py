"""Static lookup tables used by the analysis stages.

All tables are bundled into :class:`AnalysisTables` so components receive
them as a constructor argument; tests can substitute their own tables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Pattern, Tuple

DEFAULT_IGNORE_DIRS: FrozenSet[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "bower_components",
        "vendor",
        "dist",
        "build",
        "out",
        "target",
        "coverage",
        ".nyc_output",
        ".next",
        ".nuxt",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".tox",
        ".venv",
        "venv",
        ".idea",
        ".devassist",
    }
)

DEFAULT_MAX_DEPTH = 4
DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_OVERSIZED_FILE_LINES = 500

_LANGUAGE_BY_EXTENSION = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".vue": "vue",
    ".svelte": "svelte",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".hh": "cpp",
    ".swift": "swift",
    ".scala": "scala",
    ".sh": "shell",
    ".bash": "shell",
    ".ps1": "powershell",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "css",
    ".sass": "css",
    ".less": "css",
    ".sql": "sql",
    ".md": "markdown",
    ".rst": "restructuredtext",
    ".txt": "text",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".xml": "xml",
    ".ini": "ini",
    ".cfg": "ini",
    ".png": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".gif": "image",
    ".svg": "image",
    ".ico": "image",
    ".webp": "image",
    ".woff": "font",
    ".woff2": "font",
    ".ttf": "font",
    ".eot": "font",
    ".zip": "archive",
    ".gz": "archive",
    ".tar": "archive",
    ".pdf": "document",
}

_LANGUAGE_BY_FILENAME = {
    "Dockerfile": "dockerfile",
    "Makefile": "makefile",
    "Gemfile": "ruby",
    "Rakefile": "ruby",
    "Jenkinsfile": "groovy",
}

# Source languages whose lines are counted; assets and data files are not.
_COUNTABLE_LANGUAGES = frozenset(
    {
        "python",
        "javascript",
        "typescript",
        "vue",
        "svelte",
        "java",
        "kotlin",
        "go",
        "rust",
        "ruby",
        "php",
        "csharp",
        "c",
        "cpp",
        "swift",
        "scala",
    }
)

_DIRECTORY_PURPOSES = {
    "src": "source code",
    "source": "source code",
    "app": "application code",
    "lib": "library code",
    "components": "UI components",
    "pages": "pages",
    "routes": "routing",
    "api": "API endpoints",
    "utils": "utility functions",
    "helpers": "helper functions",
    "hooks": "UI hooks",
    "services": "service layer",
    "models": "data models",
    "entities": "data models",
    "schemas": "data schemas",
    "views": "views",
    "templates": "templates",
    "controllers": "controllers",
    "middleware": "middleware",
    "database": "database access",
    "db": "database access",
    "migrations": "database migrations",
    "config": "configuration",
    "public": "static assets",
    "static": "static assets",
    "assets": "assets",
    "styles": "stylesheets",
    "css": "stylesheets",
    "scss": "stylesheets",
    "tests": "tests",
    "test": "tests",
    "__tests__": "tests",
    "spec": "test specifications",
    "e2e": "end-to-end tests",
    "docs": "documentation",
    "documentation": "documentation",
    "examples": "examples",
    "scripts": "scripts",
    "tools": "tooling",
    "bin": "executables",
    "types": "type definitions",
    "typings": "type definitions",
    "packages": "workspace packages",
    "apps": "workspace applications",
}

GENERIC_DIRECTORY_PURPOSE = "generic directory"

# (label, required top-level directory names); every name in the set must be present.
_ARCHITECTURE_PATTERNS: Tuple[Tuple[str, FrozenSet[str]], ...] = (
    ("MVC", frozenset({"models", "views", "controllers"})),
    ("Component-Based", frozenset({"components"})),
    ("Layered", frozenset({"services", "models"})),
    ("Layered", frozenset({"api", "database"})),
    ("Next.js Structure", frozenset({"pages", "public"})),
    ("Microservices", frozenset({"services", "api"})),
    ("Monorepo", frozenset({"packages", "apps"})),
)

_NAMING_CONVENTIONS: Tuple[Tuple[str, str], ...] = (
    ("camelCase", r"^[a-z][a-zA-Z0-9]*$"),
    ("kebab-case", r"^[a-z][a-z0-9-]*$"),
    ("snake_case", r"^[a-z][a-z0-9_]*$"),
    ("PascalCase", r"^[A-Z][a-zA-Z0-9]*$"),
)

# Runtime detection, checked in order; the first runtime whose manifest is present wins.
_RUNTIME_MANIFESTS: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    ("go", "go", ("go.mod",)),
    ("rust", "rust", ("Cargo.toml",)),
    ("python", "python", ("pyproject.toml", "requirements.txt", "setup.py", "setup.cfg", "Pipfile")),
    ("node", "javascript", ("package.json",)),
    ("java", "java", ("pom.xml", "build.gradle", "build.gradle.kts")),
    ("php", "php", ("composer.json",)),
    ("ruby", "ruby", ("Gemfile",)),
)

# Per-runtime framework tables: (label, dependency names); each label is reported once.
_FRAMEWORKS: Mapping[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    "node": (
        ("Next.js", ("next",)),
        ("React", ("react",)),
        ("Vue", ("vue",)),
        ("Nuxt", ("nuxt",)),
        ("Angular", ("angular", "@angular/core")),
        ("Svelte", ("svelte",)),
        ("Express", ("express",)),
        ("Koa", ("koa",)),
        ("NestJS", ("nestjs", "@nestjs/core")),
        ("Fastify", ("fastify",)),
    ),
    "python": (
        ("Django", ("django",)),
        ("Flask", ("flask",)),
        ("FastAPI", ("fastapi",)),
    ),
    "java": (("Spring Boot", ("spring-boot", "springframework")),),
    "php": (
        ("Laravel", ("laravel/framework",)),
        ("Symfony", ("symfony/framework-bundle", "symfony/symfony")),
    ),
    "ruby": (("Rails", ("rails",)),),
    "rust": (
        ("Actix", ("actix-web",)),
        ("Axum", ("axum",)),
        ("Rocket", ("rocket",)),
    ),
    "go": (
        ("Gin", ("github.com/gin-gonic/gin",)),
        ("Echo", ("github.com/labstack/echo/v4",)),
    ),
}

SERVER_FRAMEWORKS = frozenset({"Express", "Koa", "NestJS", "Fastify"})

_BUILD_TOOL_FILES: Tuple[Tuple[str, str], ...] = (
    ("webpack.config.js", "webpack"),
    ("webpack.config.ts", "webpack"),
    ("vite.config.js", "vite"),
    ("vite.config.ts", "vite"),
    ("rollup.config.js", "rollup"),
    ("gulpfile.js", "gulp"),
    ("Gruntfile.js", "grunt"),
    ("Makefile", "make"),
    ("CMakeLists.txt", "cmake"),
)

_LOCKFILES: Mapping[str, Tuple[str, ...]] = {
    "node": ("package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb"),
    "rust": ("Cargo.lock",),
    "go": ("go.sum",),
    "php": ("composer.lock",),
    "ruby": ("Gemfile.lock",),
}

_SECURITY_PACKAGES = (
    "helmet",
    "cors",
    "bcrypt",
    "bcryptjs",
    "jsonwebtoken",
    "express-rate-limit",
    "express-validator",
    "csurf",
    "django-cors-headers",
    "flask-talisman",
    "flask-wtf",
)

# Dependency name -> first safe version.
_VULNERABLE_BELOW = {
    "lodash": "4.17.21",
    "minimist": "1.2.6",
    "jquery": "3.5.0",
    "axios": "0.21.1",
    "node-fetch": "2.6.7",
}

_JS_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".vue", ".mjs", ".cjs")


@dataclass(frozen=True)
class ResolutionProfile:
    """Candidate suffixes tried, in order, when resolving a module reference."""

    extensions: Tuple[str, ...]
    index_names: Tuple[str, ...] = ("index",)


_RESOLUTION_PROFILES = {
    "javascript": ResolutionProfile(_JS_EXTENSIONS),
    "typescript": ResolutionProfile(_JS_EXTENSIONS),
    "vue": ResolutionProfile(_JS_EXTENSIONS),
    "svelte": ResolutionProfile(_JS_EXTENSIONS + (".svelte",)),
    "python": ResolutionProfile((".py", ".pyi"), ("__init__",)),
    "php": ResolutionProfile((".php",), ("index",)),
    "ruby": ResolutionProfile((".rb",), ()),
    "c": ResolutionProfile((".h", ".c"), ()),
    "cpp": ResolutionProfile((".h", ".hpp", ".cpp"), ()),
}


def _freeze(mapping):
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class AnalysisTables:
    """Immutable bundle of every static table the analyzers consult."""

    language_by_extension: Mapping[str, str] = field(
        default_factory=lambda: _freeze(_LANGUAGE_BY_EXTENSION)
    )
    language_by_filename: Mapping[str, str] = field(
        default_factory=lambda: _freeze(_LANGUAGE_BY_FILENAME)
    )
    countable_languages: FrozenSet[str] = _COUNTABLE_LANGUAGES
    directory_purposes: Mapping[str, str] = field(
        default_factory=lambda: _freeze(_DIRECTORY_PURPOSES)
    )
    architecture_patterns: Tuple[Tuple[str, FrozenSet[str]], ...] = _ARCHITECTURE_PATTERNS
    naming_conventions: Tuple[Tuple[str, Pattern[str]], ...] = field(
        default_factory=lambda: tuple(
            (name, re.compile(expr)) for name, expr in _NAMING_CONVENTIONS
        )
    )
    runtime_manifests: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = _RUNTIME_MANIFESTS
    frameworks: Mapping[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = field(
        default_factory=lambda: _freeze(_FRAMEWORKS)
    )
    build_tool_files: Tuple[Tuple[str, str], ...] = _BUILD_TOOL_FILES
    lockfiles: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _freeze(_LOCKFILES))
    security_packages: Tuple[str, ...] = _SECURITY_PACKAGES
    vulnerable_below: Mapping[str, str] = field(
        default_factory=lambda: _freeze(_VULNERABLE_BELOW)
    )
    resolution_profiles: Mapping[str, ResolutionProfile] = field(
        default_factory=lambda: _freeze(_RESOLUTION_PROFILES)
    )

    def purpose_for(self, directory_name: str) -> str:
        return self.directory_purposes.get(directory_name.lower(), GENERIC_DIRECTORY_PURPOSE)

    def is_countable(self, language: str) -> bool:
        return language in self.countable_languages


DEFAULT_TABLES = AnalysisTables()


__all__ = [
    "AnalysisTables",
    "DEFAULT_IGNORE_DIRS",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_OVERSIZED_FILE_LINES",
    "DEFAULT_TABLES",
    "GENERIC_DIRECTORY_PURPOSE",
    "ResolutionProfile",
    "SERVER_FRAMEWORKS",
]
